"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Cross-field rules (authority URL, credential
verification) are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment and .env.

    Everything has a default; validate_authority_and_credentials rejects
    combinations that cannot work (e.g. signature verification without a key).
    """

    # App
    app_name: str = "authcore"
    app_version: str = "1.0.0"
    debug: bool = False

    # Authority (permission catalog, codec, role checks, transfers)
    authority_base_url: str = "http://localhost:3000/api"
    authority_timeout_seconds: float = 10.0
    authority_token_header: str = "x-access-token"

    # Credential: payload is read client side; verification is optional
    credential_secret_key: SecretStr | None = None
    credential_algorithm: str = "HS256"
    credential_verify_signature: bool = False

    # Permission model
    super_user_code: str = "a"
    sys_admin_key: str = "sys_admin"

    # Redis Cache
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    cache_ttl_catalog: int = 86_400  # 1 day
    cache_ttl_role_checks: int = 300

    # Skip the role-check round trip when the target is the caller
    role_check_self_shortcut: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_authority_and_credentials(self) -> "Settings":
        """Validate authority endpoint, permission model and credential options."""
        if not self.authority_base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"authority_base_url must be an http(s) URL, got: {self.authority_base_url!r}"
            )
        if self.authority_timeout_seconds <= 0:
            raise ValueError("authority_timeout_seconds must be positive")
        if len(self.super_user_code) != 1:
            raise ValueError(
                f"super_user_code must be a single character, got: {self.super_user_code!r}"
            )
        if self.credential_verify_signature:
            has_key = (
                self.credential_secret_key
                and self.credential_secret_key.get_secret_value()
            )
            if not has_key:
                raise ValueError(
                    "CREDENTIAL_SECRET_KEY is required when CREDENTIAL_VERIFY_SIGNATURE is true."
                )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (single instance per process).

    In tests, call get_settings.cache_clear() after changing env vars so the
    next call picks up the new values.
    """
    return Settings()
