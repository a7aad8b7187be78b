"""Bearer credential decoding.

The client reads the credential's claims to drive UI gating; the authority
remains the enforcement point. When a verification key is configured,
signature and expiry are checked as well.
"""

from typing import Any

from jose import JWTError, jwt

from authcore.core.config import Settings, get_settings
from authcore.domain.entities.principal import Principal
from authcore.domain.exceptions import AuthenticationException


def read_claims(token: str, settings: Settings | None = None) -> dict[str, Any]:
    """Return the credential payload.

    Without signature verification only the claims are parsed (advisory);
    with it, signature and exp are enforced.

    Raises:
        AuthenticationException: If the token is malformed or fails verification.
    """
    settings = settings or get_settings()
    if not token:
        raise AuthenticationException("Missing credential")
    try:
        if settings.credential_verify_signature and settings.credential_secret_key:
            return jwt.decode(
                token,
                settings.credential_secret_key.get_secret_value(),
                algorithms=[settings.credential_algorithm],
                options={"require_exp": True},
            )
        return jwt.get_unverified_claims(token)
    except JWTError as e:
        raise AuthenticationException(f"Invalid credential: {e!s}") from e


def decode_principal(token: str, settings: Settings | None = None) -> Principal:
    """Decode a bearer credential into a Principal.

    Raises:
        AuthenticationException: If the token is invalid, expired, or has no id.
    """
    claims = read_claims(token, settings)
    principal = Principal.from_claims(claims, token=token)
    if principal.is_expired():
        raise AuthenticationException("Credential expired")
    return principal
