"""Cache key builders. Single place for key format.

Key components (user ids, company ids, codes) must not contain
CACHE_KEY_SEP to avoid ambiguous or colliding keys.
"""

from collections.abc import Iterable

from authcore.core.constants import (
    CACHE_KEY_SEP,
    CACHE_PREFIX_CATALOG,
    CACHE_PREFIX_ROLE_CHECK,
)


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value contains the cache key separator."""
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def catalog_key(app_name: str) -> str:
    """Cache key for the permission catalog (one per deployment)."""
    _validate_key_component(app_name, "app_name")
    return f"{CACHE_PREFIX_CATALOG}{CACHE_KEY_SEP}{app_name}"


def role_check_key(user_id: str, company_id: str, codes: Iterable[str]) -> str:
    """Cache key for one role-check question; code order does not matter."""
    normalized = sorted(set(codes))
    _validate_key_component(user_id, "user_id")
    _validate_key_component(company_id, "company_id")
    for code in normalized:
        _validate_key_component(code, "code")
    return CACHE_KEY_SEP.join(
        [CACHE_PREFIX_ROLE_CHECK, user_id, company_id, ",".join(normalized)]
    )


def role_check_pattern(user_id: str, company_id: str | None = None) -> str:
    """Glob pattern for a user's cached role checks (optionally one company)."""
    _validate_key_component(user_id, "user_id")
    if company_id is None:
        return f"{CACHE_PREFIX_ROLE_CHECK}{CACHE_KEY_SEP}{user_id}{CACHE_KEY_SEP}*"
    _validate_key_component(company_id, "company_id")
    return CACHE_KEY_SEP.join([CACHE_PREFIX_ROLE_CHECK, user_id, company_id, "*"])
