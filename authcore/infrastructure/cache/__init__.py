"""Cache: Redis service and cache key utilities."""

from authcore.infrastructure.cache.keys import (
    catalog_key,
    role_check_key,
    role_check_pattern,
)
from authcore.infrastructure.cache.redis_cache import CacheService

__all__ = [
    "CacheService",
    "catalog_key",
    "role_check_key",
    "role_check_pattern",
]
