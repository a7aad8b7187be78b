"""Permission catalog: the known permissions and their category grouping.

The catalog is fetched once per session, cached, and read-only afterwards.
A failed load yields an empty catalog (fail-closed: nothing selectable or
displayable) instead of an exception.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from authcore.application.interfaces.services import ICacheService, IPermissionSource
from authcore.domain.entities.permission import Permission
from authcore.domain.exceptions import (
    AuthcoreException,
    CatalogUnavailableException,
    ValidationException,
)

logger = logging.getLogger(__name__)


class PermissionCatalog:
    """Immutable mapping key -> Permission, in catalog order.

    Invariants: no two permissions share a code or a key. Category order is
    the order in which categories first appear in the catalog.
    """

    def __init__(
        self,
        permissions: Iterable[Permission] = (),
        error: CatalogUnavailableException | None = None,
    ) -> None:
        by_key: dict[str, Permission] = {}
        by_code: dict[str, Permission] = {}
        for perm in permissions:
            if perm.key in by_key:
                raise CatalogUnavailableException(f"duplicate permission key {perm.key!r}")
            if perm.code in by_code:
                raise CatalogUnavailableException(
                    f"duplicate permission code {perm.code!r} ({by_code[perm.code].key}, {perm.key})"
                )
            by_key[perm.key] = perm
            by_code[perm.code] = perm
        self._by_key = by_key
        self._by_code = by_code
        self._by_category: dict[str, list[Permission]] = {}
        for perm in by_key.values():
            self._by_category.setdefault(perm.category, []).append(perm)
        self.error = error

    @classmethod
    def empty(cls, error: CatalogUnavailableException | None = None) -> PermissionCatalog:
        """Catalog with no permissions; error records why, if it came from a failed load."""
        return cls((), error=error)

    @classmethod
    def from_entries(cls, entries: Iterable[Mapping[str, Any]]) -> PermissionCatalog:
        """Build from raw entries ({code, key, name, description, category}).

        Raises:
            CatalogUnavailableException: If an entry is invalid or codes/keys collide.
        """
        try:
            permissions = [
                Permission(
                    code=entry["code"],
                    key=entry["key"],
                    name=entry.get("name") or "",
                    description=entry.get("description") or "",
                    category=entry.get("category") or "",
                )
                for entry in entries
            ]
        except (KeyError, TypeError, ValidationException) as e:
            raise CatalogUnavailableException(f"invalid catalog entry: {e}") from e
        return cls(permissions)

    def to_entries(self) -> list[dict[str, str]]:
        """Serializable entries in catalog order (for caching)."""
        return [
            {
                "code": p.code,
                "key": p.key,
                "name": p.name,
                "description": p.description,
                "category": p.category,
            }
            for p in self._by_key.values()
        ]

    @property
    def is_empty(self) -> bool:
        return not self._by_key

    def __len__(self) -> int:
        return len(self._by_key)

    def __iter__(self) -> Iterator[Permission]:
        return iter(self._by_key.values())

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def get(self, key: str) -> Permission | None:
        """Permission for key, or None."""
        return self._by_key.get(key)

    def by_code(self, code: str) -> Permission | None:
        """Permission for a single-character code, or None."""
        return self._by_code.get(code)

    def key_for_code(self, code: str) -> str | None:
        """Permission key for a code, or None."""
        perm = self._by_code.get(code)
        return perm.key if perm else None

    def keys(self) -> list[str]:
        """All keys in catalog order."""
        return list(self._by_key)

    def categories(self) -> list[str]:
        """Category labels in first-appearance order."""
        return list(self._by_category)

    def permissions_in(self, category: str) -> list[Permission]:
        """Permissions of one category in catalog order ([] if unknown)."""
        return list(self._by_category.get(category, ()))

    def by_category(self) -> dict[str, list[Permission]]:
        """Mapping category -> ordered permissions (stable across reloads)."""
        return {category: list(perms) for category, perms in self._by_category.items()}


class PermissionCatalogLoader:
    """Loads the catalog from the authority, with cache and session memo.

    A successful load is memoized until refresh() or discard(); a failed load
    returns an empty catalog and is not memoized, so the next call retries.
    """

    def __init__(
        self,
        source: IPermissionSource,
        cache: ICacheService | None = None,
        cache_key: str = "permission_catalog:authcore",
        cache_ttl: int = 86_400,
    ) -> None:
        self.source = source
        self.cache = cache
        self.cache_key = cache_key
        self.cache_ttl = cache_ttl
        self._catalog: PermissionCatalog | None = None
        self._lock = asyncio.Lock()

    @property
    def current(self) -> PermissionCatalog | None:
        """The memoized catalog, or None before the first successful load."""
        return self._catalog

    async def load(self, token: str) -> PermissionCatalog:
        """Return the session catalog; empty (with .error set) on failure."""
        try:
            return await self.load_or_raise(token)
        except CatalogUnavailableException as e:
            logger.warning("Permission catalog unavailable, using empty catalog: %s", e.message)
            return PermissionCatalog.empty(error=e)

    async def load_or_raise(self, token: str) -> PermissionCatalog:
        """Return the session catalog.

        Raises:
            CatalogUnavailableException: On fetch or parse failure.
        """
        async with self._lock:
            if self._catalog is not None:
                return self._catalog
            catalog = await self._from_cache()
            if catalog is None:
                catalog = await self._fetch(token)
                if self.cache and self.cache.is_available():
                    await self.cache.set(self.cache_key, catalog.to_entries(), ttl=self.cache_ttl)
            self._catalog = catalog
            logger.info(
                "Permission catalog loaded: %s permissions in %s categories",
                len(catalog),
                len(catalog.categories()),
            )
            return catalog

    async def refresh(self, token: str) -> PermissionCatalog:
        """Drop the memo and the cached copy, then load again."""
        self.discard()
        if self.cache and self.cache.is_available():
            await self.cache.delete(self.cache_key)
        return await self.load(token)

    def discard(self) -> None:
        """Forget the session catalog (logout)."""
        self._catalog = None

    async def _from_cache(self) -> PermissionCatalog | None:
        if not (self.cache and self.cache.is_available()):
            return None
        cached = await self.cache.get(self.cache_key)
        if not cached:
            return None
        try:
            return PermissionCatalog.from_entries(cached)
        except CatalogUnavailableException:
            logger.warning("Discarding invalid cached permission catalog")
            await self.cache.delete(self.cache_key)
            return None

    async def _fetch(self, token: str) -> PermissionCatalog:
        try:
            entries = await self.source.fetch_permissions(token)
        except AuthcoreException as e:
            raise CatalogUnavailableException(e.message) from e
        return PermissionCatalog.from_entries(entry.model_dump() for entry in entries)
