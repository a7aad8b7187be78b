"""PermissionCatalog and PermissionCatalogLoader tests (mocked authority, fake cache)."""

from unittest.mock import AsyncMock

import pytest

from authcore.application.services.permission_catalog import (
    PermissionCatalog,
    PermissionCatalogLoader,
)
from authcore.domain.entities.permission import Permission
from authcore.domain.exceptions import (
    AuthorityUnreachableException,
    CatalogUnavailableException,
)
from authcore.infrastructure.cache import CacheService
from authcore.schemas.permission import PermissionEntry


def _source(entries: list[dict[str, str]]) -> AsyncMock:
    source = AsyncMock()
    source.fetch_permissions = AsyncMock(
        return_value=[PermissionEntry(**entry) for entry in entries]
    )
    return source


class TestPermissionCatalog:
    def test_lookups(self, catalog: PermissionCatalog) -> None:
        assert len(catalog) == 3
        assert "view" in catalog
        assert "delete" not in catalog
        assert catalog.get("edit").code == "2"
        assert catalog.by_code("9").key == "sys_admin"
        assert catalog.key_for_code("1") == "view"
        assert catalog.key_for_code("z") is None
        assert catalog.keys() == ["view", "edit", "sys_admin"]

    def test_by_category_follows_catalog_order(self, catalog: PermissionCatalog) -> None:
        grouped = catalog.by_category()
        assert list(grouped) == ["Basic", "Admin"]
        assert [p.key for p in grouped["Basic"]] == ["view", "edit"]
        assert catalog.permissions_in("Missing") == []

    def test_duplicate_code_rejected(self) -> None:
        with pytest.raises(CatalogUnavailableException, match="duplicate permission code"):
            PermissionCatalog(
                [Permission(code="1", key="view"), Permission(code="1", key="edit")]
            )

    def test_duplicate_key_rejected(self) -> None:
        with pytest.raises(CatalogUnavailableException, match="duplicate permission key"):
            PermissionCatalog(
                [Permission(code="1", key="view"), Permission(code="2", key="view")]
            )

    def test_invalid_entry_rejected(self) -> None:
        with pytest.raises(CatalogUnavailableException):
            PermissionCatalog.from_entries([{"code": "12", "key": "view"}])
        with pytest.raises(CatalogUnavailableException):
            PermissionCatalog.from_entries([{"key": "view"}])

    def test_to_entries_round_trip(self, catalog: PermissionCatalog) -> None:
        rebuilt = PermissionCatalog.from_entries(catalog.to_entries())
        assert list(rebuilt) == list(catalog)

    def test_empty_carries_error(self) -> None:
        err = CatalogUnavailableException("HTTP 503")
        empty = PermissionCatalog.empty(err)
        assert empty.is_empty
        assert empty.error is err
        assert empty.categories() == []


class TestPermissionCatalogLoader:
    @pytest.mark.asyncio
    async def test_load_fetches_and_memoizes(self, catalog_entries) -> None:
        source = _source(catalog_entries)
        loader = PermissionCatalogLoader(source)
        first = await loader.load("tok")
        second = await loader.load("tok")
        assert first is second
        assert loader.current is first
        assert first.keys() == ["view", "edit", "sys_admin"]
        source.fetch_permissions.assert_awaited_once_with("tok")

    @pytest.mark.asyncio
    async def test_load_failure_yields_empty_catalog(self) -> None:
        """A failed load is fail-closed: empty catalog with the error attached."""
        source = AsyncMock()
        source.fetch_permissions = AsyncMock(
            side_effect=AuthorityUnreachableException("fetch_permissions", "HTTP 503", 503)
        )
        loader = PermissionCatalogLoader(source)
        result = await loader.load("tok")
        assert result.is_empty
        assert isinstance(result.error, CatalogUnavailableException)
        assert loader.current is None

    @pytest.mark.asyncio
    async def test_failed_load_is_retried(self, catalog_entries) -> None:
        source = AsyncMock()
        source.fetch_permissions = AsyncMock(
            side_effect=[
                AuthorityUnreachableException("fetch_permissions", "timeout"),
                [PermissionEntry(**e) for e in catalog_entries],
            ]
        )
        loader = PermissionCatalogLoader(source)
        assert (await loader.load("tok")).is_empty
        assert len(await loader.load("tok")) == 3

    @pytest.mark.asyncio
    async def test_load_or_raise_on_duplicate_codes(self) -> None:
        source = _source(
            [{"code": "1", "key": "view"}, {"code": "1", "key": "edit"}]
        )
        loader = PermissionCatalogLoader(source)
        with pytest.raises(CatalogUnavailableException):
            await loader.load_or_raise("tok")

    @pytest.mark.asyncio
    async def test_fetched_catalog_is_cached(self, catalog_entries, fake_cache) -> None:
        loader = PermissionCatalogLoader(
            _source(catalog_entries), cache=fake_cache, cache_key="cat", cache_ttl=86_400
        )
        await loader.load("tok")
        assert fake_cache.ttls["cat"] == 86_400
        assert [e["key"] for e in fake_cache.store["cat"]] == ["view", "edit", "sys_admin"]

    @pytest.mark.asyncio
    async def test_cached_catalog_skips_fetch(self, catalog_entries, fake_cache) -> None:
        fake_cache.store["cat"] = catalog_entries
        source = _source([])
        loader = PermissionCatalogLoader(source, cache=fake_cache, cache_key="cat")
        result = await loader.load("tok")
        assert len(result) == 3
        source.fetch_permissions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_cache_entry_is_dropped(self, catalog_entries, fake_cache) -> None:
        fake_cache.store["cat"] = [{"code": "long", "key": "view"}]
        loader = PermissionCatalogLoader(
            _source(catalog_entries), cache=fake_cache, cache_key="cat"
        )
        result = await loader.load("tok")
        assert len(result) == 3
        assert fake_cache.store["cat"][0]["code"] == "1"

    @pytest.mark.asyncio
    async def test_corrupt_cache_value_falls_back_to_source(self, catalog_entries, settings) -> None:
        redis_client = AsyncMock()
        redis_client.get = AsyncMock(return_value="{not json")
        cache = CacheService(redis_client=redis_client, settings=settings)
        source = _source(catalog_entries)
        loader = PermissionCatalogLoader(source, cache=cache, cache_key="cat")
        result = await loader.load("tok")
        assert len(result) == 3
        source.fetch_permissions.assert_awaited_once()
        redis_client.delete.assert_awaited_once_with("cat")
        redis_client.setex.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_refresh_and_discard(self, catalog_entries, fake_cache) -> None:
        source = _source(catalog_entries)
        loader = PermissionCatalogLoader(source, cache=fake_cache, cache_key="cat")
        await loader.load("tok")
        await loader.refresh("tok")
        assert source.fetch_permissions.await_count == 2
        loader.discard()
        assert loader.current is None
