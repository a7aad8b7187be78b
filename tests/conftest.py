"""Pytest configuration and fixtures for authcore.

No network or Redis is needed: the authority is an AsyncMock or an
httpx.MockTransport, and the cache is an in-memory FakeCache.
"""

import fnmatch
import logging
import time
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from jose import jwt

from authcore.application.services.permission_catalog import PermissionCatalog
from authcore.core.config import Settings, get_settings
from authcore.domain.entities.principal import Principal

TEST_SECRET = "test-credential-secret"

SCENARIO_ENTRIES: list[dict[str, str]] = [
    {"code": "1", "key": "view", "name": "View", "category": "Basic"},
    {"code": "2", "key": "edit", "name": "Edit", "category": "Basic"},
    {"code": "9", "key": "sys_admin", "name": "System admin", "category": "Admin"},
]


class FakeCache:
    """In-memory stand-in for CacheService (same method surface)."""

    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.store: dict[str, Any] = {}
        self.ttls: dict[str, int] = {}

    def is_available(self) -> bool:
        return self.available

    async def get(self, key: str) -> Any | None:
        return self.store.get(key)

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, key: str) -> bool:
        self.store.pop(key, None)
        return True

    async def delete_pattern(self, pattern: str) -> int:
        matched = [k for k in self.store if fnmatch.fnmatch(k, pattern)]
        for k in matched:
            del self.store[k]
        return len(matched)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Settings are lru_cached; tests that touch env vars get a fresh copy."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: local authority URL, Redis off."""
    return Settings(
        authority_base_url="http://authority.test/api",
        authority_timeout_seconds=1.0,
        redis_enabled=False,
    )


@pytest.fixture
def package_logger():
    """The authcore logger, restored to its original level and handlers afterwards."""
    logger = logging.getLogger("authcore")
    level, handlers = logger.level, list(logger.handlers)
    yield logger
    logger.setLevel(level)
    logger.handlers[:] = handlers


@pytest.fixture
def catalog_entries() -> list[dict[str, str]]:
    return [dict(entry) for entry in SCENARIO_ENTRIES]


@pytest.fixture
def catalog(catalog_entries: list[dict[str, str]]) -> PermissionCatalog:
    """view '1' and edit '2' in Basic, sys_admin '9' in Admin."""
    return PermissionCatalog.from_entries(catalog_entries)


@pytest.fixture
def large_catalog() -> PermissionCatalog:
    """Catalog with a five-permission Finance category."""
    entries = [
        {"code": str(i), "key": f"finance_{i}", "category": "Finance"} for i in range(1, 6)
    ]
    entries += [
        {"code": "x", "key": "reports", "category": "Reporting"},
        {"code": "9", "key": "sys_admin", "category": "Admin"},
    ]
    return PermissionCatalog.from_entries(entries)


@pytest.fixture
def fake_cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Build a signed credential (HS256, TEST_SECRET) from claims."""

    def _make(
        user_id: str = "u1",
        company_id: str | None = "c1",
        permissions: Any = "12",
        expires_in: int | None = 3600,
        **extra: Any,
    ) -> str:
        claims: dict[str, Any] = {"id": user_id, "permissions": permissions, **extra}
        if company_id is not None:
            claims["companyId"] = company_id
        if expires_in is not None:
            claims["exp"] = int(time.time()) + expires_in
        return jwt.encode(claims, TEST_SECRET, algorithm="HS256")

    return _make


@pytest.fixture
def make_principal() -> Callable[..., Principal]:
    def _make(
        permissions: str = "",
        user_id: str = "u1",
        company_id: str | None = "c1",
        token: str = "tok",
        **kwargs: Any,
    ) -> Principal:
        return Principal(
            id=user_id,
            company_id=company_id,
            permissions=permissions,
            token=token,
            **kwargs,
        )

    return _make


@pytest.fixture
async def mock_http():
    """httpx.AsyncClient whose requests are answered by a handler function."""
    clients: list[httpx.AsyncClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            base_url="http://authority.test/api",
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.aclose()
