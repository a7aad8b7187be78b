"""Service interfaces (ports) for the application layer.

Protocols define what the services need from the authority and the cache,
so tests and alternative transports can stand in for AuthorityClient.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from authcore.application.dtos.transfer import TransferRequest, TransferResult
    from authcore.schemas.permission import PermissionEntry


class IPermissionSource(Protocol):
    """Protocol for fetching the permission catalog (GET /permissions)."""

    async def fetch_permissions(self, token: str) -> list[PermissionEntry]:
        """Return the catalog entries; raise on any failure."""


class IPermissionCodecAuthority(Protocol):
    """Protocol for server-assisted encode/decode."""

    async def encode_permissions(self, token: str, *, keys: Iterable[str]) -> str:
        """Return the encoded permission string for keys."""

    async def decode_permissions(
        self, token: str, *, company_id: str, encoded: str
    ) -> list[str]:
        """Return the permission keys for an encoded string."""


class IRoleAuthority(Protocol):
    """Protocol for remote role checks (POST /authz/check-roles)."""

    async def check_roles(
        self, token: str, *, company_id: str, required_codes: list[str]
    ) -> bool:
        """Return whether the caller holds required_codes in company_id; raise on failure."""


class ITransferSubmitter(Protocol):
    """Protocol for submitting a transfer (POST /transfers/create)."""

    async def create_transfer(
        self, token: str, *, request: TransferRequest
    ) -> TransferResult:
        """Submit the transfer; raise on failure."""


class ICacheService(Protocol):
    """Minimal cache protocol for catalog and role-check caching (DIP)."""

    def is_available(self) -> bool:
        """Return True if cache is connected."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL. Returns True on success."""

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True on success."""

    async def delete_pattern(self, pattern: str) -> int:
        """Delete keys matching pattern. Returns count deleted."""
