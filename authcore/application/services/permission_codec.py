"""Permission codec: permission keys <-> compact encoded string.

Each permission is one character; the encoded string is the concatenation
of codes. Encoding is strict (unknown keys are rejected), decoding is
lenient (unknown characters are dropped, never raised).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from authcore.application.interfaces.services import IPermissionCodecAuthority
from authcore.application.services.permission_catalog import PermissionCatalog
from authcore.core.constants import SYS_ADMIN_KEY
from authcore.domain.entities.permission import Permission
from authcore.domain.exceptions import (
    AuthcoreException,
    AuthorityUnreachableException,
    UnknownPermissionKeyException,
)

logger = logging.getLogger(__name__)


def apply_super_user_closure(
    selection: Iterable[str],
    catalog: PermissionCatalog,
    sys_admin_key: str = SYS_ADMIN_KEY,
) -> frozenset[str]:
    """Return selection, widened to every catalog key if it holds sys_admin_key."""
    selected = frozenset(selection)
    if sys_admin_key in selected:
        return selected | frozenset(catalog.keys())
    return selected


class PermissionCodec:
    """Encode/decode against a loaded catalog (no I/O)."""

    def __init__(self, catalog: PermissionCatalog) -> None:
        self.catalog = catalog

    def encode(self, keys: Iterable[str]) -> str:
        """Encode keys as a code string in catalog order.

        Raises:
            UnknownPermissionKeyException: If any key is not in the catalog.
        """
        wanted = set(keys)
        for key in sorted(wanted):
            if key not in self.catalog:
                raise UnknownPermissionKeyException(key)
        return "".join(p.code for p in self.catalog if p.key in wanted)

    def decode(self, encoded: str | None) -> set[Permission]:
        """Decode a code string; unknown characters are ignored."""
        if not encoded:
            return set()
        found = set()
        for char in encoded:
            perm = self.catalog.by_code(char)
            if perm is not None:
                found.add(perm)
        return found

    def decode_keys(self, encoded: str | None) -> set[str]:
        """Decode a code string to permission keys."""
        return {p.key for p in self.decode(encoded)}


class RemotePermissionCodec:
    """Server-assisted codec with the same contract as PermissionCodec.

    Keys are validated against the local catalog before asking the authority,
    so unknown keys are rejected without a round trip. Remote decode stays
    lenient: a failure or unknown keys in the answer mean fewer permissions.
    """

    def __init__(
        self,
        authority: IPermissionCodecAuthority,
        catalog: PermissionCatalog,
    ) -> None:
        self.authority = authority
        self.catalog = catalog

    async def encode(self, token: str, keys: Iterable[str]) -> str:
        """Encode keys via the authority.

        Raises:
            UnknownPermissionKeyException: If any key is not in the catalog.
            AuthorityUnreachableException: If the authority call fails.
        """
        wanted = set(keys)
        for key in sorted(wanted):
            if key not in self.catalog:
                raise UnknownPermissionKeyException(key)
        ordered = [key for key in self.catalog.keys() if key in wanted]
        try:
            return await self.authority.encode_permissions(token, keys=ordered)
        except AuthorityUnreachableException:
            raise
        except AuthcoreException as e:
            raise AuthorityUnreachableException("encode_permissions", e.message) from e

    async def decode(self, token: str, company_id: str, encoded: str | None) -> set[Permission]:
        """Decode via the authority; never raises, degrades to fewer permissions."""
        if not encoded:
            return set()
        try:
            keys = await self.authority.decode_permissions(
                token, company_id=company_id, encoded=encoded
            )
        except AuthcoreException as e:
            logger.warning(
                "Remote permission decode failed for company %s: %s", company_id, e.message
            )
            return set()
        return {perm for key in keys if (perm := self.catalog.get(key)) is not None}
