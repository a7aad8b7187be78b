"""Local permission evaluation against the decoded credential.

Synchronous and offline: a fast path for UI gating on data already in
memory. It is not a security boundary; the authority re-validates every
sensitive action.
"""

from __future__ import annotations

from collections.abc import Iterable

from authcore.application.services.permission_codec import PermissionCodec
from authcore.core.constants import SUPER_USER_CODE
from authcore.domain.entities.principal import Principal
from authcore.domain.exceptions import InsufficientPermissionException


class LocalAuthEvaluator:
    """Evaluates permission-code predicates on a principal.

    match_all defaults to False (any one code suffices), which is what most
    call sites were written against. Callers that need every code must say so.
    """

    def __init__(self, super_user_code: str = SUPER_USER_CODE) -> None:
        self.super_user_code = super_user_code

    def check(
        self,
        principal: Principal | None,
        required_codes: str,
        match_all: bool = False,
        company_id: str | None = None,
    ) -> bool:
        """Return whether principal satisfies required_codes.

        The super-user code grants everything. An empty requirement is
        trivially satisfied. company_id selects the per-company permission set.
        """
        if principal is None:
            return False
        held = principal.permissions_for(company_id)
        if self.super_user_code in held:
            return True
        if not required_codes:
            return True
        if match_all:
            return all(code in held for code in required_codes)
        return any(code in held for code in required_codes)

    def require(
        self,
        principal: Principal | None,
        required_codes: str,
        match_all: bool = False,
        company_id: str | None = None,
    ) -> None:
        """Raise InsufficientPermissionException if check() fails."""
        if not self.check(principal, required_codes, match_all, company_id):
            raise InsufficientPermissionException(
                required=required_codes, company_id=company_id
            )

    def check_keys(
        self,
        principal: Principal | None,
        keys: Iterable[str],
        codec: PermissionCodec,
        match_all: bool = False,
        company_id: str | None = None,
    ) -> bool:
        """Like check(), with permission keys instead of codes.

        Raises:
            UnknownPermissionKeyException: If a key is not in the catalog.
        """
        return self.check(principal, codec.encode(keys), match_all, company_id)
