"""Authorization service: one session's permission context.

Owns the catalog loader, both evaluators and the transfer policy for a
logged-in principal. Bound to the session with start()/close() or
``async with``; logout() drops the principal and the memoized catalog.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal

import httpx

from authcore.application.dtos.transfer import TransferResult
from authcore.application.interfaces.services import ICacheService
from authcore.application.services.category_selection import CategorySelection
from authcore.application.services.local_auth_evaluator import LocalAuthEvaluator
from authcore.application.services.permission_catalog import (
    PermissionCatalog,
    PermissionCatalogLoader,
)
from authcore.application.services.permission_codec import (
    PermissionCodec,
    RemotePermissionCodec,
)
from authcore.application.services.remote_role_evaluator import (
    RemoteRoleEvaluator,
    RoleCheckLifetime,
)
from authcore.application.services.transfer_policy import TransferPolicyMatrix
from authcore.application.use_cases.transfers.transfer_draft import TransferDraft
from authcore.core.config import Settings, get_settings
from authcore.core.constants import DEFAULT_CURRENCY
from authcore.domain.entities.principal import Principal
from authcore.domain.entities.transfer_route import TransferRoute
from authcore.domain.enums import Scope
from authcore.domain.exceptions import AuthenticationException
from authcore.infrastructure.cache import CacheService, catalog_key
from authcore.infrastructure.external.authority import AuthorityClient
from authcore.infrastructure.security import decode_principal
from authcore.shared.telemetry import setup_logging

logger = logging.getLogger(__name__)


class AuthorizationService:
    """Permission context for one session.

    Nothing here is global: two services (two sessions) never share a
    principal or a catalog memo. The Redis cache may be shared.
    """

    def __init__(
        self,
        authority: AuthorityClient,
        settings: Settings | None = None,
        cache: ICacheService | None = None,
        transfer_policy: TransferPolicyMatrix | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.authority = authority
        self.cache = cache
        self.catalog_loader = PermissionCatalogLoader(
            authority,
            cache=cache,
            cache_key=catalog_key(self.settings.app_name),
            cache_ttl=self.settings.cache_ttl_catalog,
        )
        self.local = LocalAuthEvaluator(super_user_code=self.settings.super_user_code)
        self.remote = RemoteRoleEvaluator(
            authority,
            cache=cache,
            cache_ttl=self.settings.cache_ttl_role_checks,
            timeout_seconds=self.settings.authority_timeout_seconds,
            self_service_shortcut=self.settings.role_check_self_shortcut,
        )
        self.transfer_policy = transfer_policy or TransferPolicyMatrix()
        self._principal: Principal | None = None
        self._owns_authority = False
        self._owns_cache = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        cache: ICacheService | None = None,
    ) -> AuthorizationService:
        """Wire the default infrastructure: httpx authority client and Redis cache.

        Resources created here are released by close(); injected ones are not.
        """
        settings = settings or get_settings()
        authority = AuthorityClient(settings=settings, http_client=http_client)
        owns_cache = False
        if cache is None and settings.redis_enabled:
            cache = CacheService(settings=settings)
            owns_cache = True
        service = cls(authority, settings=settings, cache=cache)
        service._owns_authority = True
        service._owns_cache = owns_cache
        return service

    async def start(self) -> None:
        if self.settings.debug:
            setup_logging(self.settings)
        if self._owns_cache and isinstance(self.cache, CacheService):
            await self.cache.connect()
        logger.info("Authorization service started for %s", self.settings.authority_base_url)

    async def close(self) -> None:
        self.logout()
        if self._owns_authority:
            await self.authority.aclose()
        if self._owns_cache and isinstance(self.cache, CacheService):
            await self.cache.disconnect()
        logger.info("Authorization service closed")

    async def __aenter__(self) -> AuthorizationService:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # --- session ---

    @property
    def principal(self) -> Principal | None:
        return self._principal

    def login(self, token: str) -> Principal:
        """Decode the bearer credential and make it the session principal.

        Raises:
            AuthenticationException: If the credential is malformed, invalid or expired.
        """
        principal = decode_principal(token, self.settings)
        if self._principal is not None and self._principal.id != principal.id:
            self.catalog_loader.discard()
        self._principal = principal
        logger.info("Principal %s logged in (company %s)", principal.id, principal.company_id)
        return principal

    def logout(self) -> None:
        """Forget the principal and the session catalog."""
        if self._principal is not None:
            logger.info("Principal %s logged out", self._principal.id)
        self._principal = None
        self.catalog_loader.discard()

    def require_principal(self) -> Principal:
        if self._principal is None:
            raise AuthenticationException("Not logged in")
        return self._principal

    # --- catalog and codec ---

    async def catalog(self) -> PermissionCatalog:
        """Session catalog; empty (fail-closed) when logged out or the load fails."""
        if self._principal is None:
            return PermissionCatalog.empty()
        return await self.catalog_loader.load(self._principal.token)

    async def refresh_catalog(self) -> PermissionCatalog:
        principal = self.require_principal()
        return await self.catalog_loader.refresh(principal.token)

    async def codec(self) -> PermissionCodec:
        return PermissionCodec(await self.catalog())

    async def remote_codec(self) -> RemotePermissionCodec:
        return RemotePermissionCodec(self.authority, await self.catalog())

    async def new_selection(self, encoded: str | None = None) -> CategorySelection:
        """Selection state for one permission-editing dialog."""
        return CategorySelection.from_encoded(
            await self.catalog(), encoded, sys_admin_key=self.settings.sys_admin_key
        )

    # --- evaluation ---

    def check(
        self,
        required_codes: str,
        match_all: bool = False,
        company_id: str | None = None,
    ) -> bool:
        return self.local.check(self._principal, required_codes, match_all, company_id)

    def require(
        self,
        required_codes: str,
        match_all: bool = False,
        company_id: str | None = None,
    ) -> None:
        self.local.require(self._principal, required_codes, match_all, company_id)

    async def check_keys(
        self,
        keys: Iterable[str],
        match_all: bool = False,
        company_id: str | None = None,
    ) -> bool:
        return self.local.check_keys(
            self._principal, keys, await self.codec(), match_all, company_id
        )

    async def check_roles(
        self,
        company_id: str | None,
        required_codes: Iterable[str],
        *,
        lifetime: RoleCheckLifetime | None = None,
        target_user_id: str | None = None,
    ) -> bool:
        return await self.remote.check_roles(
            self._principal,
            company_id,
            required_codes,
            lifetime=lifetime,
            target_user_id=target_user_id,
        )

    def new_lifetime(self) -> RoleCheckLifetime:
        return RoleCheckLifetime()

    async def invalidate_role_checks(self, company_id: str | None = None) -> None:
        if self._principal is not None:
            await self.remote.invalidate(self._principal.id, company_id)

    # --- transfers ---

    async def enabled_routes(
        self,
        scope: Scope | str,
        company_id: str | None,
        lifetime: RoleCheckLifetime | None = None,
    ) -> list[TransferRoute]:
        return await self.transfer_policy.resolve_enabled(
            self._principal, company_id, scope, self.remote, lifetime=lifetime
        )

    async def new_transfer_draft(
        self,
        scope: Scope | str,
        company_id: str,
        *,
        balance: Decimal | None = None,
        currency: str = DEFAULT_CURRENCY,
        lifetime: RoleCheckLifetime | None = None,
    ) -> TransferDraft:
        """Draft for a source account with its routes already gated."""
        principal = self.require_principal()
        routes = await self.enabled_routes(scope, company_id, lifetime=lifetime)
        return TransferDraft(
            self.transfer_policy,
            scope,
            company_id,
            enabled_routes=routes,
            balance=balance,
            currency=currency,
            principal_id=principal.id,
        )

    async def submit_transfer(self, draft: TransferDraft) -> TransferResult:
        """Submit a draft with the session credential.

        Raises:
            AuthenticationException: If no principal is logged in.
            TransferValidationException: If the draft is not submittable.
        """
        principal = self.require_principal()
        return await draft.submit(self.authority, principal.token)
