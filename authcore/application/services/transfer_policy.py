"""Transfer policy matrix: which money-movement routes exist and who may use them.

One row per route; a single generic gate (permission held) decides whether a
route is enabled. Adding a scope pair is a new row, not new control flow.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from authcore.application.services.remote_role_evaluator import (
    RemoteRoleEvaluator,
    RoleCheckLifetime,
)
from authcore.domain.entities.principal import Principal
from authcore.domain.entities.transfer_route import TransferRoute
from authcore.domain.enums import FieldTag, Scope

logger = logging.getLogger(__name__)

TRANSFER_ROUTES: tuple[TransferRoute, ...] = (
    # company as source
    TransferRoute(
        id="company_to_user_same",
        from_scope=Scope.COMPANY,
        to_scope=Scope.USER,
        permission_code="can_transfer_company_to_same_company_user",
        requires_counterparty_user=True,
    ),
    TransferRoute(
        id="company_to_user_other",
        from_scope=Scope.COMPANY,
        to_scope=Scope.USER,
        permission_code="can_transfer_company_to_other_company_user",
        requires_counterparty_user=True,
        requires_other_company=True,
    ),
    TransferRoute(
        id="company_to_company_other",
        from_scope=Scope.COMPANY,
        to_scope=Scope.COMPANY,
        permission_code="can_transfer_company_to_other_company",
        requires_other_company=True,
    ),
    TransferRoute(
        id="company_to_external",
        from_scope=Scope.COMPANY,
        to_scope=Scope.EXTERNAL,
        permission_code="can_transfer_company_to_external",
        requires_external_name=True,
    ),
    # user as source
    TransferRoute(
        id="user_to_user_same",
        from_scope=Scope.USER,
        to_scope=Scope.USER,
        permission_code="can_transfer_user_to_same_company_user",
        requires_counterparty_user=True,
    ),
    TransferRoute(
        id="user_to_user_other",
        from_scope=Scope.USER,
        to_scope=Scope.USER,
        permission_code="can_transfer_user_to_other_company_user",
        requires_counterparty_user=True,
        requires_other_company=True,
    ),
    TransferRoute(
        id="user_to_company_same",
        from_scope=Scope.USER,
        to_scope=Scope.COMPANY,
        permission_code="can_transfer_user_to_own_company",
    ),
    TransferRoute(
        id="user_to_company_other",
        from_scope=Scope.USER,
        to_scope=Scope.COMPANY,
        permission_code="can_transfer_user_to_other_company",
        requires_other_company=True,
    ),
    TransferRoute(
        id="user_to_external",
        from_scope=Scope.USER,
        to_scope=Scope.EXTERNAL,
        permission_code="can_transfer_user_to_external",
        requires_external_name=True,
    ),
    # money received from a named outside party
    TransferRoute(
        id="external_to_user",
        from_scope=Scope.EXTERNAL,
        to_scope=Scope.USER,
        permission_code="can_receive_external_to_user",
        requires_source_external_name=True,
    ),
    TransferRoute(
        id="external_to_company",
        from_scope=Scope.EXTERNAL,
        to_scope=Scope.COMPANY,
        permission_code="can_receive_external_to_company",
        requires_source_external_name=True,
    ),
)


class TransferPolicyMatrix:
    """Static route table with permission gating."""

    def __init__(self, routes: Iterable[TransferRoute] = TRANSFER_ROUTES) -> None:
        self._routes = tuple(routes)
        ids = [r.id for r in self._routes]
        if len(ids) != len(set(ids)):
            raise ValueError("Transfer route ids must be unique")
        self._by_id = {r.id: r for r in self._routes}

    @property
    def routes(self) -> tuple[TransferRoute, ...]:
        return self._routes

    def get(self, route_id: str) -> TransferRoute | None:
        return self._by_id.get(route_id)

    def routes_for(self, scope: Scope | str) -> list[TransferRoute]:
        """Candidate routes for an account of the given scope, in table order."""
        scope = Scope.parse(scope)
        return [r for r in self._routes if r.from_scope == scope]

    @staticmethod
    def is_enabled(route: TransferRoute, permissions_held: Iterable[str]) -> bool:
        return route.permission_code in set(permissions_held)

    @staticmethod
    def required_fields(route: TransferRoute) -> frozenset[FieldTag]:
        return route.required_fields

    async def resolve_enabled(
        self,
        principal: Principal | None,
        company_id: str | None,
        scope: Scope | str,
        evaluator: RemoteRoleEvaluator,
        lifetime: RoleCheckLifetime | None = None,
    ) -> list[TransferRoute]:
        """Ask the authority about every candidate route; keep the granted ones.

        Each route is checked independently, so one failed check disables
        only the routes it gates.
        """
        candidates = self.routes_for(scope)
        results = await asyncio.gather(
            *(
                evaluator.check_roles(
                    principal, company_id, [route.permission_code], lifetime=lifetime
                )
                for route in candidates
            )
        )
        held = {
            route.permission_code
            for route, granted in zip(candidates, results, strict=True)
            if granted
        }
        enabled = [route for route in candidates if self.is_enabled(route, held)]
        logger.debug(
            "Transfer routes for %s in company %s: %s of %s enabled",
            Scope.parse(scope).value,
            company_id,
            len(enabled),
            len(candidates),
        )
        return enabled
