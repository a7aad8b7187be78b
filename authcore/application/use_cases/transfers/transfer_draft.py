"""Transfer draft: route selection, counterparty fields, validation and submit.

Phases: NO_ROUTE_SELECTED -> ROUTE_DISABLED | FIELDS_INCOMPLETE ->
SUBMITTABLE -> SUBMITTING -> COMPLETED | FAILED. Selecting a different
route clears every counterparty field; selecting a counterparty company
clears the counterparty user.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal
from typing import TYPE_CHECKING

from authcore.application.dtos.transfer import TransferRequest, TransferResult
from authcore.application.interfaces.services import ITransferSubmitter
from authcore.core.constants import (
    DEFAULT_CURRENCY,
    MAX_AMOUNT_DECIMALS,
    MAX_DESCRIPTION_LENGTH,
    MAX_EXTERNAL_NAME_LENGTH,
)
from authcore.domain.entities.transfer_route import TransferRoute
from authcore.domain.enums import FieldTag, Scope, TransferPhase
from authcore.domain.exceptions import (
    AuthcoreException,
    TransferValidationException,
    ValidationException,
)
from authcore.domain.value_objects.core import TransferAmount

if TYPE_CHECKING:
    from authcore.application.services.transfer_policy import TransferPolicyMatrix

logger = logging.getLogger(__name__)


def _parse_amount(raw: str) -> tuple[TransferAmount | None, str | None]:
    """Return (amount, None) or (None, error tag)."""
    text = raw.strip()
    if not text:
        return None, "amount_required"
    try:
        return TransferAmount.parse(text), None
    except ValueError as e:
        message = str(e)
        if "decimal places" in message:
            return None, "amount_max_decimals"
        if "positive" in message:
            return None, "amount_positive"
        return None, "amount_invalid"


class TransferDraft:
    """State of one money-transfer form for a source account.

    enabled_routes comes from TransferPolicyMatrix.resolve_enabled(); a route
    outside it can be selected but never submitted.
    """

    def __init__(
        self,
        matrix: TransferPolicyMatrix,
        source_scope: Scope | str,
        company_id: str,
        *,
        enabled_routes: Iterable[TransferRoute] = (),
        balance: Decimal | None = None,
        currency: str = DEFAULT_CURRENCY,
        principal_id: str | None = None,
    ) -> None:
        self.matrix = matrix
        self.source_scope = Scope.parse(source_scope)
        self.company_id = company_id
        self.balance = balance
        self.currency = currency
        self.principal_id = principal_id
        self._enabled_ids: set[str] = set()
        self.route: TransferRoute | None = None
        self.amount = ""
        self.description = ""
        self._clear_counterparty()
        self._outcome: TransferPhase | None = None
        self.result: TransferResult | None = None
        self.error: AuthcoreException | None = None
        self.set_enabled_routes(enabled_routes)

    def _clear_counterparty(self) -> None:
        self.counterparty_company_id: str | None = None
        self.counterparty_user_id: str | None = None
        self.external_name = ""
        self.source_external_name = ""

    @property
    def candidate_routes(self) -> list[TransferRoute]:
        return self.matrix.routes_for(self.source_scope)

    @property
    def enabled_routes(self) -> list[TransferRoute]:
        return [r for r in self.candidate_routes if r.id in self._enabled_ids]

    def set_enabled_routes(self, routes: Iterable[TransferRoute]) -> None:
        """Replace the enabled set; keep the selection if still enabled, else pick the first."""
        self._enabled_ids = {r.id for r in routes if r.from_scope == self.source_scope}
        if self.route is not None and self.route.id in self._enabled_ids:
            return
        enabled = self.enabled_routes
        if enabled:
            self.select_route(enabled[0].id)
        elif self.route is not None:
            self.route = None
            self._clear_counterparty()

    def select_route(self, route_id: str) -> None:
        """Select a route by id; a different route resets counterparty fields.

        Raises:
            ValidationException: If the id is unknown or belongs to another scope.
        """
        route = self.matrix.get(route_id)
        if route is None or route.from_scope != self.source_scope:
            raise ValidationException(
                f"Transfer route {route_id!r} is not available for {self.source_scope.value} accounts",
                field="transfer_type",
            )
        if self.route is None or self.route.id != route.id:
            self._clear_counterparty()
        self.route = route
        self._outcome = None

    def set_counterparty_company(self, company_id: str | None) -> None:
        self.counterparty_company_id = company_id or None
        self.counterparty_user_id = None

    def set_counterparty_user(self, user_id: str | None) -> None:
        self.counterparty_user_id = user_id or None

    def set_external_name(self, name: str) -> None:
        self.external_name = name or ""

    def set_source_external_name(self, name: str) -> None:
        self.source_external_name = name or ""

    def set_amount(self, raw: str | int | float | Decimal) -> None:
        self.amount = "" if raw is None else str(raw)

    def set_description(self, text: str | None) -> None:
        self.description = text or ""

    @property
    def required_fields(self) -> frozenset[FieldTag]:
        if self.route is None:
            return frozenset()
        return self.route.required_fields

    @property
    def route_enabled(self) -> bool:
        return self.route is not None and self.route.id in self._enabled_ids

    def validate(self) -> list[str]:
        """Return problem tags; an empty list means the draft is submittable."""
        if self.route is None:
            return ["select_type"]
        errors: list[str] = []
        if not self.route_enabled:
            errors.append("route_disabled")

        amount, amount_error = _parse_amount(self.amount)
        if amount_error:
            errors.append(amount_error)
        elif (
            amount is not None
            and self.route.is_outgoing
            and self.balance is not None
            and amount.value > self.balance
        ):
            errors.append("amount_exceeds_balance")

        required = self.route.required_fields
        if FieldTag.COUNTERPARTY_COMPANY in required and not self.counterparty_company_id:
            errors.append("company_required")
        if FieldTag.COUNTERPARTY_USER in required:
            if FieldTag.COUNTERPARTY_COMPANY in required and not self.counterparty_company_id:
                errors.append("select_company_first")
            elif not self.counterparty_user_id:
                errors.append("user_required")
        if FieldTag.EXTERNAL_NAME in required:
            name = self.external_name.strip()
            if not name:
                errors.append("to_external_name_required")
            elif len(name) > MAX_EXTERNAL_NAME_LENGTH:
                errors.append("to_external_name_too_long")
        if FieldTag.SOURCE_EXTERNAL_NAME in required:
            name = self.source_external_name.strip()
            if not name:
                errors.append("from_external_name_required")
            elif len(name) > MAX_EXTERNAL_NAME_LENGTH:
                errors.append("from_external_name_too_long")
        if len(self.description.strip()) > MAX_DESCRIPTION_LENGTH:
            errors.append("description_too_long")
        return errors

    @property
    def phase(self) -> TransferPhase:
        if self._outcome is not None:
            return self._outcome
        if self.route is None:
            return TransferPhase.NO_ROUTE_SELECTED
        if not self.route_enabled:
            return TransferPhase.ROUTE_DISABLED
        if self.validate():
            return TransferPhase.FIELDS_INCOMPLETE
        return TransferPhase.SUBMITTABLE

    @property
    def can_submit(self) -> bool:
        return self.phase == TransferPhase.SUBMITTABLE

    def build_request(self) -> TransferRequest:
        """Payload for the authority.

        Raises:
            TransferValidationException: If the draft is not submittable.
        """
        errors = self.validate()
        if errors or self.route is None:
            raise TransferValidationException(errors or ["select_type"])
        route = self.route
        amount = TransferAmount.parse(self.amount).value.quantize(
            Decimal(1).scaleb(-MAX_AMOUNT_DECIMALS)
        )
        to_user_id = None
        to_user_company_id = None
        if route.requires_counterparty_user:
            to_user_id = self.counterparty_user_id
            to_user_company_id = (
                self.counterparty_company_id if route.requires_other_company else self.company_id
            )
        elif route.requires_other_company:
            to_user_company_id = self.counterparty_company_id
        elif route.from_scope == Scope.USER and route.to_scope == Scope.COMPANY:
            to_user_company_id = self.company_id
        elif route.from_scope == Scope.EXTERNAL and route.to_scope == Scope.USER:
            to_user_id = self.principal_id

        return TransferRequest(
            transfer_type=route.id,
            from_scope=route.from_scope.value,
            to_scope=route.to_scope.value,
            company_id=self.company_id,
            amount=amount,
            currency=self.currency,
            description=self.description.strip() or None,
            to_user_id=to_user_id,
            to_user_company_id=to_user_company_id,
            to_external_name=self.external_name.strip() if route.requires_external_name else None,
            from_external_name=(
                self.source_external_name.strip() if route.requires_source_external_name else None
            ),
        )

    async def submit(self, submitter: ITransferSubmitter, token: str) -> TransferResult:
        """Submit once; the draft ends COMPLETED or FAILED.

        Raises:
            TransferValidationException: If not submittable (incl. already submitting).
        """
        if self._outcome == TransferPhase.SUBMITTING:
            raise TransferValidationException(["submission_in_progress"])
        request = self.build_request()
        self._outcome = TransferPhase.SUBMITTING
        self.error = None
        try:
            result = await submitter.create_transfer(token, request=request)
        except AuthcoreException as e:
            logger.warning("Transfer %s failed: %s", request.transfer_type, e.message)
            self._outcome = TransferPhase.FAILED
            self.error = e
            self.result = TransferResult(succeeded=False, message=e.message)
            return self.result
        self._outcome = TransferPhase.COMPLETED if result.succeeded else TransferPhase.FAILED
        self.result = result
        logger.info("Transfer %s submitted for company %s", request.transfer_type, self.company_id)
        return result
