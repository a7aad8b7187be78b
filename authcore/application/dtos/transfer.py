"""DTOs for transfer submission (no dependency on transport)."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class TransferRequest:
    """Transfer payload built from a submittable draft."""

    transfer_type: str
    from_scope: str
    to_scope: str
    company_id: str
    amount: Decimal
    currency: str
    description: str | None = None
    to_user_id: str | None = None
    to_user_company_id: str | None = None
    to_external_name: str | None = None
    from_external_name: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the authority; unset optional fields are omitted."""
        payload: dict[str, Any] = {
            "transfer_type": self.transfer_type,
            "from_scope": self.from_scope,
            "to_scope": self.to_scope,
            "company_id": self.company_id,
            "amount": str(self.amount),
            "currency": self.currency,
        }
        optional = {
            "description": self.description,
            "to_user_id": self.to_user_id,
            "to_user_company_id": self.to_user_company_id,
            "to_external_name": self.to_external_name,
            "from_external_name": self.from_external_name,
        }
        payload.update({k: v for k, v in optional.items() if v is not None})
        return payload


@dataclass(frozen=True)
class TransferResult:
    """Outcome reported by the authority for a submitted transfer."""

    succeeded: bool
    message: str | None = None
    data: dict[str, Any] | None = None
