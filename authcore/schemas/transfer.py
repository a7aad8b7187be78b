"""Transfer submission wire schema (POST /transfers/create)."""

from typing import Any

from pydantic import Field

from authcore.schemas.permission import AuthorityResponse


class TransferCreateResponse(AuthorityResponse):
    """Authority answer to a transfer submission."""

    data: dict[str, Any] = Field(default_factory=dict)
