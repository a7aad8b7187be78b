"""Permission catalog and codec wire schemas (authority payloads)."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AuthorityResponse(BaseModel):
    """Common envelope: optional status/message from the authority."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status: str | None = None
    message: str | None = None

    @property
    def succeeded(self) -> bool:
        """True unless the authority explicitly reported a non-success status."""
        return self.status is None or self.status == "success"


class PermissionEntry(BaseModel):
    """One catalog entry as delivered by GET /permissions."""

    model_config = ConfigDict(extra="ignore")

    code: str = Field(..., min_length=1, max_length=1)
    key: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""
    category: str = ""


class PermissionCatalogResponse(AuthorityResponse):
    """GET /permissions response.

    permissions may be a list of entries or a mapping key -> entry body;
    the mapping form is normalized to a list in mapping order.
    """

    permissions: list[PermissionEntry] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize_mapping(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("permissions"), dict):
            entries = [
                {**(body or {}), "key": key}
                for key, body in data["permissions"].items()
            ]
            data = {**data, "permissions": entries}
        return data


class EncodePermissionsRequest(BaseModel):
    """POST /permissions/encode body."""

    keys: list[str]


class EncodePermissionsResponse(AuthorityResponse):
    """POST /permissions/encode response."""

    permissions: str = ""


class DecodePermissionsRequest(BaseModel):
    """POST /permissions/decode body."""

    model_config = ConfigDict(populate_by_name=True)

    company_id: str = Field(..., alias="companyId")
    encoded: str


class DecodePermissionsResponse(AuthorityResponse):
    """POST /permissions/decode response."""

    keys: list[str] = Field(default_factory=list)
