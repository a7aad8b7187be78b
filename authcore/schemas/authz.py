"""Role-check wire schemas (POST /authz/check-roles)."""

from pydantic import BaseModel, ConfigDict, Field

from authcore.schemas.permission import AuthorityResponse


class CheckRolesRequest(BaseModel):
    """Ask whether the caller holds required_codes in company_id."""

    model_config = ConfigDict(populate_by_name=True)

    company_id: str = Field(..., alias="companyId", min_length=1)
    required_codes: list[str] = Field(..., alias="requiredCodes")


class CheckRolesResponse(AuthorityResponse):
    """Authority answer; a missing granted flag means denied."""

    granted: bool = False
