"""Principal domain entity: the decoded bearer credential.

Fields are advisory. They drive UI gating only; every authorization-sensitive
action is re-validated by the authority.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from authcore.domain.exceptions import AuthenticationException


@dataclass(frozen=True)
class Principal:
    """Authenticated user as described by the credential payload.

    permissions holds the encoded set for the principal's own company;
    company_permissions holds per-company encoded sets when the credential
    carries one entry per company.
    """

    id: str
    company_id: str | None = None
    permissions: str = ""
    company_permissions: Mapping[str, str] = field(default_factory=dict)
    username: str | None = None
    expires_at: datetime | None = None
    token: str = field(default="", repr=False)

    def permissions_for(self, company_id: str | None = None) -> str:
        """Return the encoded permission set for a company.

        Without company_id, or for the principal's own company when no
        per-company entry exists, the top-level set is returned. Any other
        company yields "" (no permissions).
        """
        if company_id is None:
            return self.permissions
        if company_id in self.company_permissions:
            return self.company_permissions[company_id]
        if company_id == self.company_id:
            return self.permissions
        return ""

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True when the credential carries an exp in the past."""
        if self.expires_at is None:
            return False
        return self.expires_at <= (now or datetime.now(UTC))

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any], token: str = "") -> "Principal":
        """Build a principal from a decoded credential payload.

        Accepts ``id`` (or ``sub``), optional ``companyId``/``company_id``,
        ``username`` and ``exp``. ``permissions`` may be an encoded string or a
        list of ``{"companyId": ..., "permissions": ...}`` entries.

        Raises:
            AuthenticationException: If the payload has no subject id.
        """
        user_id = claims.get("id") or claims.get("sub")
        if not user_id:
            raise AuthenticationException("Credential missing required claim: id")
        company_id = claims.get("companyId") or claims.get("company_id")
        company_id = str(company_id) if company_id else None

        raw = claims.get("permissions") or ""
        per_company: dict[str, str] = {}
        if isinstance(raw, str):
            permissions = raw
        elif isinstance(raw, list):
            for entry in raw:
                if not isinstance(entry, Mapping):
                    continue
                entry_company = entry.get("companyId") or entry.get("company_id")
                if entry_company:
                    per_company[str(entry_company)] = str(entry.get("permissions") or "")
            permissions = per_company.get(company_id, "") if company_id else ""
        else:
            permissions = ""

        exp = claims.get("exp")
        expires_at = (
            datetime.fromtimestamp(exp, UTC) if isinstance(exp, int | float) else None
        )
        return cls(
            id=str(user_id),
            company_id=company_id,
            permissions=permissions,
            company_permissions=per_company,
            username=claims.get("username"),
            expires_at=expires_at,
            token=token,
        )
