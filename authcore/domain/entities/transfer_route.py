"""Transfer route domain entity: one row of the transfer policy matrix."""

from dataclasses import dataclass

from authcore.domain.enums import FieldTag, Scope


@dataclass(frozen=True)
class TransferRoute:
    """A permitted (from_scope -> to_scope) transfer shape.

    permission_code is the permission the authority must grant in the source
    company; the requires_* flags decide which counterparty fields the caller
    must collect before submission.
    """

    id: str
    from_scope: Scope
    to_scope: Scope
    permission_code: str
    requires_counterparty_user: bool = False
    requires_other_company: bool = False
    requires_external_name: bool = False
    requires_source_external_name: bool = False

    @property
    def required_fields(self) -> frozenset[FieldTag]:
        """Fields implied by the requires_* flags."""
        flags = (
            (self.requires_counterparty_user, FieldTag.COUNTERPARTY_USER),
            (self.requires_other_company, FieldTag.COUNTERPARTY_COMPANY),
            (self.requires_external_name, FieldTag.EXTERNAL_NAME),
            (self.requires_source_external_name, FieldTag.SOURCE_EXTERNAL_NAME),
        )
        return frozenset(tag for required, tag in flags if required)

    @property
    def is_outgoing(self) -> bool:
        """True when money leaves an account we know the balance of."""
        return self.from_scope in (Scope.USER, Scope.COMPANY)
