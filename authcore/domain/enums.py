"""Domain enumerations for authcore.

Enums represent fixed sets of domain values (scopes, tri-state selection,
transfer form fields and phases).
"""

from enum import Enum

from authcore.domain.exceptions import ValidationException


class Scope(str, Enum):
    """Kind of account a transfer originates from or terminates at."""

    USER = "user"
    COMPANY = "company"
    EXTERNAL = "external"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid scope values as strings."""
        return [scope.value for scope in cls]

    @classmethod
    def parse(cls, value: "Scope | str") -> "Scope":
        """Coerce a scope value.

        Raises:
            ValidationException: If value is not a known scope.
        """
        try:
            return cls(value)
        except ValueError as e:
            raise ValidationException(
                f"Unknown account scope {value!r}; expected one of: {', '.join(cls.values())}",
                field="scope",
            ) from e


class CategoryState(str, Enum):
    """Tri-state of a permission category checkbox."""

    CHECKED = "checked"
    INDETERMINATE = "indeterminate"
    UNCHECKED = "unchecked"


class FieldTag(str, Enum):
    """Auxiliary fields a transfer route requires before submission."""

    COUNTERPARTY_USER = "counterparty_user"
    COUNTERPARTY_COMPANY = "counterparty_company"
    EXTERNAL_NAME = "external_name"
    SOURCE_EXTERNAL_NAME = "source_external_name"


class TransferPhase(str, Enum):
    """Lifecycle of a transfer draft.

    NO_ROUTE_SELECTED -> ROUTE_DISABLED | FIELDS_INCOMPLETE -> SUBMITTABLE
    -> SUBMITTING -> COMPLETED | FAILED.
    """

    NO_ROUTE_SELECTED = "no_route_selected"
    ROUTE_DISABLED = "route_disabled"
    FIELDS_INCOMPLETE = "fields_incomplete"
    SUBMITTABLE = "submittable"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    FAILED = "failed"
