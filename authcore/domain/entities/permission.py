"""Permission domain entity (one catalog entry)."""

from dataclasses import dataclass

from authcore.domain.exceptions import ValidationException
from authcore.domain.value_objects.core import PermissionCode


@dataclass(frozen=True)
class Permission:
    """Immutable catalog entry.

    key is the canonical identity; code is the single character used in the
    encoded permission string. category is a display grouping only.
    """

    code: str
    key: str
    name: str = ""
    description: str = ""
    category: str = ""

    def __post_init__(self) -> None:
        try:
            PermissionCode(self.code)
        except ValueError as e:
            raise ValidationException(str(e), field="code") from e
        if not self.key or not self.key.strip():
            raise ValidationException("Permission key is required", field="key")
