"""Domain value objects."""

from authcore.domain.value_objects.core import PermissionCode, TransferAmount

__all__ = ["PermissionCode", "TransferAmount"]
