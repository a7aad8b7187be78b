"""Domain entities."""

from authcore.domain.entities.permission import Permission
from authcore.domain.entities.principal import Principal
from authcore.domain.entities.transfer_route import TransferRoute

__all__ = ["Permission", "Principal", "TransferRoute"]
