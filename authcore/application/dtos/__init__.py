"""Application DTOs."""

from authcore.application.dtos.transfer import TransferRequest, TransferResult

__all__ = ["TransferRequest", "TransferResult"]
