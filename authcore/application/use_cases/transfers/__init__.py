"""Money transfer drafting and submission."""

from authcore.application.use_cases.transfers.transfer_draft import TransferDraft

__all__ = ["TransferDraft"]
