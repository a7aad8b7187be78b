"""Application use cases: one entry point per workflow."""

from authcore.application.use_cases.transfers import TransferDraft

__all__ = ["TransferDraft"]
