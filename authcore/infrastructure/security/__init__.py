"""Security: bearer credential decoding."""

from authcore.infrastructure.security.jwt import decode_principal, read_claims

__all__ = ["decode_principal", "read_claims"]
