"""Authority HTTP client."""

from authcore.infrastructure.external.authority.client import AuthorityClient

__all__ = ["AuthorityClient"]
