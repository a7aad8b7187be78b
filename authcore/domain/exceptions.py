"""Domain exceptions for authcore.

Each exception carries a human-readable message, a machine-readable
error_code and a details dict. Callers that render UI state map them to
disabled/denied states; nothing here knows about transport.
"""

from typing import Any


class AuthcoreException(Exception):
    """Base exception for all authcore errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. key, company_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form: error_code, message and details."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AuthcoreException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(AuthcoreException):
    """Raised when a bearer credential cannot be decoded or has expired."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class CatalogUnavailableException(AuthcoreException):
    """Raised when the permission catalog cannot be fetched or parsed.

    Loaders turn this into an empty catalog (no permission is selectable);
    it is only raised to callers that explicitly ask for it.
    """

    def __init__(self, reason: str) -> None:
        """Initialize with the failure reason.

        Args:
            reason: Human-readable reason (e.g. 'HTTP 503', 'duplicate code').
        """
        super().__init__(
            f"Permission catalog unavailable: {reason}",
            "CATALOG_UNAVAILABLE",
            {"reason": reason},
        )


class UnknownPermissionKeyException(AuthcoreException):
    """Raised when a permission key is not present in the catalog."""

    def __init__(self, key: str) -> None:
        super().__init__(
            f"Unknown permission key: {key}",
            "UNKNOWN_PERMISSION_KEY",
            {"key": key},
        )


class AuthorityUnreachableException(AuthcoreException):
    """Raised when the authority cannot be reached or answers with a failure."""

    def __init__(
        self,
        operation: str,
        reason: str,
        status_code: int | None = None,
    ) -> None:
        """Initialize with the attempted operation and reason.

        Args:
            operation: Authority operation (e.g. 'check_roles').
            reason: Human-readable reason (e.g. transport error text).
            status_code: HTTP status when the authority answered.
        """
        details: dict[str, Any] = {"operation": operation, "reason": reason}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            f"Authority unreachable during {operation}: {reason}",
            "AUTHORITY_UNREACHABLE",
            details,
        )


class InsufficientPermissionException(AuthcoreException):
    """Raised when a gated action is attempted without the required permission."""

    def __init__(
        self,
        required: str | list[str] | None = None,
        company_id: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with the required codes and optional company scope.

        Args:
            required: Required permission code string or list of codes.
            company_id: Company scope of the check, if any.
            message: Human-readable message.
        """
        details: dict[str, Any] = {}
        if required:
            details["required"] = required
        if company_id:
            details["company_id"] = company_id
        super().__init__(message, "PERMISSION_DENIED", details)


class TransferValidationException(AuthcoreException):
    """Raised when a transfer draft is submitted while not submittable."""

    def __init__(self, errors: list[str]) -> None:
        """Initialize with the list of validation problems.

        Args:
            errors: Machine-readable problem tags (e.g. 'amount_positive').
        """
        super().__init__(
            "Transfer is not submittable",
            "TRANSFER_VALIDATION_ERROR",
            {"errors": list(errors)},
        )
