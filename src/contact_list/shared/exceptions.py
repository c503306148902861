"""
Custom exception classes for the application.
"""

from typing import Any


class AppException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        message: str,
        code: str = "APP_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application exception.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ValidationError(AppException):
    """Raised when business validation fails (distinct from pydantic ValidationError)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class DuplicatePhoneNumberError(ValidationError):
    """Raised when submitted phone numbers are already in use."""

    def __init__(self, numbers: list[str]) -> None:
        self.numbers = sorted(numbers)
        super().__init__(
            "Duplicate phone numbers found",
            "DUPLICATE_PHONE_NUMBER",
            {"duplicates": self.numbers},
        )


class NotFoundError(AppException):
    """Raised when a requested resource does not exist."""

    def __init__(
        self,
        message: str = "Resource not found",
        code: str = "NOT_FOUND",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class ContactNotFoundError(NotFoundError):
    """Raised when a contact is not found."""

    def __init__(self, contact_id: int) -> None:
        self.contact_id = contact_id
        super().__init__(
            f"Contact not found: {contact_id}",
            "CONTACT_NOT_FOUND",
            {"contact_id": contact_id},
        )


class StoreError(AppException):
    """Raised when a database operation fails."""

    def __init__(
        self,
        message: str = "Database operation failed",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, "STORE_ERROR", details)
