"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error payloads across the application
- Machine-readable error codes for client handling
- Detailed error information for debugging

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input or stored-data validation failures
    ├── NotFoundError - Resource not found
    └── ConflictError - State conflicts (business rules, concurrent modifications)

Usage:
    from core.exceptions import ValidationError, NotFoundError

    # Raise with message only
    raise ValidationError("Milestone amount must be an integer")

    # Raise with error code and additional details
    raise NotFoundError(
        f"BudgetItem {item_id} not found",
        error_code="BUDGET_ITEM_NOT_FOUND",
        details={"budget_item_id": str(item_id)},
    )

    # Convert to dict for the calling layer
    try:
        ...
    except BaseApplicationError as e:
        return e.to_dict()

Note:
    These exceptions are for domain/business logic errors. Mapping them to
    transport-level responses belongs to whatever layer sits above the
    services.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Provides a consistent interface for error handling across the application.
    All custom exceptions should inherit from this class.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (ids, states, amounts)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to a dictionary.

        Returns:
            Dict with error, error_code, and details keys

        Example:
            {
                "error": "BookingRequest 4f1c... not found",
                "error_code": "BOOKING_NOT_FOUND",
                "details": {"booking_request_id": "4f1c..."}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when validation fails.

    Use for:
    - Malformed values passed into a service
    - Stored JSON that no longer matches its expected shape

    Example:
        raise ValidationError(
            "Payment schedule entry is missing 'due_date'",
            error_code="INVALID_PAYMENT_SCHEDULE",
            details={"entry": raw},
        )
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Use for single-resource lookups where existence is expected. Listing
    queries return empty results instead.

    Example:
        booking = BookingRequest.objects.filter(id=booking_id).first()
        if not booking:
            raise NotFoundError(
                f"BookingRequest {booking_id} not found",
                error_code="BOOKING_NOT_FOUND",
                details={"booking_request_id": str(booking_id)}
            )
    """

    default_error_code: str = "NOT_FOUND"


class ConflictError(BaseApplicationError):
    """
    Raised when operation conflicts with current resource state.

    Use for:
    - Business rule violations
    - Invalid state transitions
    - Optimistic locking failures

    Example:
        if booking.is_terminal:
            raise ConflictError(
                f"Cannot modify booking in {booking.status} status",
                error_code="BOOKING_CLOSED",
                details={"current_status": booking.status},
            )

    Note:
        HTTP 409 Conflict is the appropriate status for these errors.
    """

    default_error_code: str = "CONFLICT"
