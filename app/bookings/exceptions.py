"""
Booking-specific exceptions for booking, budget and payment operations.

This module provides a hierarchy of exceptions for the booking domain,
including lookup failures, business rule violations, state machine errors,
concurrency control errors and reconciliation failures.

Exception Hierarchy:
    BookingError (base for the booking domain)
    └── ReconciliationError - Cross-aggregate step failed and was rolled back

    BookingNotFoundError - BookingRequest lookup failures (inherits NotFoundError)
    BudgetItemNotFoundError - BudgetItem lookup failures (inherits NotFoundError)
    PaymentNotFoundError - Payment lookup failures (inherits NotFoundError)
    MilestoneNotFoundError - Milestone id absent from a schedule (inherits NotFoundError)

    BusinessRuleViolation - Operation not allowed in current state (inherits ConflictError)
    └── InvalidStateTransitionError - FSM transition not allowed
    StaleRecordError - Optimistic locking conflict (inherits ConflictError)

Usage:
    from bookings.exceptions import (
        BusinessRuleViolation,
        InvalidStateTransitionError,
        ReconciliationError,
        StaleRecordError,
    )

    # Invalid state transition
    raise InvalidStateTransitionError(
        aggregate_type="BookingRequest",
        aggregate_id=booking.id,
        current_state="completed",
        target_state="cancelled",
        transition="cancel",
    )

    # Optimistic locking conflict
    raise StaleRecordError(
        f"Payment {pk} was modified by another process",
        details={"pk": str(pk), "expected_version": 3, "current_version": 5}
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, ConflictError, NotFoundError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Booking Domain Exceptions
# =============================================================================


class BookingError(BaseApplicationError):
    """
    Base exception for booking domain operations that are neither lookups
    nor state conflicts.
    """

    default_error_code: str = "BOOKING_ERROR"


class ReconciliationError(BookingError):
    """
    Raised when the cross-aggregate reconciliation step fails.

    Completing a payment and crediting its budget item happen in a single
    transaction. When the budget side fails, the transaction is rolled back
    (the payment stays in its previous state) and this error is raised so
    the failure is never silent.

    Attributes:
        is_retryable: True. The operation can be retried once the cause
            (missing budget item, currency mismatch, lock contention) has
            been investigated.
        details: Contains payment_id, budget_item_id and the cause

    Example:
        try:
            ReconciliationService.complete_payment(payment_id, reference="TXN123")
        except ReconciliationError as e:
            logger.error(f"Reconciliation failed: {e.details}")
    """

    default_error_code: str = "RECONCILIATION_FAILED"
    is_retryable: bool = True


# =============================================================================
# Lookup Exceptions
# =============================================================================


class BookingNotFoundError(NotFoundError):
    """Raised when a BookingRequest cannot be found."""

    default_error_code: str = "BOOKING_NOT_FOUND"


class BudgetItemNotFoundError(NotFoundError):
    """Raised when a BudgetItem cannot be found."""

    default_error_code: str = "BUDGET_ITEM_NOT_FOUND"


class PaymentNotFoundError(NotFoundError):
    """Raised when a Payment cannot be found."""

    default_error_code: str = "PAYMENT_NOT_FOUND"


class MilestoneNotFoundError(NotFoundError):
    """
    Raised when a milestone id is not part of a booking's payment schedule.

    Example:
        raise MilestoneNotFoundError(
            f"Milestone {milestone_id} not found on booking {booking.id}",
            details={"booking_request_id": str(booking.id), "milestone_id": milestone_id},
        )
    """

    default_error_code: str = "MILESTONE_NOT_FOUND"


# =============================================================================
# State Conflict Exceptions
# =============================================================================


class BusinessRuleViolation(ConflictError):
    """
    Raised when an operation breaks a business rule of an aggregate.

    Use for:
    - Adding a milestone to a closed booking
    - Recording a negative budget payment
    - Any request that would be legal with different input or state

    Not retryable without changing the input.
    """

    default_error_code: str = "BUSINESS_RULE_VIOLATION"


class InvalidStateTransitionError(BusinessRuleViolation):
    """
    Raised when a state machine transition is not allowed.

    Wraps django-fsm's TransitionNotAllowed to provide our standard error
    format with the attempted and current state.

    Attributes:
        aggregate_type: Model name (e.g. "BookingRequest")
        aggregate_id: Primary key of the aggregate
        current_state: State the aggregate was in
        target_state: State the caller tried to reach
        transition: Name of the transition method invoked

    Note:
        The caller must re-fetch current state before retrying with a
        different target.
    """

    default_error_code: str = "INVALID_STATE_TRANSITION"

    def __init__(
        self,
        aggregate_type: str,
        aggregate_id: Any,
        current_state: str,
        target_state: str,
        transition: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.aggregate_type = aggregate_type
        self.aggregate_id = aggregate_id
        self.current_state = str(current_state)
        self.target_state = str(target_state)
        self.transition = transition

        message = (
            f"Cannot transition {aggregate_type} {aggregate_id} "
            f"from '{self.current_state}' to '{self.target_state}'"
        )

        full_details = {
            "aggregate_type": aggregate_type,
            "aggregate_id": str(aggregate_id),
            "current_state": self.current_state,
            "target_state": self.target_state,
        }
        if transition:
            full_details["transition"] = transition
        if details:
            full_details.update(details)

        super().__init__(message=message, error_code=error_code, details=full_details)


class StaleRecordError(ConflictError):
    """
    Raised when optimistic locking detects concurrent modification.

    The record was modified by another process between the caller's read
    and its update. The caller should retry with fresh data or abort.

    Attributes:
        details: Contains pk, expected_version, and current_version
    """

    default_error_code: str = "STALE_RECORD"


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "BookingError",
    "ReconciliationError",
    "BookingNotFoundError",
    "BudgetItemNotFoundError",
    "PaymentNotFoundError",
    "MilestoneNotFoundError",
    "BusinessRuleViolation",
    "InvalidStateTransitionError",
    "StaleRecordError",
]
