"""
Concurrency control utilities for booking, budget and payment operations.

Every aggregate in this app is read, mutated and saved inside a database
transaction. Two complementary mechanisms keep concurrent callers apart:

1. **Row Locks** (lock_for_update)
   - SELECT ... FOR UPDATE on the aggregate row
   - Concurrent callers on the same id wait for each other
   - Use for: every read-modify-write in a service

2. **Optimistic Locking** (check_version)
   - Version-based conflict detection on top of the row lock
   - Rejects a write based on a copy the caller read earlier
   - Use for: updates where the caller holds a previously read version

Usage:

    from bookings.locks import check_version, lock_for_update

    with transaction.atomic():
        booking = lock_for_update(BookingRequest, booking_id)
        booking.submit_quote(500000)
        booking.save()  # Version auto-increments

    with transaction.atomic():
        item = check_version(BudgetItem, item_id, expected_version=3)
        item.add_payment(10000)
        item.save()

Note:
    Lock several rows in a fixed order (payment before budget item) so two
    transactions never wait on each other.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from django.db import models, transaction

from core.exceptions import NotFoundError

from bookings.exceptions import (
    BookingNotFoundError,
    BudgetItemNotFoundError,
    PaymentNotFoundError,
    StaleRecordError,
)

if TYPE_CHECKING:
    from typing import Any

# Type variable for model classes
T = TypeVar("T", bound=models.Model)

NOT_FOUND_ERRORS: dict[str, type[NotFoundError]] = {
    "BookingRequest": BookingNotFoundError,
    "BudgetItem": BudgetItemNotFoundError,
    "Payment": PaymentNotFoundError,
}


def _not_found(model_class: type[models.Model], pk: Any) -> NotFoundError:
    model_name = model_class.__name__
    error_class = NOT_FOUND_ERRORS.get(model_name, NotFoundError)
    return error_class(
        f"{model_name} {pk} not found",
        details={"pk": str(pk)},
    )


def lock_for_update(model_class: type[T], pk: Any) -> T:
    """
    Load a record and lock its row until the transaction ends.

    Args:
        model_class: Django model class
        pk: Primary key of the record

    Returns:
        The locked model instance

    Raises:
        NotFoundError: If the record doesn't exist (the app-specific
            subclass for booking models)

    Note:
        Must be called within a transaction context.
    """
    instance = model_class.objects.select_for_update().filter(pk=pk).first()
    if instance is None:
        raise _not_found(model_class, pk)
    return instance


def check_version(
    model_class: type[T],
    pk: Any,
    expected_version: int,
) -> T:
    """
    Atomically check version and lock a record for update.

    Combines optimistic locking (version check) with pessimistic locking
    (select_for_update) for the actual update operation. This prevents
    race conditions when multiple processes try to modify the same record.

    Args:
        model_class: Django model class (must have 'version' field)
        pk: Primary key of the record
        expected_version: Version the caller expects

    Returns:
        The locked model instance (within a transaction)

    Raises:
        StaleRecordError: If version doesn't match (concurrent modification)
        NotFoundError: If record doesn't exist

    Example:
        with transaction.atomic():
            # Lock the record and verify version
            payment = check_version(Payment, payment_id, expected_version=3)

            # Safe to modify - we have exclusive access
            payment.start_processing()
            payment.save()  # Version auto-increments to 4

    Note:
        Must be called within a transaction context. The lock is held
        until the transaction commits or rolls back.
    """
    with transaction.atomic():
        # Try to get the record with expected version and lock it
        instance = (
            model_class.objects.select_for_update()
            .filter(pk=pk, version=expected_version)
            .first()
        )

        if instance is None:
            current = model_class.objects.filter(pk=pk).values("version").first()
            if current is None:
                raise _not_found(model_class, pk)

            # Record exists but version doesn't match - concurrent modification
            model_name = model_class.__name__
            raise StaleRecordError(
                f"{model_name} {pk} has been modified "
                f"(expected version {expected_version}, current {current['version']})",
                details={
                    "pk": str(pk),
                    "expected_version": expected_version,
                    "current_version": current["version"],
                },
            )

        return instance


def load_for_update(
    model_class: type[T],
    pk: Any,
    expected_version: int | None = None,
) -> T:
    """Lock a record, checking its version when the caller supplies one."""
    if expected_version is None:
        return lock_for_update(model_class, pk)
    return check_version(model_class, pk, expected_version)


__all__ = [
    "check_version",
    "load_for_update",
    "lock_for_update",
]
