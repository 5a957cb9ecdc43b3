"""
Reconciliation service for operations that cross aggregate boundaries.

This is the only place where one aggregate's change drives another's:

1. **Milestone payments** (mark_milestone_paid)
   - Marks a milestone paid on the booking
   - The first paid money on a confirmed booking moves it to deposit_paid

2. **Payment completion** (complete_payment)
   - Completes the payment
   - Credits the linked budget item with the payment amount
   - Both happen in one transaction, or neither does

Usage:
    from bookings.services import ReconciliationService

    booking = ReconciliationService.mark_milestone_paid(booking_id, milestone_id)

    try:
        payment = ReconciliationService.complete_payment(payment_id, reference="TXN123")
    except ReconciliationError as e:
        # Payment is still open and the budget item untouched
        logger.error(f"Reconciliation failed: {e.details}")

Note:
    Rows are locked payment first, then budget item. Every code path that
    locks both must keep that order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.services import BaseService

from bookings.exceptions import ReconciliationError
from bookings.locks import load_for_update, lock_for_update
from bookings.models import BookingRequest, BudgetItem, Payment
from bookings.signals import booking_event
from bookings.state_machines import BookingStatus
from bookings.types import Money

if TYPE_CHECKING:
    import uuid


class ReconciliationService(BaseService):
    """
    Service coordinating bookings, payments and budget items.

    Policy that spans aggregates lives here so each model only enforces
    its own rules. BookingRequest.mark_milestone_paid() never changes the
    booking status by itself; the deposit rule is applied here.
    """

    @classmethod
    def mark_milestone_paid(
        cls,
        booking_id: uuid.UUID,
        milestone_id: str,
        expected_version: int | None = None,
    ) -> BookingRequest:
        """
        Mark a milestone paid and apply the deposit rule.

        When the booking is confirmed and has any paid money after this
        call, it moves to deposit_paid.

        Args:
            booking_id: Booking owning the milestone
            milestone_id: Milestone to mark paid
            expected_version: Version the caller last read

        Returns:
            The updated BookingRequest

        Raises:
            BookingNotFoundError: If the booking doesn't exist
            MilestoneNotFoundError: If the milestone isn't on the booking
            BusinessRuleViolation: If the booking is completed, cancelled or declined
            StaleRecordError: If expected_version is out of date
        """
        with cls.atomic():
            booking = load_for_update(BookingRequest, booking_id, expected_version)
            milestone = booking.mark_milestone_paid(milestone_id)

            deposit_received = (
                booking.status == BookingStatus.CONFIRMED and booking.total_paid > 0
            )
            if deposit_received:
                booking.record_deposit()

            booking.save()

            amount = Money(cents=milestone.amount_cents, currency=booking.currency)
            cls._record(booking, f"Milestone '{milestone.name}' paid: {amount}")
            if deposit_received:
                cls._record(booking, "Deposit received")

        cls.get_logger().info(
            f"Milestone {milestone_id} paid on booking {booking_id} "
            f"(total paid {booking.total_paid}, status {booking.status})",
            extra={
                "booking_request_id": str(booking_id),
                "milestone_id": str(milestone_id),
            },
        )
        return booking

    @classmethod
    def complete_payment(
        cls,
        payment_id: uuid.UUID,
        reference: str | None = None,
        receipt_url: str | None = None,
        notes: str | None = None,
        expected_version: int | None = None,
    ) -> Payment:
        """
        Complete a payment and credit its budget item atomically.

        Args:
            payment_id: Payment to complete
            reference: External transaction reference
            receipt_url: Link to the receipt
            notes: Notes to store on the payment
            expected_version: Version of the payment the caller last read

        Returns:
            The completed Payment

        Raises:
            PaymentNotFoundError: If the payment doesn't exist
            InvalidStateTransitionError: If the payment is already terminal
            StaleRecordError: If expected_version is out of date
            ReconciliationError: If crediting the budget item failed. The
                payment completion is rolled back as well.
        """
        logger = cls.get_logger()

        with cls.atomic():
            payment = load_for_update(Payment, payment_id, expected_version)
            payment.mark_completed(reference)
            if receipt_url:
                payment.receipt_url = receipt_url
            if notes:
                payment.notes = notes
            payment.save()

            if payment.budget_item_id is not None:
                cls._credit_budget_item(payment)

            if payment.booking_request_id is not None:
                amount = Money(cents=payment.amount_cents, currency=payment.currency)
                cls._record(payment.booking_request, f"Payment of {amount} completed")

        logger.info(
            f"Payment {payment_id} completed"
            + (f", budget item {payment.budget_item_id} credited" if payment.budget_item_id else ""),
            extra={"payment_id": str(payment_id), "reference": reference},
        )
        return payment

    @classmethod
    def _credit_budget_item(cls, payment: Payment) -> BudgetItem:
        """
        Lock the payment's budget item and add the payment amount to it.

        Must run inside the transaction that completed the payment; the
        ReconciliationError raised on failure unwinds that transaction.
        """
        try:
            item = lock_for_update(BudgetItem, payment.budget_item_id)
            item.add_payment(payment.amount_cents, payment.currency)
            item.save()
        except Exception as exc:
            cls.get_logger().error(
                f"Failed to credit budget item {payment.budget_item_id} "
                f"for payment {payment.id}: {exc}",
                exc_info=True,
                extra={
                    "payment_id": str(payment.id),
                    "budget_item_id": str(payment.budget_item_id),
                },
            )
            raise ReconciliationError(
                f"Could not credit budget item {payment.budget_item_id} "
                f"for payment {payment.id}; payment completion rolled back",
                details={
                    "payment_id": str(payment.id),
                    "budget_item_id": str(payment.budget_item_id),
                    "amount_cents": payment.amount_cents,
                    "cause": exc.__class__.__name__,
                },
            ) from exc

        return item

    @classmethod
    def _record(cls, booking: BookingRequest, content: str) -> None:
        booking_event.send(sender=cls, booking=booking, content=content)
