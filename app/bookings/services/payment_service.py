"""
Payment service for recording and tracking event payments.

Completing a payment is not here: it credits the linked budget item and
therefore lives in ReconciliationService.complete_payment.

Usage:
    from bookings.services import PaymentService

    payment = PaymentService.create_payment(
        event_id=event_id,
        payment_type=PaymentType.VENDOR_PAYMENT,
        amount_cents=350000,
        paid_by="planner",
        paid_to="Royal Caterers",
        budget_item_id=item.id,
    )

    alerts = PaymentService.get_payment_alerts()
    alerts.overdue, alerts.due_this_week
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.db.models import BigIntegerField, Case, F, Q, Sum, Value, When
from django.db.models.functions import Coalesce
from django.utils import timezone

from core.exceptions import ValidationError
from core.services import BaseService

from bookings.exceptions import PaymentNotFoundError
from bookings.locks import load_for_update
from bookings.models import Payment
from bookings.signals import booking_event
from bookings.state_machines import PaymentMethod, PaymentStatus, PaymentType
from bookings.types import Money

if TYPE_CHECKING:
    import uuid
    from datetime import datetime

    from django.db.models import QuerySet


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class PaymentTotals:
    """
    Money roll-up for an event's payments.

    Attributes:
        total_due_cents: Sum of all payments regardless of status
        total_paid_cents: Sum of completed payments
        total_pending_cents: total_due_cents - total_paid_cents
        client_payments_cents: Sum of client payments
        vendor_payments_cents: Sum of vendor payments
    """

    total_due_cents: int = 0
    total_paid_cents: int = 0
    total_pending_cents: int = 0
    client_payments_cents: int = 0
    vendor_payments_cents: int = 0


@dataclass
class PaymentAlerts:
    """Pending payments needing attention."""

    overdue: list[Payment] = field(default_factory=list)
    due_this_week: list[Payment] = field(default_factory=list)


def _sum_amount(condition: Q | None = None):
    amount = F("amount_cents")
    if condition is not None:
        amount = Case(
            When(condition, then=amount),
            default=Value(0),
            output_field=BigIntegerField(),
        )
    return Coalesce(
        Sum(amount, output_field=BigIntegerField()),
        Value(0),
        output_field=BigIntegerField(),
    )


# =============================================================================
# Payment Service
# =============================================================================


class PaymentService(BaseService):
    """Service for payment records and payment read models."""

    @classmethod
    def create_payment(
        cls,
        event_id: uuid.UUID,
        payment_type: str,
        amount_cents: int,
        paid_by: str,
        paid_to: str,
        method: str = PaymentMethod.BANK_TRANSFER,
        booking_request_id: uuid.UUID | None = None,
        budget_item_id: uuid.UUID | None = None,
        due_date: datetime | None = None,
        currency: str | None = None,
        description: str = "",
        notes: str = "",
    ) -> Payment:
        """
        Record a new pending payment.

        Returns:
            The new Payment (pending)

        Raises:
            ValidationError: If amount_cents is not positive
        """
        if amount_cents <= 0:
            raise ValidationError(
                "Payment amount must be positive",
                error_code="INVALID_PAYMENT_AMOUNT",
                details={"amount_cents": amount_cents},
            )

        payment = Payment(
            event_id=event_id,
            payment_type=PaymentType(payment_type),
            method=PaymentMethod(method),
            amount_cents=amount_cents,
            paid_by=paid_by,
            paid_to=paid_to,
            booking_request_id=booking_request_id,
            budget_item_id=budget_item_id,
            due_date=due_date,
            description=description,
            notes=notes,
        )
        if currency:
            payment.currency = currency.lower()
        payment.save()

        cls.get_logger().info(
            f"Payment {payment.id} created for event {event_id}: {payment.amount_cents} "
            f"{payment.currency.upper()} ({payment.payment_type})",
            extra={"payment_id": str(payment.id)},
        )
        return payment

    @classmethod
    def update_payment(
        cls,
        payment_id: uuid.UUID,
        method: str | None = None,
        reference: str | None = None,
        receipt_url: str | None = None,
        notes: str | None = None,
        expected_version: int | None = None,
    ) -> Payment:
        """Update payment details. Status and amount are untouched."""
        with cls.atomic():
            payment = load_for_update(Payment, payment_id, expected_version)
            if method is not None:
                payment.method = PaymentMethod(method)
            if reference is not None:
                payment.reference = reference
            if receipt_url is not None:
                payment.receipt_url = receipt_url
            if notes is not None:
                payment.notes = notes
            payment.save()

        return payment

    @classmethod
    def start_processing(
        cls,
        payment_id: uuid.UUID,
        expected_version: int | None = None,
    ) -> Payment:
        """Money is on its way (pending -> processing)."""
        with cls.atomic():
            payment = load_for_update(Payment, payment_id, expected_version)
            payment.start_processing()
            payment.save()

        cls._log_transition(payment)
        return payment

    @classmethod
    def fail_payment(
        cls,
        payment_id: uuid.UUID,
        notes: str | None = None,
        expected_version: int | None = None,
    ) -> Payment:
        """
        Mark an open payment as failed.

        Raises:
            PaymentNotFoundError: If the payment doesn't exist
            InvalidStateTransitionError: If the payment is already terminal
        """
        with cls.atomic():
            payment = load_for_update(Payment, payment_id, expected_version)
            payment.mark_failed(notes)
            payment.save()

        cls._log_transition(payment)
        return payment

    @classmethod
    def cancel_payment(
        cls,
        payment_id: uuid.UUID,
        reason: str | None = None,
        expected_version: int | None = None,
    ) -> Payment:
        """
        Cancel an open payment.

        Raises:
            PaymentNotFoundError: If the payment doesn't exist
            InvalidStateTransitionError: If the payment is already terminal
        """
        with cls.atomic():
            payment = load_for_update(Payment, payment_id, expected_version)
            payment.cancel(reason)
            payment.save()
            if payment.booking_request_id:
                amount = Money(cents=payment.amount_cents, currency=payment.currency)
                booking_event.send(
                    sender=cls,
                    booking=payment.booking_request,
                    content=f"Payment of {amount} cancelled",
                )

        cls._log_transition(payment)
        return payment

    # ==========================================================================
    # Queries
    # ==========================================================================

    @staticmethod
    def get_payment(payment_id: uuid.UUID) -> Payment:
        payment = Payment.objects.filter(pk=payment_id).first()
        if payment is None:
            raise PaymentNotFoundError(
                f"Payment {payment_id} not found",
                details={"payment_id": str(payment_id)},
            )
        return payment

    @staticmethod
    def get_payments_for_event(event_id: uuid.UUID) -> QuerySet[Payment]:
        return Payment.objects.filter(event_id=event_id)

    @staticmethod
    def get_payments_for_booking(booking_id: uuid.UUID) -> QuerySet[Payment]:
        return Payment.objects.filter(booking_request_id=booking_id)

    @staticmethod
    def get_pending_payments() -> QuerySet[Payment]:
        return Payment.objects.filter(status=PaymentStatus.PENDING)

    @staticmethod
    def get_payment_totals(event_id: uuid.UUID) -> PaymentTotals:
        """Sum an event's payments by status and type."""
        row = Payment.objects.filter(event_id=event_id).aggregate(
            total_due=_sum_amount(),
            total_paid=_sum_amount(Q(status=PaymentStatus.COMPLETED)),
            client=_sum_amount(Q(payment_type=PaymentType.CLIENT_PAYMENT)),
            vendor=_sum_amount(Q(payment_type=PaymentType.VENDOR_PAYMENT)),
        )
        return PaymentTotals(
            total_due_cents=row["total_due"],
            total_paid_cents=row["total_paid"],
            total_pending_cents=row["total_due"] - row["total_paid"],
            client_payments_cents=row["client"],
            vendor_payments_cents=row["vendor"],
        )

    @staticmethod
    def get_overdue_payments() -> QuerySet[Payment]:
        """Pending payments whose due date has passed, oldest first."""
        return Payment.objects.filter(
            status=PaymentStatus.PENDING,
            due_date__lt=timezone.now(),
        ).order_by("due_date")

    @staticmethod
    def get_upcoming_payments(days: int | None = None) -> QuerySet[Payment]:
        """
        Pending payments falling due within the next ``days`` days.

        Args:
            days: Window length, defaults to settings.UPCOMING_PAYMENT_WINDOW_DAYS
        """
        if days is None:
            days = settings.UPCOMING_PAYMENT_WINDOW_DAYS
        now = timezone.now()
        return Payment.objects.filter(
            status=PaymentStatus.PENDING,
            due_date__gte=now,
            due_date__lte=now + timedelta(days=days),
        ).order_by("due_date")

    @classmethod
    def get_payment_alerts(cls) -> PaymentAlerts:
        return PaymentAlerts(
            overdue=list(cls.get_overdue_payments()),
            due_this_week=list(cls.get_upcoming_payments(7)),
        )

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @classmethod
    def _log_transition(cls, payment: Payment) -> None:
        cls.get_logger().info(
            f"Payment {payment.id} is now {payment.status}",
            extra={"payment_id": str(payment.id), "status": payment.status},
        )
