"""
Payment model: a single money movement recorded against an event.

Payments may be linked to a booking and to the budget line they settle.
Completing a linked payment credits the budget line in the same
transaction (see ReconciliationService.complete_payment).

Usage:
    from bookings.models import Payment
    from bookings.state_machines import PaymentType

    payment = Payment.objects.create(
        event_id=event_id,
        budget_item=item,
        payment_type=PaymentType.VENDOR_PAYMENT,
        amount_cents=350000,
        paid_by="planner",
        paid_to="Royal Caterers",
    )

    payment.mark_completed(reference="TXN123")   # pending -> completed
    payment.save()
"""

from __future__ import annotations

import math

from django.db import models
from django.utils import timezone

from django_fsm import FSMField

from core.model_mixins import UUIDPrimaryKeyMixin, VersionedMixin
from core.models import BaseModel

from bookings.models.booking_request import default_currency
from bookings.state_machines import (
    OPEN_PAYMENT_STATES,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
    guarded_transition,
)


class Payment(UUIDPrimaryKeyMixin, VersionedMixin, BaseModel):
    """
    A client payment, vendor payment, refund or expense.

    State Flow:
        PENDING -> PROCESSING -> COMPLETED
        PENDING/PROCESSING -> COMPLETED / FAILED / CANCELLED

    Terminal states (COMPLETED, FAILED, CANCELLED) accept no transition,
    so completing a payment twice raises instead of re-stamping paid_date.

    Fields:
        event_id: Event the payment belongs to
        booking_request: Related booking, if any
        budget_item: Budget line credited when the payment completes
        payment_type: Direction of the money movement
        status: Current FSM state
        method: How the money moved
        amount_cents: Positive amount in smallest currency unit
        paid_by/paid_to: Free-text payer and payee
        due_date: When the payment is due, if scheduled
        paid_date: Set exactly when the payment completes
        reference: External transaction reference
    """

    # ==========================================================================
    # References
    # ==========================================================================

    event_id = models.UUIDField(
        db_index=True,
        help_text="Event this payment belongs to",
    )

    booking_request = models.ForeignKey(
        "bookings.BookingRequest",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments",
        help_text="Booking this payment is for, if any",
    )

    budget_item = models.ForeignKey(
        "bookings.BudgetItem",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments",
        help_text="Budget line credited when this payment completes",
    )

    # ==========================================================================
    # Type & State
    # ==========================================================================

    payment_type = models.CharField(
        max_length=20,
        choices=PaymentType.choices,
        help_text="Direction and nature of the money movement",
    )

    status = FSMField(
        max_length=50,
        default=PaymentStatus.PENDING,
        choices=PaymentStatus.choices,
        db_index=True,
        protected=True,  # Prevent direct assignment outside transitions
        help_text="Current state of the payment (managed by FSM)",
    )

    method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.BANK_TRANSFER,
        help_text="How the money moved",
    )

    # ==========================================================================
    # Amount & Parties
    # ==========================================================================

    amount_cents = models.PositiveBigIntegerField(
        help_text="Payment amount in smallest currency unit",
    )

    currency = models.CharField(
        max_length=3,
        default=default_currency,
        help_text="ISO 4217 currency code (lowercase)",
    )

    paid_by = models.CharField(
        max_length=255,
        help_text="Who pays (client, planner, ...)",
    )

    paid_to = models.CharField(
        max_length=255,
        help_text="Who receives the money",
    )

    # ==========================================================================
    # Dates & Reference
    # ==========================================================================

    due_date = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="When the payment is due",
    )

    paid_date = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the payment completed",
    )

    reference = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="External transaction reference",
    )

    receipt_url = models.URLField(
        max_length=500,
        null=True,
        blank=True,
    )

    description = models.CharField(
        max_length=255,
        blank=True,
        default="",
    )

    notes = models.TextField(
        blank=True,
        default="",
    )

    # ==========================================================================
    # Meta & Methods
    # ==========================================================================

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payment"
        verbose_name_plural = "Payments"
        indexes = [
            models.Index(fields=["event_id", "status"], name="bookings_pa_event_i_2e8b50_idx"),
            models.Index(fields=["status", "due_date"], name="bookings_pa_status_71a3cf_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount_cents__gt=0),
                name="booking_payment_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        """Return string representation with ID, state, and amount."""
        major, minor = divmod(self.amount_cents, 100)
        return f"Payment({self.id}, {self.status}, {major}.{minor:02d} {self.currency.upper()})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @guarded_transition(
        field=status,
        source=PaymentStatus.PENDING,
        target=PaymentStatus.PROCESSING,
    )
    def start_processing(self):
        """
        Money is on its way.

        Transition: PENDING -> PROCESSING
        """
        pass

    @guarded_transition(
        field=status,
        source=list(OPEN_PAYMENT_STATES),
        target=PaymentStatus.COMPLETED,
    )
    def mark_completed(self, reference: str | None = None):
        """
        Mark the payment as completed.

        Transition: PENDING/PROCESSING -> COMPLETED

        Args:
            reference: External transaction reference
        """
        self.paid_date = timezone.now()
        if reference:
            self.reference = reference

    @guarded_transition(
        field=status,
        source=list(OPEN_PAYMENT_STATES),
        target=PaymentStatus.FAILED,
    )
    def mark_failed(self, notes: str | None = None):
        """
        Mark the payment as failed.

        Transition: PENDING/PROCESSING -> FAILED
        """
        if notes:
            self.notes = notes

    @guarded_transition(
        field=status,
        source=list(OPEN_PAYMENT_STATES),
        target=PaymentStatus.CANCELLED,
    )
    def cancel(self, reason: str | None = None):
        """
        Cancel the payment.

        Transition: PENDING/PROCESSING -> CANCELLED
        """
        if reason:
            self.notes = f"{self.notes}\nCancelled: {reason}" if self.notes else f"Cancelled: {reason}"

    # ==========================================================================
    # Derived Reads
    # ==========================================================================

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_PAYMENT_STATES

    @property
    def is_overdue(self) -> bool:
        """Not completed or cancelled, and the due date is in the past."""
        if self.due_date is None:
            return False
        if self.status in (PaymentStatus.COMPLETED, PaymentStatus.CANCELLED):
            return False
        return self.due_date < timezone.now()

    @property
    def days_until_due(self) -> int | None:
        """Whole days until the due date, rounded up. Negative once overdue."""
        if self.due_date is None:
            return None
        seconds = (self.due_date - timezone.now()).total_seconds()
        return math.ceil(seconds / 86400)
