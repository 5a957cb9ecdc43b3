"""
BookingRequest model for the planner/vendor booking lifecycle.

A BookingRequest is raised by a planner against a vendor for one service
category of an event. It moves through quoting and negotiation to
confirmation, then through deposit and delivery to completion. The agreed
price is paid in milestones kept on the booking itself.

Usage:
    from bookings.models import BookingRequest

    booking = BookingRequest.objects.create(
        event_id=event_id,
        vendor_id=vendor_id,
        planner_id=planner_id,
        service_category="catering",
    )

    # State transitions using django-fsm
    booking.request_quote()          # draft -> quote_requested
    booking.submit_quote(500000)     # -> quote_received
    booking.accept_quote()           # -> confirmed, agreed = 500000
    booking.save()

    milestone = booking.add_payment_milestone("deposit", 150000, date(2025, 1, 1))
    booking.mark_milestone_paid(milestone.id)
    booking.outstanding_balance      # 350000
"""

from __future__ import annotations

from datetime import date

from django.conf import settings
from django.db import models
from django.utils import timezone

from django_fsm import FSMField, can_proceed

from core.model_mixins import UUIDPrimaryKeyMixin, VersionedMixin
from core.models import BaseModel

from bookings.exceptions import BusinessRuleViolation, MilestoneNotFoundError
from bookings.state_machines import (
    BOOKING_TRANSITIONS,
    TERMINAL_BOOKING_STATES,
    BookingStatus,
    guarded_transition,
    sources_for,
)
from bookings.types import PaymentMilestone


def default_currency() -> str:
    return settings.DEFAULT_CURRENCY


class BookingRequest(UUIDPrimaryKeyMixin, VersionedMixin, BaseModel):
    """
    A planner's request for one vendor service on an event.

    Uses django-fsm for state machine management and optimistic locking
    via the version field for concurrency control.

    State Flow (happy path):
        DRAFT -> QUOTE_REQUESTED -> QUOTE_RECEIVED -> CONFIRMED
              -> DEPOSIT_PAID -> IN_PROGRESS -> COMPLETED

    Negotiation Flow:
        QUOTE_RECEIVED -> NEGOTIATING -> CONFIRMED

    Exit Flows:
        QUOTE_REQUESTED/QUOTE_RECEIVED/NEGOTIATING -> DECLINED
        any non-terminal -> CANCELLED

    Fields:
        event_id/vendor_id/planner_id: References to aggregates owned elsewhere
        function_id: Optional sub-event (e.g. "sangeet") the booking belongs to
        service_category: Free-text service type (e.g. "catering")
        status: Current FSM state
        quoted_amount_cents: Vendor quote, set only by submit_quote()
        agreed_amount_cents: Final price, set only by accept_quote()
        payment_schedule: JSON list of milestones (see PaymentMilestone)
        *_date: Timestamps of request, vendor response and confirmation

    Note:
        The milestone schedule is not forced to add up to the agreed
        amount. schedule_discrepancy reports any gap.
    """

    # ==========================================================================
    # References
    # ==========================================================================

    event_id = models.UUIDField(
        db_index=True,
        help_text="Event this booking belongs to",
    )

    function_id = models.UUIDField(
        null=True,
        blank=True,
        help_text="Sub-event (function) this booking is for, if any",
    )

    vendor_id = models.UUIDField(
        db_index=True,
        help_text="Vendor asked to provide the service",
    )

    planner_id = models.UUIDField(
        db_index=True,
        help_text="Planner who raised the request",
    )

    # ==========================================================================
    # Service
    # ==========================================================================

    service_category = models.CharField(
        max_length=100,
        help_text="Type of service requested (e.g., 'catering', 'photography')",
    )

    service_details = models.JSONField(
        default=dict,
        blank=True,
        help_text="Free-form requirements sent to the vendor",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        max_length=50,
        default=BookingStatus.DRAFT,
        choices=BookingStatus.choices,
        db_index=True,
        protected=True,  # Prevent direct assignment outside transitions
        help_text="Current state of the booking (managed by FSM)",
    )

    # ==========================================================================
    # Amounts
    # ==========================================================================

    quoted_amount_cents = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text="Amount quoted by the vendor, in smallest currency unit",
    )

    agreed_amount_cents = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text="Amount agreed at confirmation, in smallest currency unit",
    )

    currency = models.CharField(
        max_length=3,
        default=default_currency,
        help_text="ISO 4217 currency code (lowercase)",
    )

    payment_schedule = models.JSONField(
        default=list,
        blank=True,
        help_text="Payment milestones: [{id, name, amount_cents, due_date, paid_date, status}]",
    )

    # ==========================================================================
    # Timestamps
    # ==========================================================================

    requested_date = models.DateTimeField(
        default=timezone.now,
        help_text="When the booking was requested",
    )

    response_date = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the vendor submitted a quote",
    )

    confirmation_date = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the quote was accepted",
    )

    # ==========================================================================
    # Notes
    # ==========================================================================

    notes = models.TextField(
        blank=True,
        default="",
        help_text="Notes shared with the vendor",
    )

    internal_notes = models.TextField(
        blank=True,
        default="",
        help_text="Planner-only notes (cancellation and decline reasons land here)",
    )

    # ==========================================================================
    # Meta & Methods
    # ==========================================================================

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Booking Request"
        verbose_name_plural = "Booking Requests"
        indexes = [
            models.Index(fields=["event_id", "status"], name="bookings_bo_event_i_5b1c2e_idx"),
            models.Index(fields=["planner_id", "status"], name="bookings_bo_planner_8d0e4a_idx"),
            models.Index(fields=["vendor_id", "status"], name="bookings_bo_vendor__3f7a91_idx"),
        ]

    def __str__(self) -> str:
        """Return string representation with ID, category, and state."""
        return f"BookingRequest({self.id}, {self.service_category}, {self.status})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @guarded_transition(
        field=status,
        source=sources_for(BookingStatus.QUOTE_REQUESTED),
        target=BookingStatus.QUOTE_REQUESTED,
    )
    def request_quote(self):
        """
        Send the request to the vendor.

        Transition: DRAFT -> QUOTE_REQUESTED
        """
        self.requested_date = timezone.now()

    @guarded_transition(
        field=status,
        source=sources_for(BookingStatus.QUOTE_RECEIVED),
        target=BookingStatus.QUOTE_RECEIVED,
    )
    def submit_quote(self, amount_cents: int):
        """
        Record the vendor's quote.

        Transition: QUOTE_REQUESTED -> QUOTE_RECEIVED

        Args:
            amount_cents: Quoted amount in smallest currency unit
        """
        self.quoted_amount_cents = amount_cents
        self.response_date = timezone.now()

    @guarded_transition(
        field=status,
        source=sources_for(BookingStatus.NEGOTIATING),
        target=BookingStatus.NEGOTIATING,
    )
    def start_negotiation(self):
        """
        Open a negotiation on the received quote.

        Transition: QUOTE_RECEIVED -> NEGOTIATING
        """
        pass

    @guarded_transition(
        field=status,
        source=sources_for(BookingStatus.CONFIRMED),
        target=BookingStatus.CONFIRMED,
    )
    def accept_quote(self, agreed_amount_cents: int | None = None):
        """
        Accept the quote and confirm the booking.

        Transition: QUOTE_RECEIVED/NEGOTIATING -> CONFIRMED

        Args:
            agreed_amount_cents: Negotiated price. Defaults to the quoted amount.
        """
        if agreed_amount_cents is None:
            agreed_amount_cents = self.quoted_amount_cents
        self.agreed_amount_cents = agreed_amount_cents
        self.confirmation_date = timezone.now()

    @guarded_transition(
        field=status,
        source=sources_for(BookingStatus.DEPOSIT_PAID),
        target=BookingStatus.DEPOSIT_PAID,
    )
    def record_deposit(self):
        """
        Mark the deposit as received.

        Transition: CONFIRMED -> DEPOSIT_PAID

        The aggregate never calls this on its own; the reconciliation
        service decides when a paid milestone counts as the deposit.
        """
        pass

    @guarded_transition(
        field=status,
        source=sources_for(BookingStatus.IN_PROGRESS),
        target=BookingStatus.IN_PROGRESS,
    )
    def start_work(self):
        """
        Vendor has started delivering the service.

        Transition: DEPOSIT_PAID -> IN_PROGRESS
        """
        pass

    @guarded_transition(
        field=status,
        source=sources_for(BookingStatus.COMPLETED),
        target=BookingStatus.COMPLETED,
    )
    def complete(self):
        """
        Mark the service as delivered.

        Transition: IN_PROGRESS -> COMPLETED
        """
        pass

    @guarded_transition(
        field=status,
        source=sources_for(BookingStatus.DECLINED),
        target=BookingStatus.DECLINED,
    )
    def decline(self, reason: str | None = None):
        """
        Vendor or planner declines the request.

        Transition: QUOTE_REQUESTED/QUOTE_RECEIVED/NEGOTIATING -> DECLINED
        """
        if reason:
            self._append_internal_note(f"Declined: {reason}")

    @guarded_transition(
        field=status,
        source=sources_for(BookingStatus.CANCELLED),
        target=BookingStatus.CANCELLED,
    )
    def cancel(self, reason: str | None = None):
        """
        Cancel the booking.

        Transition: any non-terminal state -> CANCELLED
        """
        if reason:
            self._append_internal_note(f"Cancelled: {reason}")

    def _append_internal_note(self, note: str) -> None:
        self.internal_notes = f"{self.internal_notes}\n{note}" if self.internal_notes else note

    # ==========================================================================
    # State Queries
    # ==========================================================================

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_BOOKING_STATES

    def can_transition_to(self, status: str) -> bool:
        """Check whether the transition table allows moving to ``status``."""
        return status in BOOKING_TRANSITIONS.get(self.status, frozenset())

    @property
    def available_transitions(self) -> list[str]:
        """Names of transition methods callable from the current state."""
        return [t.name for t in self.get_available_status_transitions()]

    def can(self, transition_name: str) -> bool:
        """Check whether transition method ``transition_name`` may run now."""
        return can_proceed(getattr(self, transition_name))

    # ==========================================================================
    # Payment Schedule
    # ==========================================================================

    @property
    def milestones(self) -> list[PaymentMilestone]:
        """Validated milestones from the stored payment schedule."""
        return [PaymentMilestone.from_dict(raw) for raw in self.payment_schedule or []]

    def _store_milestones(self, milestones: list[PaymentMilestone]) -> None:
        self.payment_schedule = [m.to_dict() for m in milestones]

    def add_payment_milestone(
        self,
        name: str,
        amount_cents: int,
        due_date: date,
    ) -> PaymentMilestone:
        """
        Append a pending milestone to the payment schedule.

        Args:
            name: Display name (e.g. "deposit")
            amount_cents: Amount in smallest currency unit
            due_date: Date the milestone falls due

        Returns:
            The new milestone

        Raises:
            BusinessRuleViolation: If the booking is in a terminal state
        """
        if self.is_terminal:
            raise BusinessRuleViolation(
                f"Cannot add a milestone to a {self.status} booking",
                details={
                    "booking_request_id": str(self.id),
                    "current_state": self.status,
                },
            )

        milestone = PaymentMilestone.create(name, amount_cents, due_date)
        self._store_milestones([*self.milestones, milestone])
        return milestone

    def mark_milestone_paid(self, milestone_id: str) -> PaymentMilestone:
        """
        Mark one milestone as paid now.

        Does not change the booking status.

        Raises:
            BusinessRuleViolation: If the booking is in a terminal state
            MilestoneNotFoundError: If ``milestone_id`` is not in the schedule
        """
        if self.is_terminal:
            raise BusinessRuleViolation(
                f"Cannot mark a milestone paid on a {self.status} booking",
                details={
                    "booking_request_id": str(self.id),
                    "milestone_id": str(milestone_id),
                    "current_state": self.status,
                },
            )

        milestones = self.milestones
        for index, milestone in enumerate(milestones):
            if milestone.id == str(milestone_id):
                milestones[index] = milestone.mark_paid()
                self._store_milestones(milestones)
                return milestones[index]

        raise MilestoneNotFoundError(
            f"Milestone {milestone_id} not found on booking {self.id}",
            details={
                "booking_request_id": str(self.id),
                "milestone_id": str(milestone_id),
            },
        )

    def get_milestone(self, milestone_id: str) -> PaymentMilestone:
        for milestone in self.milestones:
            if milestone.id == str(milestone_id):
                return milestone
        raise MilestoneNotFoundError(
            f"Milestone {milestone_id} not found on booking {self.id}",
            details={
                "booking_request_id": str(self.id),
                "milestone_id": str(milestone_id),
            },
        )

    # ==========================================================================
    # Derived Amounts
    # ==========================================================================

    @property
    def total_paid(self) -> int:
        """Sum of milestone amounts already paid."""
        return sum(m.amount_cents for m in self.milestones if m.is_paid)

    @property
    def outstanding_balance(self) -> int:
        """Agreed amount (0 when unset) minus what has been paid."""
        return (self.agreed_amount_cents or 0) - self.total_paid

    @property
    def is_fully_paid(self) -> bool:
        return self.outstanding_balance <= 0

    @property
    def scheduled_total(self) -> int:
        """Sum of all milestone amounts, paid or not."""
        return sum(m.amount_cents for m in self.milestones)

    @property
    def schedule_discrepancy(self) -> int:
        """
        Agreed amount minus the scheduled total.

        Positive means part of the price has no milestone yet; negative
        means the schedule asks for more than was agreed. Never corrected
        automatically.
        """
        return (self.agreed_amount_cents or 0) - self.scheduled_total
