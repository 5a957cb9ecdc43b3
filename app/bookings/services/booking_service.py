"""
Booking service for the planner/vendor booking lifecycle.

This module provides the BookingService class which loads BookingRequest
aggregates under a row lock, applies one lifecycle step, saves the result
and records a system message on the booking's thread.

Lifecycle:
    create_booking        planner raises a request (quote_requested)
    submit_quote          vendor quotes (quote_received)
    start_negotiation     planner pushes back (negotiating)
    accept_quote          planner accepts (confirmed)
    start_work            vendor starts delivery (in_progress)
    complete_booking      service delivered (completed)
    decline_booking       request turned down (declined)
    cancel_booking        request withdrawn (cancelled)

Marking milestones paid crosses into the deposit rule and lives in
ReconciliationService.

Usage:
    from bookings.services import BookingService
    from bookings.types import MilestoneInput

    booking = BookingService.create_booking(
        event_id=event_id,
        vendor_id=vendor_id,
        planner_id=planner_id,
        service_category="catering",
    )
    booking = BookingService.submit_quote(booking.id, amount_cents=500000)
    booking = BookingService.accept_quote(
        booking.id,
        milestones=[MilestoneInput("deposit", 150000, date(2025, 1, 1))],
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db.models import Count

from core.services import BaseService

from bookings.exceptions import BookingNotFoundError
from bookings.locks import load_for_update
from bookings.models import BookingRequest
from bookings.signals import booking_event
from bookings.state_machines import ACTIVE_BOOKING_STATES, BookingStatus
from bookings.types import Money

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable
    from datetime import date

    from django.db.models import QuerySet

    from bookings.types import MilestoneInput


class BookingService(BaseService):
    """
    Service for booking lifecycle operations.

    Every mutating method:
        1. Opens a transaction
        2. Locks the booking row (checking expected_version when given)
        3. Calls the aggregate's transition or milestone method
        4. Saves (version auto-increments)
        5. Sends booking_event so the audit message lands in the same
           transaction

    Errors from the aggregate (InvalidStateTransitionError,
    BusinessRuleViolation, MilestoneNotFoundError) propagate unchanged and
    roll the transaction back.
    """

    # ==========================================================================
    # Mutations
    # ==========================================================================

    @classmethod
    def create_booking(
        cls,
        event_id: uuid.UUID,
        vendor_id: uuid.UUID,
        planner_id: uuid.UUID,
        service_category: str,
        function_id: uuid.UUID | None = None,
        service_details: dict | None = None,
        notes: str = "",
        currency: str | None = None,
        as_draft: bool = False,
    ) -> BookingRequest:
        """
        Create a booking request.

        Args:
            event_id: Event the booking belongs to
            vendor_id: Vendor asked for a quote
            planner_id: Planner raising the request
            service_category: Service type (e.g. "catering")
            function_id: Optional sub-event
            service_details: Free-form requirements for the vendor
            notes: Notes shared with the vendor
            currency: Currency code, defaults to settings.DEFAULT_CURRENCY
            as_draft: Keep the booking in draft instead of requesting a quote

        Returns:
            The new BookingRequest (quote_requested, or draft)
        """
        booking = BookingRequest(
            event_id=event_id,
            vendor_id=vendor_id,
            planner_id=planner_id,
            function_id=function_id,
            service_category=service_category,
            service_details=service_details or {},
            notes=notes,
        )
        if currency:
            booking.currency = currency.lower()

        with cls.atomic():
            if not as_draft:
                booking.request_quote()
            booking.save()
            if not as_draft:
                cls._record(booking, f"Quote requested for {service_category}")

        cls.get_logger().info(
            f"Booking {booking.id} created for event {event_id} ({booking.status})",
            extra={"booking_request_id": str(booking.id), "vendor_id": str(vendor_id)},
        )
        return booking

    @classmethod
    def request_quote(
        cls,
        booking_id: uuid.UUID,
        expected_version: int | None = None,
    ) -> BookingRequest:
        """Send a draft booking to the vendor (draft -> quote_requested)."""
        with cls.atomic():
            booking = load_for_update(BookingRequest, booking_id, expected_version)
            booking.request_quote()
            booking.save()
            cls._record(booking, f"Quote requested for {booking.service_category}")

        cls._log_transition(booking)
        return booking

    @classmethod
    def update_booking(
        cls,
        booking_id: uuid.UUID,
        service_details: dict | None = None,
        notes: str | None = None,
        internal_notes: str | None = None,
        expected_version: int | None = None,
    ) -> BookingRequest:
        """Update the descriptive fields of a booking. Status is untouched."""
        with cls.atomic():
            booking = load_for_update(BookingRequest, booking_id, expected_version)
            if service_details is not None:
                booking.service_details = service_details
            if notes is not None:
                booking.notes = notes
            if internal_notes is not None:
                booking.internal_notes = internal_notes
            booking.save()

        return booking

    @classmethod
    def submit_quote(
        cls,
        booking_id: uuid.UUID,
        amount_cents: int,
        milestones: Iterable[MilestoneInput] | None = None,
        expected_version: int | None = None,
    ) -> BookingRequest:
        """
        Record the vendor's quote, optionally with a proposed payment schedule.

        Args:
            booking_id: Booking to quote
            amount_cents: Quoted amount
            milestones: Milestones to append to the schedule
            expected_version: Version the caller last read

        Returns:
            The updated BookingRequest (quote_received)

        Raises:
            BookingNotFoundError: If the booking doesn't exist
            InvalidStateTransitionError: If the booking is not quote_requested
            StaleRecordError: If expected_version is out of date
        """
        with cls.atomic():
            booking = load_for_update(BookingRequest, booking_id, expected_version)
            booking.submit_quote(amount_cents)
            cls._add_milestones(booking, milestones)
            booking.save()
            quoted = Money(cents=amount_cents, currency=booking.currency)
            cls._record(booking, f"Quote submitted: {quoted}")

        cls._log_transition(booking)
        return booking

    @classmethod
    def start_negotiation(
        cls,
        booking_id: uuid.UUID,
        expected_version: int | None = None,
    ) -> BookingRequest:
        """Open a negotiation on the received quote."""
        with cls.atomic():
            booking = load_for_update(BookingRequest, booking_id, expected_version)
            booking.start_negotiation()
            booking.save()
            cls._record(booking, "Negotiation started")

        cls._log_transition(booking)
        return booking

    @classmethod
    def accept_quote(
        cls,
        booking_id: uuid.UUID,
        agreed_amount_cents: int | None = None,
        milestones: Iterable[MilestoneInput] | None = None,
        expected_version: int | None = None,
    ) -> BookingRequest:
        """
        Accept the quote and confirm the booking.

        Args:
            booking_id: Booking to confirm
            agreed_amount_cents: Negotiated price, defaults to the quote
            milestones: Milestones to append to the schedule
            expected_version: Version the caller last read

        Returns:
            The updated BookingRequest (confirmed)
        """
        with cls.atomic():
            booking = load_for_update(BookingRequest, booking_id, expected_version)
            booking.accept_quote(agreed_amount_cents)
            cls._add_milestones(booking, milestones)
            booking.save()
            agreed = Money(cents=booking.agreed_amount_cents or 0, currency=booking.currency)
            cls._record(booking, f"Booking confirmed at {agreed}")

        cls._log_transition(booking)
        cls._warn_on_schedule_discrepancy(booking)
        return booking

    @classmethod
    def decline_booking(
        cls,
        booking_id: uuid.UUID,
        reason: str | None = None,
        expected_version: int | None = None,
    ) -> BookingRequest:
        """Decline the request (quote_requested/quote_received/negotiating)."""
        with cls.atomic():
            booking = load_for_update(BookingRequest, booking_id, expected_version)
            booking.decline(reason)
            booking.save()
            cls._record(booking, "Booking declined")

        cls._log_transition(booking)
        return booking

    @classmethod
    def cancel_booking(
        cls,
        booking_id: uuid.UUID,
        reason: str | None = None,
        expected_version: int | None = None,
    ) -> BookingRequest:
        """Cancel a booking in any non-terminal state."""
        with cls.atomic():
            booking = load_for_update(BookingRequest, booking_id, expected_version)
            booking.cancel(reason)
            booking.save()
            content = f"Booking cancelled: {reason}" if reason else "Booking cancelled"
            cls._record(booking, content)

        cls._log_transition(booking)
        return booking

    @classmethod
    def start_work(
        cls,
        booking_id: uuid.UUID,
        expected_version: int | None = None,
    ) -> BookingRequest:
        """Vendor has started delivery (deposit_paid -> in_progress)."""
        with cls.atomic():
            booking = load_for_update(BookingRequest, booking_id, expected_version)
            booking.start_work()
            booking.save()
            cls._record(booking, "Work started")

        cls._log_transition(booking)
        return booking

    @classmethod
    def complete_booking(
        cls,
        booking_id: uuid.UUID,
        expected_version: int | None = None,
    ) -> BookingRequest:
        """Service delivered (in_progress -> completed)."""
        with cls.atomic():
            booking = load_for_update(BookingRequest, booking_id, expected_version)
            booking.complete()
            booking.save()
            cls._record(booking, "Booking completed")

        cls._log_transition(booking)
        return booking

    @classmethod
    def add_milestone(
        cls,
        booking_id: uuid.UUID,
        name: str,
        amount_cents: int,
        due_date: date,
        expected_version: int | None = None,
    ) -> BookingRequest:
        """
        Append a pending milestone to the booking's payment schedule.

        Raises:
            BusinessRuleViolation: If the booking is in a terminal state
        """
        with cls.atomic():
            booking = load_for_update(BookingRequest, booking_id, expected_version)
            booking.add_payment_milestone(name, amount_cents, due_date)
            booking.save()

        cls._warn_on_schedule_discrepancy(booking)
        return booking

    # ==========================================================================
    # Queries
    # ==========================================================================

    @staticmethod
    def get_booking(booking_id: uuid.UUID) -> BookingRequest:
        """
        Get a booking by id.

        Raises:
            BookingNotFoundError: If the booking doesn't exist
        """
        booking = BookingRequest.objects.filter(pk=booking_id).first()
        if booking is None:
            raise BookingNotFoundError(
                f"BookingRequest {booking_id} not found",
                details={"booking_request_id": str(booking_id)},
            )
        return booking

    @staticmethod
    def get_bookings_for_event(event_id: uuid.UUID) -> QuerySet[BookingRequest]:
        return BookingRequest.objects.filter(event_id=event_id)

    @staticmethod
    def get_bookings_for_vendor(vendor_id: uuid.UUID) -> QuerySet[BookingRequest]:
        return BookingRequest.objects.filter(vendor_id=vendor_id)

    @staticmethod
    def get_pending_requests_for_vendor(vendor_id: uuid.UUID) -> QuerySet[BookingRequest]:
        """Requests still waiting for the vendor's quote."""
        return BookingRequest.objects.filter(
            vendor_id=vendor_id,
            status=BookingStatus.QUOTE_REQUESTED,
        )

    @staticmethod
    def get_active_bookings_for_planner(planner_id: uuid.UUID) -> QuerySet[BookingRequest]:
        """Confirmed bookings not yet completed (confirmed, deposit_paid, in_progress)."""
        return BookingRequest.objects.filter(
            planner_id=planner_id,
            status__in=ACTIVE_BOOKING_STATES,
        )

    @staticmethod
    def get_booking_status_counts(planner_id: uuid.UUID) -> dict[str, int]:
        """
        Count a planner's bookings per status.

        Returns:
            Mapping of every BookingStatus value to its count (0 included)
        """
        counts = {status: 0 for status in BookingStatus.values}
        rows = (
            BookingRequest.objects.filter(planner_id=planner_id)
            .values("status")
            .annotate(total=Count("id"))
            .order_by()
        )
        for row in rows:
            counts[row["status"]] = row["total"]
        return counts

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @classmethod
    def _add_milestones(
        cls,
        booking: BookingRequest,
        milestones: Iterable[MilestoneInput] | None,
    ) -> None:
        for milestone in milestones or ():
            booking.add_payment_milestone(
                milestone.name,
                milestone.amount_cents,
                milestone.due_date,
            )

    @classmethod
    def _record(cls, booking: BookingRequest, content: str) -> None:
        booking_event.send(sender=cls, booking=booking, content=content)

    @classmethod
    def _log_transition(cls, booking: BookingRequest) -> None:
        cls.get_logger().info(
            f"Booking {booking.id} is now {booking.status}",
            extra={"booking_request_id": str(booking.id), "status": booking.status},
        )

    @classmethod
    def _warn_on_schedule_discrepancy(cls, booking: BookingRequest) -> None:
        if not booking.payment_schedule or booking.agreed_amount_cents is None:
            return
        discrepancy = booking.schedule_discrepancy
        if discrepancy:
            cls.get_logger().warning(
                f"Booking {booking.id} milestones total {booking.scheduled_total}, "
                f"agreed amount is {booking.agreed_amount_cents}",
                extra={
                    "booking_request_id": str(booking.id),
                    "schedule_discrepancy_cents": discrepancy,
                },
            )
