"""
Pytest fixtures for booking tests.

This module provides fixtures for creating booking-related test data.
Fixtures are designed to provide objects in various states for testing
state transitions and business logic. Every state fixture reaches its
state through the real transitions, never by writing the status column.

Usage:
    def test_confirm_booking(quote_received_booking):
        quote_received_booking.accept_quote()
        quote_received_booking.save()
        assert quote_received_booking.status == BookingStatus.CONFIRMED
"""

import uuid
from datetime import date

import pytest

from bookings.state_machines import BudgetCategory
from bookings.tests.factories import (
    BookingRequestFactory,
    BudgetItemFactory,
    PaymentFactory,
)


# =============================================================================
# Reference Fixtures
# =============================================================================


@pytest.fixture
def event_id():
    """Id of the event every fixture below belongs to."""
    return uuid.uuid4()


@pytest.fixture
def vendor_id():
    return uuid.uuid4()


@pytest.fixture
def planner_id():
    return uuid.uuid4()


# =============================================================================
# BookingRequest State Fixtures
# =============================================================================


@pytest.fixture
def draft_booking(db, event_id, vendor_id, planner_id):
    """Create a draft booking."""
    return BookingRequestFactory(
        event_id=event_id,
        vendor_id=vendor_id,
        planner_id=planner_id,
    )


@pytest.fixture
def quote_requested_booking(db, draft_booking):
    """Create a booking waiting for the vendor's quote."""
    draft_booking.request_quote()
    draft_booking.save()
    return draft_booking


@pytest.fixture
def quote_received_booking(db, quote_requested_booking):
    """Create a booking quoted at INR 5000.00."""
    quote_requested_booking.submit_quote(500000)
    quote_requested_booking.save()
    return quote_requested_booking


@pytest.fixture
def negotiating_booking(db, quote_received_booking):
    """Create a booking under negotiation."""
    quote_received_booking.start_negotiation()
    quote_received_booking.save()
    return quote_received_booking


@pytest.fixture
def confirmed_booking(db, quote_received_booking):
    """Create a booking confirmed at the quoted INR 5000.00."""
    quote_received_booking.accept_quote()
    quote_received_booking.save()
    return quote_received_booking


@pytest.fixture
def confirmed_booking_with_schedule(db, confirmed_booking):
    """Create a confirmed booking with a 30/70 deposit and balance schedule."""
    confirmed_booking.add_payment_milestone("deposit", 150000, date(2025, 1, 1))
    confirmed_booking.add_payment_milestone("balance", 350000, date(2025, 2, 1))
    confirmed_booking.save()
    return confirmed_booking


@pytest.fixture
def deposit_paid_booking(db, confirmed_booking):
    """Create a booking whose deposit has been received."""
    confirmed_booking.record_deposit()
    confirmed_booking.save()
    return confirmed_booking


@pytest.fixture
def in_progress_booking(db, deposit_paid_booking):
    """Create a booking whose service is being delivered."""
    deposit_paid_booking.start_work()
    deposit_paid_booking.save()
    return deposit_paid_booking


@pytest.fixture
def completed_booking(db, in_progress_booking):
    """Create a completed booking."""
    in_progress_booking.complete()
    in_progress_booking.save()
    return in_progress_booking


@pytest.fixture
def cancelled_booking(db, quote_requested_booking):
    """Create a cancelled booking."""
    quote_requested_booking.cancel(reason="Event postponed")
    quote_requested_booking.save()
    return quote_requested_booking


@pytest.fixture
def declined_booking(db, quote_requested_booking):
    """Create a declined booking."""
    quote_requested_booking.decline(reason="Fully booked")
    quote_requested_booking.save()
    return quote_requested_booking


# =============================================================================
# Budget Item Fixtures
# =============================================================================


@pytest.fixture
def budget_item(db, event_id):
    """Create a catering line estimated at INR 5000.00 with nothing paid."""
    return BudgetItemFactory(
        event_id=event_id,
        category=BudgetCategory.CATERING,
        description="Wedding dinner",
        estimated_amount_cents=500000,
    )


# =============================================================================
# Payment State Fixtures
# =============================================================================


@pytest.fixture
def pending_payment(db, event_id, budget_item):
    """Create a pending INR 1500.00 payment linked to the budget item."""
    return PaymentFactory(
        event_id=event_id,
        budget_item=budget_item,
        amount_cents=150000,
    )


@pytest.fixture
def processing_payment(db, pending_payment):
    """Create a payment in processing."""
    pending_payment.start_processing()
    pending_payment.save()
    return pending_payment


@pytest.fixture
def completed_payment(db, event_id):
    """Create a completed payment with no budget item."""
    payment = PaymentFactory(event_id=event_id)
    payment.mark_completed(reference="TXN-FIXTURE")
    payment.save()
    return payment


@pytest.fixture
def cancelled_payment(db, event_id):
    """Create a cancelled payment."""
    payment = PaymentFactory(event_id=event_id)
    payment.cancel(reason="Duplicate")
    payment.save()
    return payment
