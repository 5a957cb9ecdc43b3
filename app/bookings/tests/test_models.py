"""
Tests for booking models.

Covers the milestone schedule and derived amounts on BookingRequest, the
budget ledger arithmetic on BudgetItem, due-date reads on Payment and the
string representations used in logs.
"""

import uuid
from datetime import date, timedelta
from unittest import mock

import pytest
from django.utils import timezone
from freezegun import freeze_time

from core.exceptions import ValidationError

from bookings.exceptions import BusinessRuleViolation, MilestoneNotFoundError
from bookings.models import BookingRequest
from bookings.state_machines import BookingStatus, MilestoneStatus, PaymentStatus
from bookings.tests.factories import (
    BookingMessageFactory,
    BookingRequestFactory,
    BudgetItemFactory,
    PaymentFactory,
)
from bookings.types import CurrencyMismatchError, Money, PaymentMilestone


# =============================================================================
# BookingRequest Tests
# =============================================================================


class TestBookingRequestMilestones:
    """Tests for the embedded payment schedule."""

    def test_add_payment_milestone_appends_pending_entry(self, db, confirmed_booking):
        milestone = confirmed_booking.add_payment_milestone("deposit", 150000, date(2025, 1, 1))
        confirmed_booking.save()

        stored = BookingRequest.objects.get(pk=confirmed_booking.pk)
        assert stored.payment_schedule == [
            {
                "id": milestone.id,
                "name": "deposit",
                "amount_cents": 150000,
                "due_date": "2025-01-01",
                "paid_date": None,
                "status": "pending",
            }
        ]

    def test_add_payment_milestone_allowed_before_confirmation(self, db, quote_received_booking):
        """Vendors may propose a schedule together with their quote."""
        quote_received_booking.add_payment_milestone("advance", 100000, date(2025, 1, 1))

        assert len(quote_received_booking.milestones) == 1

    @pytest.mark.parametrize("fixture_name", ["completed_booking", "cancelled_booking", "declined_booking"])
    def test_add_payment_milestone_on_terminal_booking_raises(self, db, request, fixture_name):
        booking = request.getfixturevalue(fixture_name)

        with pytest.raises(BusinessRuleViolation) as exc_info:
            booking.add_payment_milestone("late fee", 1000, date(2025, 1, 1))

        assert exc_info.value.details["current_state"] == booking.status
        assert booking.payment_schedule == []

    @freeze_time("2025-01-05 10:00:00")
    def test_mark_milestone_paid(self, db, confirmed_booking_with_schedule):
        deposit = confirmed_booking_with_schedule.milestones[0]

        paid = confirmed_booking_with_schedule.mark_milestone_paid(deposit.id)

        assert paid.status == MilestoneStatus.PAID
        assert paid.paid_date == timezone.now()
        assert confirmed_booking_with_schedule.get_milestone(deposit.id).is_paid
        # Balance milestone untouched
        assert not confirmed_booking_with_schedule.milestones[1].is_paid

    def test_mark_milestone_paid_does_not_change_status(self, db, confirmed_booking_with_schedule):
        deposit = confirmed_booking_with_schedule.milestones[0]

        confirmed_booking_with_schedule.mark_milestone_paid(deposit.id)

        assert confirmed_booking_with_schedule.status == BookingStatus.CONFIRMED

    def test_mark_unknown_milestone_raises(self, db, confirmed_booking_with_schedule):
        with pytest.raises(MilestoneNotFoundError) as exc_info:
            confirmed_booking_with_schedule.mark_milestone_paid("no-such-id")

        assert exc_info.value.details["milestone_id"] == "no-such-id"

    @pytest.mark.parametrize("fixture_name", ["completed_booking", "cancelled_booking", "declined_booking"])
    def test_mark_milestone_paid_on_terminal_booking_raises(self, db, request, fixture_name):
        booking = request.getfixturevalue(fixture_name)
        milestone = PaymentMilestone.create("advance", 50000, date(2025, 1, 1))
        booking.payment_schedule = [milestone.to_dict()]

        with pytest.raises(BusinessRuleViolation) as exc_info:
            booking.mark_milestone_paid(milestone.id)

        assert exc_info.value.details["milestone_id"] == milestone.id
        assert exc_info.value.details["current_state"] == booking.status
        assert not booking.get_milestone(milestone.id).is_paid
        assert booking.total_paid == 0

    def test_get_unknown_milestone_raises(self, db, confirmed_booking):
        with pytest.raises(MilestoneNotFoundError):
            confirmed_booking.get_milestone("no-such-id")

    def test_malformed_stored_schedule_fails_loudly(self, db):
        """Should raise instead of computing totals from a broken entry."""
        booking = BookingRequestFactory(payment_schedule=[{"name": "deposit", "amount_cents": 100}])

        with pytest.raises(ValidationError) as exc_info:
            booking.total_paid

        assert exc_info.value.error_code == "INVALID_PAYMENT_SCHEDULE"


class TestBookingRequestAmounts:
    """Tests for derived amounts on BookingRequest."""

    def test_amounts_without_schedule(self, db, confirmed_booking):
        assert confirmed_booking.total_paid == 0
        assert confirmed_booking.outstanding_balance == 500000
        assert not confirmed_booking.is_fully_paid

    def test_unconfirmed_booking_has_zero_outstanding(self, db, quote_received_booking):
        """An unset agreed amount counts as zero."""
        assert quote_received_booking.agreed_amount_cents is None
        assert quote_received_booking.outstanding_balance == 0
        assert quote_received_booking.is_fully_paid

    def test_partial_payment(self, db, confirmed_booking_with_schedule):
        deposit = confirmed_booking_with_schedule.milestones[0]
        confirmed_booking_with_schedule.mark_milestone_paid(deposit.id)

        assert confirmed_booking_with_schedule.total_paid == 150000
        assert confirmed_booking_with_schedule.outstanding_balance == 350000
        assert not confirmed_booking_with_schedule.is_fully_paid

    def test_fully_paid(self, db, confirmed_booking_with_schedule):
        for milestone in confirmed_booking_with_schedule.milestones:
            confirmed_booking_with_schedule.mark_milestone_paid(milestone.id)

        assert confirmed_booking_with_schedule.total_paid == 500000
        assert confirmed_booking_with_schedule.outstanding_balance == 0
        assert confirmed_booking_with_schedule.is_fully_paid

    def test_schedule_matching_agreed_amount_has_no_discrepancy(
        self, db, confirmed_booking_with_schedule
    ):
        assert confirmed_booking_with_schedule.scheduled_total == 500000
        assert confirmed_booking_with_schedule.schedule_discrepancy == 0

    def test_schedule_discrepancy_is_reported_not_corrected(
        self, db, confirmed_booking_with_schedule
    ):
        confirmed_booking_with_schedule.add_payment_milestone("extras", 100000, date(2025, 3, 1))

        assert confirmed_booking_with_schedule.scheduled_total == 600000
        assert confirmed_booking_with_schedule.schedule_discrepancy == -100000
        assert confirmed_booking_with_schedule.agreed_amount_cents == 500000

    def test_str(self, db, draft_booking):
        assert str(draft_booking) == f"BookingRequest({draft_booking.id}, catering, draft)"

    def test_currency_defaults_from_settings(self, db, settings):
        settings.DEFAULT_CURRENCY = "usd"

        booking = BookingRequest.objects.create(
            event_id=uuid.uuid4(),
            vendor_id=uuid.uuid4(),
            planner_id=uuid.uuid4(),
            service_category="photography",
        )

        assert booking.currency == "usd"


# =============================================================================
# BudgetItem Tests
# =============================================================================


class TestBudgetItemAmounts:
    """Tests for the budget line arithmetic."""

    def test_effective_amount_falls_back_to_estimate(self):
        item = BudgetItemFactory.build(estimated_amount_cents=300000, actual_amount_cents=None)

        assert item.effective_amount == 300000

    def test_effective_amount_prefers_actual(self):
        item = BudgetItemFactory.build(estimated_amount_cents=300000, actual_amount_cents=0)

        assert item.effective_amount == 0

    def test_remaining_balance(self):
        item = BudgetItemFactory.build(
            estimated_amount_cents=300000,
            actual_amount_cents=350000,
            paid_amount_cents=100000,
        )

        assert item.remaining_balance == 250000

    def test_over_budget(self):
        item = BudgetItemFactory.build(estimated_amount_cents=300000, actual_amount_cents=350000)

        assert item.is_over_budget
        assert item.overage_amount == 50000

    def test_not_over_budget_without_actual(self):
        item = BudgetItemFactory.build(estimated_amount_cents=0, actual_amount_cents=None)

        assert not item.is_over_budget
        assert item.overage_amount == 0

    def test_under_budget_has_no_overage(self):
        item = BudgetItemFactory.build(estimated_amount_cents=300000, actual_amount_cents=250000)

        assert not item.is_over_budget
        assert item.overage_amount == 0

    @pytest.mark.parametrize(
        "effective,paid,expected",
        [
            (300000, 0, 0),
            (300000, 100000, 33),
            (300000, 300000, 100),
            (8, 1, 13),  # 12.5 rounds half-up
            (300000, 450000, 150),
            (0, 0, 100),
        ],
    )
    def test_payment_progress(self, effective, paid, expected):
        item = BudgetItemFactory.build(estimated_amount_cents=effective, paid_amount_cents=paid)

        assert item.payment_progress == expected

    def test_paid_money(self):
        item = BudgetItemFactory.build(paid_amount_cents=12345, currency="inr")

        assert item.paid_money == Money(cents=12345, currency="inr")


class TestBudgetItemAddPayment:
    """Tests for BudgetItem.add_payment."""

    def test_adds_to_paid_total(self):
        item = BudgetItemFactory.build(estimated_amount_cents=300000, paid_amount_cents=50000)

        item.add_payment(100000)

        assert item.paid_amount_cents == 150000
        assert item.remaining_balance == 150000

    def test_zero_payment_is_a_no_op(self):
        item = BudgetItemFactory.build(paid_amount_cents=50000)

        item.add_payment(0)

        assert item.paid_amount_cents == 50000

    def test_negative_payment_raises(self):
        item = BudgetItemFactory.build(paid_amount_cents=50000)

        with pytest.raises(BusinessRuleViolation):
            item.add_payment(-1)

        assert item.paid_amount_cents == 50000

    def test_other_currency_raises(self):
        item = BudgetItemFactory.build(paid_amount_cents=50000, currency="inr")

        with pytest.raises(CurrencyMismatchError):
            item.add_payment(1000, currency="usd")

        assert item.paid_amount_cents == 50000

    def test_overpayment_is_allowed_and_logged(self):
        item = BudgetItemFactory.build(estimated_amount_cents=100000, paid_amount_cents=90000)

        with mock.patch("bookings.models.budget_item.logger") as mock_logger:
            item.add_payment(20000)

        assert item.paid_amount_cents == 110000
        assert item.remaining_balance == -10000
        mock_logger.warning.assert_called_once()

    def test_exact_payment_is_not_logged(self):
        item = BudgetItemFactory.build(estimated_amount_cents=100000, paid_amount_cents=90000)

        with mock.patch("bookings.models.budget_item.logger") as mock_logger:
            item.add_payment(10000)

        assert item.remaining_balance == 0
        mock_logger.warning.assert_not_called()

    def test_persisted_payment(self, db, budget_item):
        budget_item.add_payment(150000)
        budget_item.save()

        budget_item.refresh_from_db()
        assert budget_item.paid_amount_cents == 150000


# =============================================================================
# Payment Tests
# =============================================================================


@freeze_time("2025-01-10 12:00:00")
class TestPaymentDueDates:
    """Tests for due-date reads on Payment."""

    def test_no_due_date(self):
        payment = PaymentFactory.build(due_date=None)

        assert not payment.is_overdue
        assert payment.days_until_due is None

    def test_past_due_pending_is_overdue(self):
        payment = PaymentFactory.build(due_date=timezone.now() - timedelta(hours=1))

        assert payment.is_overdue

    def test_future_due_is_not_overdue(self):
        payment = PaymentFactory.build(due_date=timezone.now() + timedelta(hours=1))

        assert not payment.is_overdue

    def test_completed_payment_is_never_overdue(self, db):
        payment = PaymentFactory(due_date=timezone.now() - timedelta(days=3))
        payment.mark_completed()

        assert not payment.is_overdue

    def test_cancelled_payment_is_never_overdue(self, db):
        payment = PaymentFactory(due_date=timezone.now() - timedelta(days=3))
        payment.cancel()

        assert not payment.is_overdue

    def test_failed_payment_past_due_is_overdue(self, db):
        payment = PaymentFactory(due_date=timezone.now() - timedelta(days=3))
        payment.mark_failed()

        assert payment.status == PaymentStatus.FAILED
        assert payment.is_overdue

    @pytest.mark.parametrize(
        "offset,expected",
        [
            (timedelta(hours=36), 2),
            (timedelta(days=7), 7),
            (timedelta(hours=-36), -1),
        ],
    )
    def test_days_until_due_rounds_up(self, offset, expected):
        payment = PaymentFactory.build(due_date=timezone.now() + offset)

        assert payment.days_until_due == expected

    def test_str(self):
        payment = PaymentFactory.build(amount_cents=150050, currency="inr")

        assert str(payment) == f"Payment({payment.id}, pending, 1500.50 INR)"


# =============================================================================
# BookingMessage Tests
# =============================================================================


class TestBookingMessage:
    def test_defaults_to_system_status_update(self, db):
        message = BookingMessageFactory(content="Quote requested for catering")

        assert message.sender_type == "system"
        assert message.message_type == "status_update"
        assert message.booking_request.messages.count() == 1

    def test_messages_are_deleted_with_booking(self, db):
        message = BookingMessageFactory()
        booking = message.booking_request

        booking.delete()

        assert not type(message).objects.filter(pk=message.pk).exists()
