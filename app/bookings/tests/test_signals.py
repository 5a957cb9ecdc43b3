"""
Tests for booking signal handlers.

The booking_event receiver writes the audit message in the same
transaction as the lifecycle change, so a failing receiver must undo the
change it describes.
"""

from unittest import mock

import pytest
from django.db import DatabaseError

from bookings.models import BookingMessage, BookingRequest
from bookings.services import BookingService
from bookings.signals import booking_event, connect_signals, record_booking_message
from bookings.state_machines import BookingStatus


class TestRecordBookingMessage:
    """Tests for the record_booking_message receiver."""

    def test_creates_system_message(self, db, draft_booking):
        record_booking_message(sender=None, booking=draft_booking, content="Quote requested for catering")

        message = BookingMessage.objects.get(booking_request=draft_booking)
        assert message.content == "Quote requested for catering"
        assert message.sender_type == BookingMessage.SENDER_SYSTEM
        assert message.message_type == BookingMessage.TYPE_STATUS_UPDATE

    def test_connected_on_startup(self, db, draft_booking):
        booking_event.send(sender=BookingService, booking=draft_booking, content="Hello")

        assert BookingMessage.objects.filter(booking_request=draft_booking).count() == 1

    def test_connecting_twice_does_not_duplicate_messages(self, db, draft_booking):
        connect_signals()
        connect_signals()

        booking_event.send(sender=BookingService, booking=draft_booking, content="Hello")

        assert BookingMessage.objects.filter(booking_request=draft_booking).count() == 1


class TestReceiverFailure:
    """A failing audit write rolls back the lifecycle change."""

    def test_failed_message_rolls_back_transition(self, db, confirmed_booking):
        with mock.patch.object(
            BookingMessage.objects,
            "create",
            side_effect=DatabaseError("messages table locked"),
        ):
            with pytest.raises(DatabaseError):
                BookingService.cancel_booking(confirmed_booking.pk, reason="Changed plans")

        stored = BookingRequest.objects.get(pk=confirmed_booking.pk)
        assert stored.status == BookingStatus.CONFIRMED
        assert stored.internal_notes == ""
        assert stored.version == confirmed_booking.version
