"""
Django signals for the bookings app.

Provides:
- booking_event: sent by services whenever a booking lifecycle action
  happens (quote requested, confirmed, cancelled, ...)
- record_booking_message: receiver that appends a system message to the
  booking's thread

Usage:
    from bookings.signals import booking_event

    booking_event.send(
        sender=BookingService,
        booking=booking,
        content="Quote requested for catering",
    )

Note:
    Signals are connected in BookingsConfig.ready(). Receivers run inside
    the sender's transaction, so a failing receiver rolls the action back.
"""

from __future__ import annotations

import logging

from django.dispatch import Signal

logger = logging.getLogger(__name__)

# Sent with keyword arguments: booking, content
booking_event = Signal()


def connect_signals():
    """
    Connect all signal handlers.

    Called from BookingsConfig.ready() to ensure signals are connected
    after all models are loaded.
    """
    booking_event.connect(
        record_booking_message,
        dispatch_uid="bookings_record_booking_message",
    )

    logger.debug("Booking signals connected")


def record_booking_message(sender, booking, content: str, **kwargs) -> None:
    """
    Append a system status message to the booking's thread.

    Args:
        sender: Service class that sent the event
        booking: BookingRequest the event is about
        content: Message text
        **kwargs: Additional signal arguments
    """
    from bookings.models import BookingMessage

    BookingMessage.objects.create(
        booking_request=booking,
        sender_type=BookingMessage.SENDER_SYSTEM,
        message_type=BookingMessage.TYPE_STATUS_UPDATE,
        content=content,
    )
    logger.debug(f"Booking message recorded for {booking.id}: {content}")
