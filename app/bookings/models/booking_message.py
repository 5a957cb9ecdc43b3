"""
BookingMessage model: the audit trail of a booking.

System messages are written by the booking_event signal receiver
(bookings.signals) in the same transaction as the change they describe.
"""

from __future__ import annotations

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class BookingMessage(UUIDPrimaryKeyMixin, BaseModel):
    """
    One entry in a booking's message thread.

    Fields:
        booking_request: Booking the message belongs to
        sender_type: "system" for lifecycle events
        message_type: "status_update" for lifecycle events
        content: Human-readable text
    """

    SENDER_SYSTEM = "system"
    TYPE_STATUS_UPDATE = "status_update"

    booking_request = models.ForeignKey(
        "bookings.BookingRequest",
        on_delete=models.CASCADE,
        related_name="messages",
    )

    sender_type = models.CharField(
        max_length=20,
        default=SENDER_SYSTEM,
    )

    message_type = models.CharField(
        max_length=30,
        default=TYPE_STATUS_UPDATE,
    )

    content = models.TextField()

    class Meta:
        ordering = ["created_at"]
        verbose_name = "Booking Message"
        verbose_name_plural = "Booking Messages"

    def __str__(self) -> str:
        return f"BookingMessage({self.booking_request_id}, {self.content[:40]})"
