"""
Bookings app configuration.

This app provides the booking and budget reconciliation engine:
- Booking lifecycle with payment milestones
- Per-event budget ledger
- Payment records and their reconciliation into the budget
"""

from django.apps import AppConfig


class BookingsConfig(AppConfig):
    """Configuration for the bookings application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "bookings"
    verbose_name = "Bookings"

    def ready(self) -> None:
        """Connect signal handlers when app is ready."""
        from bookings.signals import connect_signals

        connect_signals()
