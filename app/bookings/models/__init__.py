"""
Booking domain models.

This module contains all booking-related models:
- BookingRequest: Planner/vendor booking with its payment milestone schedule
- BudgetItem: One line of an event's budget ledger
- Payment: A money movement, optionally settling a budget line
- BookingMessage: Audit trail of booking lifecycle events
"""

from bookings.models.booking_message import BookingMessage
from bookings.models.booking_request import BookingRequest
from bookings.models.budget_item import BudgetItem
from bookings.models.payment import Payment

__all__ = [
    "BookingMessage",
    "BookingRequest",
    "BudgetItem",
    "Payment",
]
