"""
State machine enums and helpers for booking models.

This module defines the state enums used by booking models with django-fsm,
the booking transition table, and the transition decorator that raises
domain errors.
"""

from bookings.state_machines.states import (
    ACTIVE_BOOKING_STATES,
    BOOKING_TRANSITIONS,
    OPEN_PAYMENT_STATES,
    RECOMMENDED_SPLITS,
    TERMINAL_BOOKING_STATES,
    BookingStatus,
    BudgetCategory,
    MilestoneStatus,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
    sources_for,
)
from bookings.state_machines.transitions import guarded_transition

__all__ = [
    "ACTIVE_BOOKING_STATES",
    "BOOKING_TRANSITIONS",
    "BookingStatus",
    "BudgetCategory",
    "MilestoneStatus",
    "OPEN_PAYMENT_STATES",
    "PaymentMethod",
    "PaymentStatus",
    "PaymentType",
    "RECOMMENDED_SPLITS",
    "TERMINAL_BOOKING_STATES",
    "guarded_transition",
    "sources_for",
]
