"""
State enums for booking models.

This module defines the state and choice enums used by booking models with
django-fsm. These are Django TextChoices for database storage; the labels
double as display names.

State Machines Overview:

BookingRequest States:
    draft → quote_requested → quote_received → confirmed
    quote_received → negotiating → confirmed
    confirmed → deposit_paid → in_progress → completed
    quote_requested/quote_received/negotiating → declined
    any non-terminal state → cancelled

Payment States:
    pending → processing → completed
    pending/processing → completed / failed / cancelled
"""

from types import MappingProxyType

from django.db import models


class BookingStatus(models.TextChoices):
    """
    States for the BookingRequest lifecycle.

    Terminal states: COMPLETED, CANCELLED, DECLINED

    State Flow (happy path):
        DRAFT -> QUOTE_REQUESTED -> QUOTE_RECEIVED -> CONFIRMED
              -> DEPOSIT_PAID -> IN_PROGRESS -> COMPLETED

    Negotiation Flow:
        QUOTE_RECEIVED -> NEGOTIATING -> CONFIRMED

    Exit Flows:
        QUOTE_REQUESTED/QUOTE_RECEIVED/NEGOTIATING -> DECLINED
        any non-terminal -> CANCELLED
    """

    DRAFT = "draft", "Draft"
    QUOTE_REQUESTED = "quote_requested", "Quote Requested"
    QUOTE_RECEIVED = "quote_received", "Quote Received"
    NEGOTIATING = "negotiating", "Negotiating"
    CONFIRMED = "confirmed", "Confirmed"
    DEPOSIT_PAID = "deposit_paid", "Deposit Paid"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"
    DECLINED = "declined", "Declined"


# Source of truth for legal booking moves. The FSM transitions on
# BookingRequest are declared from these sets.
BOOKING_TRANSITIONS = MappingProxyType(
    {
        BookingStatus.DRAFT: frozenset(
            [BookingStatus.QUOTE_REQUESTED, BookingStatus.CANCELLED]
        ),
        BookingStatus.QUOTE_REQUESTED: frozenset(
            [
                BookingStatus.QUOTE_RECEIVED,
                BookingStatus.DECLINED,
                BookingStatus.CANCELLED,
            ]
        ),
        BookingStatus.QUOTE_RECEIVED: frozenset(
            [
                BookingStatus.NEGOTIATING,
                BookingStatus.CONFIRMED,
                BookingStatus.DECLINED,
                BookingStatus.CANCELLED,
            ]
        ),
        BookingStatus.NEGOTIATING: frozenset(
            [
                BookingStatus.CONFIRMED,
                BookingStatus.DECLINED,
                BookingStatus.CANCELLED,
            ]
        ),
        BookingStatus.CONFIRMED: frozenset(
            [BookingStatus.DEPOSIT_PAID, BookingStatus.CANCELLED]
        ),
        BookingStatus.DEPOSIT_PAID: frozenset(
            [BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED]
        ),
        BookingStatus.IN_PROGRESS: frozenset(
            [BookingStatus.COMPLETED, BookingStatus.CANCELLED]
        ),
        BookingStatus.COMPLETED: frozenset(),
        BookingStatus.CANCELLED: frozenset(),
        BookingStatus.DECLINED: frozenset(),
    }
)

TERMINAL_BOOKING_STATES = frozenset(
    status for status, targets in BOOKING_TRANSITIONS.items() if not targets
)

ACTIVE_BOOKING_STATES = frozenset(
    [
        BookingStatus.CONFIRMED,
        BookingStatus.DEPOSIT_PAID,
        BookingStatus.IN_PROGRESS,
    ]
)


def sources_for(target: str) -> list[str]:
    """Return every booking status allowed to move to ``target``."""
    return [
        status for status, targets in BOOKING_TRANSITIONS.items() if target in targets
    ]


class MilestoneStatus(models.TextChoices):
    """
    Status of an embedded payment milestone.

    OVERDUE is accepted when loading stored schedules but the engine never
    writes it; lateness is computed on read (PaymentMilestone.is_overdue).
    """

    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    OVERDUE = "overdue", "Overdue"


class PaymentStatus(models.TextChoices):
    """
    States for the Payment lifecycle.

    Terminal states: COMPLETED, FAILED, CANCELLED

    State Flow:
        PENDING -> PROCESSING -> COMPLETED
        PENDING/PROCESSING -> COMPLETED / FAILED / CANCELLED
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"
    CANCELLED = "cancelled", "Cancelled"


OPEN_PAYMENT_STATES = frozenset([PaymentStatus.PENDING, PaymentStatus.PROCESSING])


class PaymentType(models.TextChoices):
    """Direction and nature of a money movement."""

    CLIENT_PAYMENT = "client_payment", "Client Payment"
    VENDOR_PAYMENT = "vendor_payment", "Vendor Payment"
    REFUND = "refund", "Refund"
    EXPENSE = "expense", "Expense"


class PaymentMethod(models.TextChoices):
    """How the money moved."""

    BANK_TRANSFER = "bank_transfer", "Bank Transfer"
    CASH = "cash", "Cash"
    CHEQUE = "cheque", "Cheque"
    UPI = "upi", "UPI"
    CARD = "card", "Card"
    OTHER = "other", "Other"


class BudgetCategory(models.TextChoices):
    """
    Closed set of budget categories for an event.

    Labels are the display names shown on budget dashboards.
    """

    VENUE = "venue", "Venue & Infrastructure"
    CATERING = "catering", "Food & Beverage"
    DECORATION = "decoration", "Decoration & Design"
    PHOTOGRAPHY = "photography", "Photography & Video"
    ENTERTAINMENT = "entertainment", "Entertainment"
    ATTIRE = "attire", "Attire & Jewelry"
    MAKEUP = "makeup", "Makeup & Hair"
    TRANSPORT = "transport", "Transport & Logistics"
    INVITATIONS = "invitations", "Invitations & Stationery"
    GIFTS = "gifts", "Gifts & Favors"
    MISCELLANEOUS = "miscellaneous", "Miscellaneous"


# Industry-standard share of the total budget per category, as (min%, max%).
# Advisory only.
RECOMMENDED_SPLITS = MappingProxyType(
    {
        BudgetCategory.VENUE: (20, 30),
        BudgetCategory.CATERING: (25, 35),
        BudgetCategory.DECORATION: (15, 25),
        BudgetCategory.PHOTOGRAPHY: (5, 10),
        BudgetCategory.ENTERTAINMENT: (5, 10),
        BudgetCategory.ATTIRE: (3, 8),
        BudgetCategory.MAKEUP: (2, 5),
        BudgetCategory.TRANSPORT: (3, 5),
        BudgetCategory.INVITATIONS: (2, 5),
        BudgetCategory.GIFTS: (2, 5),
        BudgetCategory.MISCELLANEOUS: (5, 10),
    }
)


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
    "sources_for",
]
