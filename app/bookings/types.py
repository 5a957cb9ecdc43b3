"""
Data types for booking, budget and payment operations.

This module defines dataclasses used throughout the bookings app for
type-safe data transfer between models and services.

Types:
    Money: A monetary amount in minor units with its currency
    PaymentMilestone: One scheduled partial payment inside a booking
    MilestoneInput: Caller-supplied milestone to add to a booking

Usage:
    from bookings.types import Money, MilestoneInput, PaymentMilestone

    # Money arithmetic refuses to mix currencies
    deposit = Money(cents=150000, currency="inr")
    balance = Money(cents=350000, currency="inr")
    print(deposit + balance)  # "INR 5000.00"

    # Milestones are stored as JSON on the booking and validated on load
    milestone = PaymentMilestone.from_dict(booking.payment_schedule[0])
    milestone.is_overdue()
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from core.exceptions import ValidationError

from bookings.state_machines import MilestoneStatus


class CurrencyMismatchError(ValueError):
    """Raised when Money arithmetic mixes two currencies."""


@dataclass(frozen=True)
class Money:
    """
    Represents a monetary amount.

    All amounts are stored in minor units (paise, cents) to avoid
    floating-point precision issues. The currency is stored as a
    lowercase 3-letter ISO 4217 code.

    Attributes:
        cents: Amount in the smallest currency unit
        currency: ISO 4217 currency code, always explicit

    Example:
        amount = Money(cents=500000, currency="inr")
        print(amount)  # "INR 5000.00"

        Money(cents=100, currency="inr") + Money(cents=100, currency="usd")
        # raises CurrencyMismatchError
    """

    cents: int
    currency: str

    @classmethod
    def zero(cls, currency: str) -> Money:
        """Return a zero amount in ``currency``."""
        return cls(cents=0, currency=currency)

    @classmethod
    def sum(cls, amounts: Iterable[Money], currency: str) -> Money:
        """
        Add up a sequence of Money values.

        Args:
            amounts: Money values, all in ``currency``
            currency: Currency of the result (used when ``amounts`` is empty)

        Returns:
            Total as Money

        Raises:
            CurrencyMismatchError: If any amount is in another currency
        """
        total = cls.zero(currency)
        for amount in amounts:
            total = total + amount
        return total

    def __str__(self) -> str:
        """Format as currency string (e.g., 'INR 5000.00')."""
        sign = "-" if self.cents < 0 else ""
        major, minor = divmod(abs(self.cents), 100)
        return f"{self.currency.upper()} {sign}{major}.{minor:02d}"

    def __add__(self, other: Money) -> Money:
        """Add two Money objects (must have same currency)."""
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "add")
        return Money(cents=self.cents + other.cents, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        """Subtract two Money objects (must have same currency)."""
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "subtract")
        return Money(cents=self.cents - other.cents, currency=self.currency)

    def _check_currency(self, other: Money, operation: str) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                f"Cannot {operation} Money with different currencies: "
                f"{self.currency} and {other.currency}"
            )


@dataclass(frozen=True)
class MilestoneInput:
    """
    A milestone the caller wants added to a booking's payment schedule.

    Example:
        MilestoneInput(name="deposit", amount_cents=150000, due_date=date(2025, 1, 1))
    """

    name: str
    amount_cents: int
    due_date: date


@dataclass(frozen=True)
class PaymentMilestone:
    """
    One scheduled partial payment within a booking's payment schedule.

    Milestones live inside BookingRequest.payment_schedule as a JSON list
    and have no identity outside their booking. Every read goes through
    from_dict(), so a malformed stored entry fails loudly with
    ValidationError (code INVALID_PAYMENT_SCHEDULE) instead of leaking a
    half-typed dict into money calculations.

    Attributes:
        id: Identifier unique within the booking
        name: Display name (e.g. "deposit", "final payment")
        amount_cents: Amount in minor units
        due_date: Date the milestone falls due
        status: pending, paid or overdue
        paid_date: When the milestone was marked paid
    """

    id: str
    name: str
    amount_cents: int
    due_date: date
    status: str = MilestoneStatus.PENDING
    paid_date: datetime | None = None

    @classmethod
    def create(cls, name: str, amount_cents: int, due_date: date) -> PaymentMilestone:
        """Build a new pending milestone with a fresh id."""
        return cls(
            id=str(uuid.uuid4()),
            name=name,
            amount_cents=amount_cents,
            due_date=due_date,
        )

    @property
    def is_paid(self) -> bool:
        return self.status == MilestoneStatus.PAID

    def is_overdue(self, today: date | None = None) -> bool:
        """True when the milestone is unpaid and its due date has passed."""
        today = today or timezone.localdate()
        return not self.is_paid and self.due_date < today

    def mark_paid(self, paid_at: datetime | None = None) -> PaymentMilestone:
        """Return a copy of this milestone marked as paid."""
        return replace(
            self,
            status=MilestoneStatus.PAID,
            paid_date=paid_at or timezone.now(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "amount_cents": self.amount_cents,
            "due_date": self.due_date.isoformat(),
            "paid_date": self.paid_date.isoformat() if self.paid_date else None,
            "status": str(self.status),
        }

    @classmethod
    def from_dict(cls, raw: Any) -> PaymentMilestone:
        """
        Validate a stored schedule entry and build a milestone from it.

        Args:
            raw: One element of BookingRequest.payment_schedule

        Returns:
            PaymentMilestone

        Raises:
            ValidationError: If the entry is missing fields or holds values
                of the wrong type
        """
        if not isinstance(raw, dict):
            _invalid("Payment schedule entry must be an object", raw)

        for key in ("id", "name", "amount_cents", "due_date"):
            if raw.get(key) in (None, ""):
                _invalid(f"Payment schedule entry is missing '{key}'", raw)

        amount = raw["amount_cents"]
        # bool is an int subclass
        if isinstance(amount, bool) or not isinstance(amount, int):
            _invalid("Milestone amount_cents must be an integer", raw)
        if amount < 0:
            _invalid("Milestone amount_cents must not be negative", raw)

        status = raw.get("status") or MilestoneStatus.PENDING
        if status not in MilestoneStatus.values:
            _invalid(f"Unknown milestone status '{status}'", raw)

        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            amount_cents=amount,
            due_date=_parse_due_date(raw["due_date"], raw),
            status=MilestoneStatus(status),
            paid_date=_parse_paid_date(raw.get("paid_date"), raw),
        )


def _invalid(message: str, raw: Any) -> None:
    raise ValidationError(
        message,
        error_code="INVALID_PAYMENT_SCHEDULE",
        details={"entry": raw},
    )


def _parse_due_date(value: Any, raw: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_date(value)
            if parsed is None:
                # Older schedules stored full ISO timestamps
                as_datetime = parse_datetime(value)
                parsed = as_datetime.date() if as_datetime else None
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed
    _invalid(f"Invalid milestone due_date {value!r}", raw)


def _parse_paid_date(value: Any, raw: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_datetime(value)
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed
    _invalid(f"Invalid milestone paid_date {value!r}", raw)


__all__ = [
    "CurrencyMismatchError",
    "MilestoneInput",
    "Money",
    "PaymentMilestone",
]
