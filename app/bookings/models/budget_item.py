"""
BudgetItem model: one line of an event's budget ledger.

Each item carries an estimate, an optional actual (quoted or invoiced)
amount and a running paid total. The paid total only ever grows; money
reaches it through add_payment(), either directly or when a linked
Payment completes.

Usage:
    from bookings.models import BudgetItem
    from bookings.state_machines import BudgetCategory

    item = BudgetItem.objects.create(
        event_id=event_id,
        category=BudgetCategory.VENUE,
        description="Banquet hall",
        estimated_amount_cents=300000,
    )
    item.is_over_budget       # False, no actual amount yet
    item.add_payment(100000)
    item.save()
"""

from __future__ import annotations

import logging

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin, VersionedMixin
from core.models import BaseModel

from bookings.exceptions import BusinessRuleViolation
from bookings.models.booking_request import default_currency
from bookings.state_machines import BudgetCategory
from bookings.types import Money

logger = logging.getLogger(__name__)


class BudgetItem(UUIDPrimaryKeyMixin, VersionedMixin, BaseModel):
    """
    A single budget line for an event.

    Fields:
        event_id: Event this line belongs to
        function_id: Optional sub-event
        category: One of the fixed BudgetCategory values
        vendor_id: Vendor the money goes to, if known
        booking_request: Booking this line was created for, if any
        estimated_amount_cents: Planner's estimate
        actual_amount_cents: Quoted or invoiced amount, null until known
        paid_amount_cents: Running total of payments recorded

    Note:
        Overpayment is permitted. It shows up as a negative
        remaining_balance and is logged as a warning.
    """

    # ==========================================================================
    # References
    # ==========================================================================

    event_id = models.UUIDField(
        db_index=True,
        help_text="Event this budget line belongs to",
    )

    function_id = models.UUIDField(
        null=True,
        blank=True,
        help_text="Sub-event (function) this line is for, if any",
    )

    vendor_id = models.UUIDField(
        null=True,
        blank=True,
        help_text="Vendor being paid, if known",
    )

    booking_request = models.ForeignKey(
        "bookings.BookingRequest",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="budget_items",
        help_text="Booking this line was created for",
    )

    # ==========================================================================
    # Description
    # ==========================================================================

    category = models.CharField(
        max_length=20,
        choices=BudgetCategory.choices,
        db_index=True,
        help_text="Budget category",
    )

    description = models.CharField(
        max_length=255,
        help_text="What the money is for",
    )

    notes = models.TextField(
        blank=True,
        default="",
    )

    # ==========================================================================
    # Amounts
    # ==========================================================================

    estimated_amount_cents = models.PositiveBigIntegerField(
        default=0,
        help_text="Estimated cost in smallest currency unit",
    )

    actual_amount_cents = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text="Actual (quoted or invoiced) cost, null until known",
    )

    paid_amount_cents = models.PositiveBigIntegerField(
        default=0,
        help_text="Total paid so far - only increases",
    )

    currency = models.CharField(
        max_length=3,
        default=default_currency,
        help_text="ISO 4217 currency code (lowercase)",
    )

    # ==========================================================================
    # Meta & Methods
    # ==========================================================================

    class Meta:
        ordering = ["category", "-created_at"]
        verbose_name = "Budget Item"
        verbose_name_plural = "Budget Items"
        indexes = [
            models.Index(fields=["event_id", "category"], name="bookings_bu_event_i_9c4d17_idx"),
        ]

    def __str__(self) -> str:
        return f"BudgetItem({self.id}, {self.category}, {self.description})"

    # ==========================================================================
    # Derived Amounts
    # ==========================================================================

    @property
    def effective_amount(self) -> int:
        """Actual amount when known, otherwise the estimate."""
        if self.actual_amount_cents is not None:
            return self.actual_amount_cents
        return self.estimated_amount_cents

    @property
    def remaining_balance(self) -> int:
        """Effective amount minus paid. Negative when overpaid."""
        return self.effective_amount - self.paid_amount_cents

    @property
    def is_over_budget(self) -> bool:
        """True only when an actual amount exceeds the estimate."""
        if self.actual_amount_cents is None:
            return False
        return self.actual_amount_cents > self.estimated_amount_cents

    @property
    def overage_amount(self) -> int:
        if not self.is_over_budget:
            return 0
        return self.actual_amount_cents - self.estimated_amount_cents

    @property
    def payment_progress(self) -> int:
        """
        Percentage of the effective amount paid, rounded half-up.

        An item with nothing to pay counts as fully paid (100).
        """
        effective = self.effective_amount
        if effective == 0:
            return 100
        # Integer half-up rounding of paid * 100 / effective
        return (self.paid_amount_cents * 200 + effective) // (effective * 2)

    @property
    def paid_money(self) -> Money:
        return Money(cents=self.paid_amount_cents, currency=self.currency)

    # ==========================================================================
    # Ledger Operations
    # ==========================================================================

    def add_payment(self, amount_cents: int, currency: str | None = None) -> None:
        """
        Add a payment to the running paid total.

        Args:
            amount_cents: Amount paid, in smallest currency unit
            currency: Currency of the payment (defaults to the item's own)

        Raises:
            BusinessRuleViolation: If amount_cents is negative
            CurrencyMismatchError: If currency differs from the item's
        """
        if amount_cents < 0:
            raise BusinessRuleViolation(
                "Budget payments must not be negative",
                details={
                    "budget_item_id": str(self.id),
                    "amount_cents": amount_cents,
                },
            )

        paid = self.paid_money + Money(cents=amount_cents, currency=currency or self.currency)
        self.paid_amount_cents = paid.cents

        if self.remaining_balance < 0:
            logger.warning(
                f"Budget item {self.id} overpaid by {-self.remaining_balance} "
                f"{self.currency.upper()}",
                extra={
                    "budget_item_id": str(self.id),
                    "paid_amount_cents": self.paid_amount_cents,
                    "effective_amount_cents": self.effective_amount,
                },
            )
