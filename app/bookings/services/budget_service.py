"""
Budget service for the per-event budget ledger.

Usage:
    from bookings.services import BudgetService

    item = BudgetService.create_budget_item(
        event_id=event_id,
        category=BudgetCategory.VENUE,
        description="Banquet hall",
        estimated_amount_cents=300000,
    )
    BudgetService.add_budget_payment(item.id, 100000)

    summary = BudgetService.get_budget_summary(event_id)
    summary.remaining_cents
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from core.services import BaseService

from bookings.exceptions import BudgetItemNotFoundError
from bookings.locks import load_for_update
from bookings.models import BudgetItem
from bookings.state_machines import RECOMMENDED_SPLITS, BudgetCategory

if TYPE_CHECKING:
    import uuid

    from django.db.models import QuerySet


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class CategoryTotals:
    """Estimated, actual and paid totals for one category."""

    estimated_cents: int = 0
    actual_cents: int = 0
    paid_cents: int = 0


@dataclass
class BudgetSummary:
    """
    Read-side roll-up of an event's budget.

    Attributes:
        total_estimated_cents: Sum of estimates
        total_actual_cents: Sum of effective amounts (actual, else estimate)
        total_paid_cents: Sum of paid amounts
        remaining_cents: total_actual_cents - total_paid_cents
        by_category: Totals per category present on the event; the
            category "actual" counts only items with an actual amount
        over_budget_items: Items whose actual exceeds the estimate
    """

    total_estimated_cents: int = 0
    total_actual_cents: int = 0
    total_paid_cents: int = 0
    remaining_cents: int = 0
    by_category: dict[str, CategoryTotals] = field(default_factory=dict)
    over_budget_items: list[BudgetItem] = field(default_factory=list)


@dataclass(frozen=True)
class SplitRange:
    """Recommended spend range for one category."""

    min_cents: int
    max_cents: int


def _percent_of(total_cents: int, percent: int) -> int:
    # Half-up rounding of total * percent / 100
    return (total_cents * percent * 2 + 100) // 200


# =============================================================================
# Budget Service
# =============================================================================


class BudgetService(BaseService):
    """
    Service for budget item operations and budget read models.

    The paid amount of an item only moves through add_budget_payment (or
    ReconciliationService.complete_payment); update_budget_item never
    touches it.
    """

    UPDATABLE_FIELDS = (
        "description",
        "estimated_amount_cents",
        "actual_amount_cents",
        "vendor_id",
        "booking_request_id",
        "function_id",
        "notes",
    )

    @classmethod
    def create_budget_item(
        cls,
        event_id: uuid.UUID,
        category: str,
        description: str,
        estimated_amount_cents: int,
        actual_amount_cents: int | None = None,
        function_id: uuid.UUID | None = None,
        vendor_id: uuid.UUID | None = None,
        booking_request_id: uuid.UUID | None = None,
        currency: str | None = None,
        notes: str = "",
    ) -> BudgetItem:
        """
        Create a budget item with nothing paid yet.

        Returns:
            The new BudgetItem
        """
        item = BudgetItem(
            event_id=event_id,
            category=BudgetCategory(category),
            description=description,
            estimated_amount_cents=estimated_amount_cents,
            actual_amount_cents=actual_amount_cents,
            function_id=function_id,
            vendor_id=vendor_id,
            booking_request_id=booking_request_id,
            notes=notes,
        )
        if currency:
            item.currency = currency.lower()
        item.save()

        cls.get_logger().info(
            f"Budget item {item.id} created for event {event_id} ({item.category})",
            extra={"budget_item_id": str(item.id)},
        )
        return item

    @classmethod
    def update_budget_item(
        cls,
        item_id: uuid.UUID,
        expected_version: int | None = None,
        **changes,
    ) -> BudgetItem:
        """
        Update descriptive fields and amounts of a budget item.

        Args:
            item_id: Budget item to update
            expected_version: Version the caller last read
            **changes: Any of UPDATABLE_FIELDS

        Raises:
            BudgetItemNotFoundError: If the item doesn't exist
            ValueError: If a field outside UPDATABLE_FIELDS is passed
        """
        unknown = set(changes) - set(cls.UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update budget item fields: {sorted(unknown)}")

        with cls.atomic():
            item = load_for_update(BudgetItem, item_id, expected_version)
            for name, value in changes.items():
                setattr(item, name, value)
            item.save()

        return item

    @classmethod
    def add_budget_payment(
        cls,
        item_id: uuid.UUID,
        amount_cents: int,
        expected_version: int | None = None,
    ) -> BudgetItem:
        """
        Record a payment against a budget item.

        Concurrent payments against the same item serialize on the row
        lock, so no increment is lost.

        Raises:
            BudgetItemNotFoundError: If the item doesn't exist
            BusinessRuleViolation: If amount_cents is negative
        """
        with cls.atomic():
            item = load_for_update(BudgetItem, item_id, expected_version)
            item.add_payment(amount_cents)
            item.save()

        cls.get_logger().info(
            f"Recorded {amount_cents} against budget item {item_id}",
            extra={"budget_item_id": str(item_id), "paid_amount_cents": item.paid_amount_cents},
        )
        return item

    @classmethod
    def delete_budget_item(cls, item_id: uuid.UUID) -> None:
        """
        Delete a budget item.

        Raises:
            BudgetItemNotFoundError: If the item doesn't exist
        """
        deleted, _ = BudgetItem.objects.filter(pk=item_id).delete()
        if not deleted:
            raise BudgetItemNotFoundError(
                f"BudgetItem {item_id} not found",
                details={"budget_item_id": str(item_id)},
            )
        cls.get_logger().info(f"Budget item {item_id} deleted")

    # ==========================================================================
    # Queries
    # ==========================================================================

    @staticmethod
    def get_budget_item(item_id: uuid.UUID) -> BudgetItem:
        item = BudgetItem.objects.filter(pk=item_id).first()
        if item is None:
            raise BudgetItemNotFoundError(
                f"BudgetItem {item_id} not found",
                details={"budget_item_id": str(item_id)},
            )
        return item

    @staticmethod
    def get_budget_items(
        event_id: uuid.UUID,
        category: str | None = None,
        function_id: uuid.UUID | None = None,
    ) -> QuerySet[BudgetItem]:
        items = BudgetItem.objects.filter(event_id=event_id)
        if category:
            items = items.filter(category=category)
        if function_id:
            items = items.filter(function_id=function_id)
        return items

    @classmethod
    def get_over_budget_items(cls, event_id: uuid.UUID) -> list[BudgetItem]:
        """Items whose actual amount exceeds the estimate."""
        return [item for item in cls.get_budget_items(event_id) if item.is_over_budget]

    @classmethod
    def get_budget_summary(cls, event_id: uuid.UUID) -> BudgetSummary:
        """
        Roll up an event's budget.

        Pure read; nothing is modified.
        """
        summary = BudgetSummary()
        for item in cls.get_budget_items(event_id):
            summary.total_estimated_cents += item.estimated_amount_cents
            summary.total_actual_cents += item.effective_amount
            summary.total_paid_cents += item.paid_amount_cents

            totals = summary.by_category.setdefault(item.category, CategoryTotals())
            totals.estimated_cents += item.estimated_amount_cents
            totals.actual_cents += item.actual_amount_cents or 0
            totals.paid_cents += item.paid_amount_cents

            if item.is_over_budget:
                summary.over_budget_items.append(item)

        summary.remaining_cents = summary.total_actual_cents - summary.total_paid_cents
        return summary

    @staticmethod
    def get_recommended_split(total_budget_cents: int) -> dict[str, SplitRange]:
        """
        Advisory spend range per category for a total budget.

        Independent of the event's actual items.
        """
        return {
            category: SplitRange(
                min_cents=_percent_of(total_budget_cents, low),
                max_cents=_percent_of(total_budget_cents, high),
            )
            for category, (low, high) in RECOMMENDED_SPLITS.items()
        }

    @staticmethod
    def get_categories() -> list[dict[str, str]]:
        """All budget categories with their display labels."""
        return [{"value": value, "label": label} for value, label in BudgetCategory.choices]
