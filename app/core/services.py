"""
Base service layer patterns for business logic encapsulation.

Service Layer Philosophy:
    Services encapsulate business logic separate from models and from any
    transport layer. Models enforce their own invariants (state machines,
    derived amounts); services load aggregates, call into them, persist
    the result and coordinate anything that crosses aggregate boundaries.

Error Handling:
    Services raise exceptions from core.exceptions (and app-specific
    subclasses). Nothing is converted into a return value; the caller
    decides how to present the failure.

Usage:
    from core.services import BaseService

    class BudgetService(BaseService):
        @classmethod
        def add_budget_payment(cls, item_id, amount_cents):
            with cls.atomic():
                item = BudgetItem.objects.select_for_update().get(pk=item_id)
                item.add_payment(amount_cents)
                item.save()

            cls.get_logger().info(f"Recorded {amount_cents} against {item_id}")
            return item

Related:
    - core.exceptions: Error hierarchy raised by services
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
        - Raise exceptions for failures, never return error values
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.

        Returns:
            Logger instance for this service
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        All database operations within this context manager are
        wrapped in a transaction. If any operation fails, all
        changes are rolled back.

        Yields:
            None

        Example:
            with cls.atomic():
                payment.mark_completed()
                payment.save()
                budget_item.add_payment(payment.amount_cents)
                budget_item.save()
                # If the budget item save fails, the payment is rolled back too

        Note:
            This is a thin wrapper around Django's transaction.atomic().
            Use it to make transaction boundaries explicit in service code.
        """
        with transaction.atomic():
            yield
