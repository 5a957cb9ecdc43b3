"""
Booking domain services.

This module exports the service classes for booking operations:
- BookingService: Booking lifecycle from quote request to completion
- BudgetService: Per-event budget items and budget read models
- PaymentService: Payment records, totals and alerts
- ReconciliationService: Milestone deposits and payment-to-budget crediting

Usage:
    from bookings.services import BookingService, ReconciliationService

    booking = BookingService.submit_quote(booking_id, amount_cents=500000)
    payment = ReconciliationService.complete_payment(payment_id, reference="TXN123")
"""

from bookings.services.booking_service import BookingService
from bookings.services.budget_service import (
    BudgetService,
    BudgetSummary,
    CategoryTotals,
    SplitRange,
)
from bookings.services.payment_service import (
    PaymentAlerts,
    PaymentService,
    PaymentTotals,
)
from bookings.services.reconciliation_service import ReconciliationService

__all__ = [
    "BookingService",
    "BudgetService",
    "BudgetSummary",
    "CategoryTotals",
    "PaymentAlerts",
    "PaymentService",
    "PaymentTotals",
    "ReconciliationService",
    "SplitRange",
]
