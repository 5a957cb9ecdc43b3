"""
Bookings app: booking lifecycle, budget ledger and payment reconciliation.

This app handles:
- Planner/vendor booking requests from quote to completion
- Payment milestone schedules kept on each booking
- Per-event budget items and their paid totals
- Payment records, and crediting completed payments to the budget

Usage:
    from bookings.services import BookingService, ReconciliationService

    booking = BookingService.create_booking(
        event_id=event_id,
        vendor_id=vendor_id,
        planner_id=planner_id,
        service_category="catering",
    )
    ReconciliationService.complete_payment(payment_id, reference="TXN123")
"""
