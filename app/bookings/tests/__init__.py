"""
Tests for bookings app.

This package contains test modules for:
- test_types.py: Money and PaymentMilestone
- test_exceptions.py: Error hierarchy, codes and details
- test_state_transitions.py: BookingRequest and Payment state machines
- test_models.py: Derived amounts and milestone operations
- test_optimistic_locking.py: Version column and check_version
- test_signals.py: Audit message receiver
- test_services.py: Booking, budget and payment services
- test_reconciliation_service.py: Milestone and payment reconciliation
- test_integration.py: End-to-end booking and budget flows

Usage:
    pytest bookings/tests/
    pytest bookings/tests/test_reconciliation_service.py
"""
