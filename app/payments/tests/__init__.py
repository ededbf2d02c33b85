"""
Tests for payments app.

This package contains test modules for:
- test_models.py: Refund model tests
- test_state_transitions.py: Refund state machine tests
- test_locks.py: DistributedLock tests
- test_refund_service.py: RefundService tests
- test_views.py: API endpoint tests

Usage:
    pytest payments/tests/
    pytest payments/tests/test_refund_service.py
"""
