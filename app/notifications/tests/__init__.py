"""
Tests for notifications app.

This package contains test modules for:
- test_services.py: NotificationService and create_notification task tests

Usage:
    pytest notifications/tests/
"""
