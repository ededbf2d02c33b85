"""
Tests for authentication app.

This package contains test modules for:
- test_models.py: User, Profile model tests
- test_views.py: JWT token endpoint tests

Usage:
    pytest authentication/tests/
    pytest authentication/tests/test_models.py
"""
