"""
Root pytest configuration for the Django project.

This module configures pytest-django and tunes settings for tests.
Project-wide fixtures live in app/conftest.py; app-specific fixtures are
defined in each app's tests/conftest.py.
"""

import os

import django

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()

    from django.conf import settings

    # Disable throttling during tests to prevent rate limit failures
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}

    # Use fast password hasher for tests (PBKDF2 is too slow with 870K iterations)
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]

    # No Redis in tests: in-memory cache, and the lock connection is mocked
    # in app/conftest.py
    settings.CACHES = {
        "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"},
    }

    # Notification tasks run inline
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True

    settings.PAYSTACK_SECRET_KEY = "sk_test_secret"
    settings.PAYSTACK_BASE_URL = "https://api.paystack.test"
    settings.REFUND_LOCK_TIMEOUT_SECONDS = 0.1
