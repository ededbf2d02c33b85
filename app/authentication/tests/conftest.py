"""
Test configuration and fixtures for authentication tests.
"""

import pytest
from authentication.tests.factories import UserFactory


@pytest.fixture
def user(db):
    """A buyer with first and last name set on the profile."""
    return UserFactory(first_name="Ada", last_name="Obi")
