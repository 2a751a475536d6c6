"""
Pytest configuration for Django app tests.
"""

from unittest.mock import MagicMock

from django.contrib.auth import get_user_model
from django.core.cache import cache

import pytest

from apps.web.payments.gateway import YocoGateway


@pytest.fixture(autouse=True)
def clear_cache():
    """Idempotency keys and the menu response live in the cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user(db):
    """Create a test customer."""
    User = get_user_model()
    return User.objects.create_user(
        username="testuser",
        email="testuser@example.com",
        password="testpass123",
    )


@pytest.fixture
def other_user(db):
    """A second customer, for ownership checks."""
    User = get_user_model()
    return User.objects.create_user(
        username="otheruser",
        email="otheruser@example.com",
        password="testpass123",
    )


@pytest.fixture
def staff_user(db):
    User = get_user_model()
    return User.objects.create_user(
        username="staff",
        email="staff@example.com",
        password="testpass123",
        is_staff=True,
    )


@pytest.fixture
def gateway() -> MagicMock:
    """Gateway double; tests set the async method return values they need."""
    return MagicMock(spec=YocoGateway)
