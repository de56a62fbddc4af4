# ===============================================================================
# PYTEST CONFIGURATION FOR THE OPTICIAN MARKETPLACE
# ===============================================================================
"""
Global test configuration.

Test Structure:
- tests/ mirrors apps/ structure for app-specific tests
- tests/factories/ holds plain factory functions shared by every suite
- Naming convention: test_{app}_{feature}.py

Test Discovery:
- Run specific app tests: pytest tests/loyalty/
- Run all tests: pytest tests/
"""

import os

import django


def pytest_configure():
    """Configure Django settings for pytest"""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.test")

    django.setup()

# ===============================================================================
# PYTEST FIXTURES
# ===============================================================================

import pytest  # noqa: E402
from rest_framework.test import APIClient  # noqa: E402

from tests.factories.marketplace import (  # noqa: E402
    RecordingNotifier,
    create_admin,
    create_optician,
    create_product,
)


@pytest.fixture
def admin_user(db):
    """Create marketplace administrator"""
    return create_admin()


@pytest.fixture
def optician(db):
    """Create approved optician with an empty balance"""
    return create_optician()


@pytest.fixture
def product(db):
    """Create in-stock catalog product"""
    return create_product()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def admin_client(admin_user):
    """API client authenticated as the marketplace administrator"""
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client
