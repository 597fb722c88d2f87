"""
Shared test configuration.

Provider settings must exist before billproxy.main is imported, since the
module builds the application at import time.
"""

import os

import pytest

os.environ.setdefault("PROVIDER_BASE_URL", "https://provider.test/v1")
os.environ.setdefault("PROVIDER_API_KEY", "test-api-key")

from billproxy.config import Settings, get_settings  # noqa: E402


@pytest.fixture
def mock_settings():
    """Settings pointing at a fake provider"""
    return Settings(
        PROVIDER_BASE_URL="https://provider.test/v1",
        PROVIDER_API_KEY="test-api-key",
        PORT=3000,
    )


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def provider_bill():
    """A full provider bill payload, including fields that must not leak"""
    return {
        "phone": "5551234567",
        "total_due": 42.5,
        "due_date": "2024-07-01",
        "last_payment": "2024-06-01",
        "account_id": "ACC-998877",
        "customer_name": "Jane Doe",
        "billing_address": "1 Main St",
    }
