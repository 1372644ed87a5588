"""Shared fixtures."""

import pytest

from property_intake.config import get_settings
from property_intake.services.storage import RestPropertyStorage


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Run every test against default settings."""
    for name in (
        "PROPERTY_API_BASE_URL",
        "PROPERTY_API_TOKEN",
        "WIZARD_SKIP_COMMAND",
        "WIZARD_EXTRA_SKIP_PHRASES",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def no_retry_wait(monkeypatch):
    """Make the REST client's retries immediate."""
    monkeypatch.setattr(RestPropertyStorage._request.retry, "sleep", lambda seconds: None)
