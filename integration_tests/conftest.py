"""Pytest configuration for integration tests against the live Gemini API."""

import pytest

from fastwell.ai.client import CompletionClient
from fastwell.config import Settings


# Mark all tests in this directory as integration tests
def pytest_collection_modifyitems(items):
    """Add integration marker to all tests in this directory."""
    for item in items:
        if "integration_tests" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def gemini_client():
    """A real completion client; skips when no API key is configured."""
    settings = Settings.from_env()
    if not settings.gemini_api_key:
        pytest.skip("GEMINI_API_KEY not set")
    return CompletionClient.from_settings(settings)
