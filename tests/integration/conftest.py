"""Shared fixtures for integration tests."""

import os

import pytest

from metraweather.lightning import Credentials


@pytest.fixture
def credentials() -> Credentials:
    """API key credentials from LIGHTNING_API_KEY."""
    api_key = os.environ.get("LIGHTNING_API_KEY")
    if not api_key:
        pytest.skip("Set LIGHTNING_API_KEY to run against the live API")
    return Credentials.api_key(api_key)
