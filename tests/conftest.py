"""Shared test configuration.

Zeroes every simulated delay so the concurrency demos finish instantly,
pins a known JWT secret, and keeps every ORM demo on in-memory SQLite.
"""

import os

import pytest

# Set before any module imports config
os.environ["DELAY_SCALE"] = "0"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SQL_ECHO"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear cached settings so each test gets fresh config."""
    from lessons.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
