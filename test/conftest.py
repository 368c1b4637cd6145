"""
Test Configuration and Fixtures

This module provides:
- Environment setup before any application module reads settings
- In-memory backends for store and change channel (no external services)
- A TestClient for HTTP surface tests

Architecture:
- Unit tests (test/**/unit/): Use cases run against in-memory adapters and AsyncMock ports
- API tests (test/**/api/): Full FastAPI app over the DI container's in-memory backends
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read at import time (core_setting.py, loguru_io_config.py)
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    os.environ['STORE_BACKEND'] = 'memory'
    os.environ['CHANGE_CHANNEL_BACKEND'] = 'memory'
    os.environ['VENUE_TIMEZONE'] = 'Asia/Kolkata'
    os.environ['BOOKING_NOTIFICATION_URL'] = ''
    os.environ.setdefault('DEBUG', 'false')

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import Generator  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from src.platform.config.di import container  # noqa: E402


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """
    FastAPI TestClient with a fresh in-memory store per test.

    Singletons are reset so every test starts from an empty store and broadcaster.
    """
    from src.main import app

    container.reset_singletons()
    with TestClient(app) as test_client:
        yield test_client
    container.reset_singletons()
