"""
Pytest configuration for mercury_http tests.

Async tests are marked with @pytest.mark.asyncio and run under
pytest-asyncio.
"""

import pytest

from mercury_http.env import Env
from mercury_http.logging import LoggingConfig


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture(autouse=True)
def quiet_logging():
    """Only let error entries through while tests run."""
    config = LoggingConfig()
    config.update(log_level="error")
    yield
    config.update(log_level="info")


@pytest.fixture
def env() -> Env:
    """Client settings used by tests, independent of the process environment."""
    return Env(
        MERCURY_HTTP_TIMEOUT="2s",
        MERCURY_HTTP_LOG_LEVEL="error",
    )
