import pytest

from mercury_http.logging import LoggingConfig
from mercury_http.logging.models import Entry, LogLevel


@pytest.fixture(autouse=True)
def debug_logging():
    """Let debug entries through for logging tests, then restore the quiet default."""
    config = LoggingConfig()
    config.update(log_level="debug", disabled_loggers=[])
    yield
    config.update(log_level="error")


@pytest.fixture
def temp_log_directory(tmp_path) -> str:
    return str(tmp_path / "logs")


@pytest.fixture
def sample_entry() -> Entry:
    return Entry(message="Test log message", level=LogLevel.INFO)


@pytest.fixture
def sample_entry_factory():
    def create_entry(
        message: str = "Test log message",
        level: LogLevel = LogLevel.INFO,
    ) -> Entry:
        return Entry(message=message, level=level)

    return create_entry
