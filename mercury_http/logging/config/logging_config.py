import contextvars
from typing import FrozenSet, Literal

from mercury_http.logging.models import LogLevel, LogLevelName

from .stream_type import StreamType


LogOutput = Literal["stdout", "stderr"]

_log_level = contextvars.ContextVar("_mercury_http_log_level", default=LogLevel.INFO)
_log_output = contextvars.ContextVar("_mercury_http_log_output", default=StreamType.STDERR)
_disabled_loggers: contextvars.ContextVar[FrozenSet[str]] = contextvars.ContextVar(
    "_mercury_http_disabled_loggers",
    default=frozenset(),
)


class LoggingConfig:
    """
    Process-wide logging settings. Values live in context variables, so a
    task inherits the settings in effect when it was created.
    """

    def update(
        self,
        log_level: LogLevelName | None = None,
        log_output: LogOutput | None = None,
        disabled_loggers: list[str] | None = None,
    ):
        if log_level:
            _log_level.set(LogLevel.to_level(log_level))

        if log_output:
            _log_output.set(StreamType.from_name(log_output))

        if disabled_loggers is not None:
            _disabled_loggers.set(frozenset(disabled_loggers))

    def disable(self, logger_name: str):
        _disabled_loggers.set(_disabled_loggers.get() | {logger_name})

    def enable(self, logger_name: str):
        _disabled_loggers.set(_disabled_loggers.get() - {logger_name})

    def enabled(self, logger_name: str, log_level: LogLevel) -> bool:
        if logger_name in _disabled_loggers.get():
            return False

        return log_level.rank >= _log_level.get().rank

    @property
    def level(self) -> LogLevel:
        return _log_level.get()

    @property
    def output(self) -> StreamType:
        return _log_output.get()
