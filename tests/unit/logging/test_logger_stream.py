import os

import msgspec
import pytest

from mercury_http.logging import Logger, LoggingConfig
from mercury_http.logging.http_client_models import (
    HTTPClientDebug,
    HTTPClientErrorEntry,
    HTTPClientTrace,
)
from mercury_http.logging.models import Entry, LogLevel
from mercury_http.logging.streams.logger_stream import LoggerStream


def read_logs(path: str) -> list[dict]:
    with open(path, "rb") as logfile:
        return [
            msgspec.json.decode(line)
            for line in logfile.read().splitlines()
            if line
        ]


class TestLoggerStreamFile:
    @pytest.mark.asyncio
    async def test_log_writes_json_lines(
        self,
        sample_entry_factory,
        temp_log_directory: str,
    ):
        stream = LoggerStream(
            name="test_json",
            filename="test.json",
            directory=temp_log_directory,
        )

        for message in ["first", "second"]:
            await stream.log(sample_entry_factory(message=message))

        await stream.close()

        logs = read_logs(os.path.join(temp_log_directory, "test.json"))

        assert [log["entry"]["message"] for log in logs] == ["first", "second"]
        assert logs[0]["entry"]["level"] == "INFO"
        assert logs[0]["function_name"] == "test_log_writes_json_lines"

    @pytest.mark.asyncio
    async def test_logfile_suffix_is_forced_to_json(
        self,
        sample_entry: Entry,
        temp_log_directory: str,
    ):
        stream = LoggerStream(
            name="test_suffix",
            filename="requests.log",
            directory=temp_log_directory,
        )

        await stream.log(sample_entry)
        await stream.close()

        assert os.path.exists(os.path.join(temp_log_directory, "requests.json"))

    @pytest.mark.asyncio
    async def test_entries_below_level_are_dropped(
        self,
        sample_entry_factory,
        temp_log_directory: str,
    ):
        LoggingConfig().update(log_level="error")

        stream = LoggerStream(
            name="test_level",
            filename="test.json",
            directory=temp_log_directory,
        )

        await stream.log(sample_entry_factory(message="dropped", level=LogLevel.INFO))
        await stream.log(sample_entry_factory(message="kept", level=LogLevel.ERROR))
        await stream.close()

        logs = read_logs(os.path.join(temp_log_directory, "test.json"))

        assert [log["entry"]["message"] for log in logs] == ["kept"]

    @pytest.mark.asyncio
    async def test_disabled_logger_writes_nothing(
        self,
        sample_entry: Entry,
        temp_log_directory: str,
    ):
        config = LoggingConfig()
        config.update(disabled_loggers=["test_disabled"])

        try:
            stream = LoggerStream(
                name="test_disabled",
                filename="test.json",
                directory=temp_log_directory,
            )

            await stream.log(sample_entry)
            await stream.close()

        finally:
            config.update(disabled_loggers=[])

        assert os.path.exists(os.path.join(temp_log_directory, "test.json")) is False

    @pytest.mark.asyncio
    async def test_schedule_is_awaited_on_close(
        self,
        sample_entry: Entry,
        temp_log_directory: str,
    ):
        stream = LoggerStream(
            name="test_schedule",
            filename="test.json",
            directory=temp_log_directory,
        )

        stream.schedule(sample_entry)
        assert stream.pending == 1

        await stream.close()

        logs = read_logs(os.path.join(temp_log_directory, "test.json"))
        assert len(logs) == 1
        assert stream.pending == 0


class TestLoggerStreamModels:
    @pytest.mark.asyncio
    async def test_log_prepared_uses_named_model_defaults(
        self,
        temp_log_directory: str,
    ):
        LoggingConfig().update(log_level="trace")

        defaults = {
            "request_id": 42,
            "method": "GET",
            "url": "example.com:80/",
        }

        stream = LoggerStream(
            name="test_models",
            filename="test.json",
            directory=temp_log_directory,
            models={
                "trace": (HTTPClientTrace, defaults),
                "debug": (HTTPClientDebug, defaults),
                "error": (HTTPClientErrorEntry, defaults),
            },
        )

        await stream.log_prepared("entering RESOLVING", name="trace")
        await stream.log_prepared("200 OK", name="debug")
        await stream.log_prepared("failed", name="error")
        await stream.log_prepared("plain")
        await stream.close()

        logs = read_logs(os.path.join(temp_log_directory, "test.json"))

        assert [log["entry"]["level"] for log in logs] == ["TRACE", "DEBUG", "ERROR", "INFO"]
        assert logs[0]["entry"]["request_id"] == 42
        assert logs[2]["entry"]["url"] == "example.com:80/"
        assert "request_id" not in logs[3]["entry"]

    def test_template_formatting(self):
        entry = HTTPClientDebug(
            message="200 OK",
            request_id=7,
            method="GET",
            url="example.com:80/",
        )

        assert entry.to_template("{level} {method} {url} {message}") == (
            "DEBUG GET example.com:80/ 200 OK"
        )


class TestLogger:
    @pytest.mark.asyncio
    async def test_context_reuses_configured_stream(
        self,
        temp_log_directory: str,
    ):
        logger = Logger()
        logger.configure(
            name="configured",
            path=os.path.join(temp_log_directory, "configured.json"),
            models={
                "error": (
                    HTTPClientErrorEntry,
                    {"request_id": 1, "method": "GET", "url": "/"},
                ),
            },
        )

        async with logger.context(name="configured") as ctx:
            await ctx.log_prepared("boom", name="error")

        assert "configured" in logger
        logger.remove("configured")
        assert "configured" not in logger

        logs = read_logs(os.path.join(temp_log_directory, "configured.json"))
        assert logs[0]["entry"]["message"] == "boom"
        assert logs[0]["entry"]["level"] == "ERROR"

    @pytest.mark.asyncio
    async def test_std_stream_output(self, capsys, sample_entry: Entry):
        LoggingConfig().update(log_output="stdout")

        try:
            stream = Logger().get_stream(name="stdout_stream", template="{level} - {message}")
            await stream.log(sample_entry)
            await stream.close()

        finally:
            LoggingConfig().update(log_output="stderr")

        assert capsys.readouterr().out == "INFO - Test log message\n"

    def test_schedule_without_loop_writes_synchronously(self, capsys, sample_entry: Entry):
        stream = LoggerStream(name="sync_stream", template="{level} - {message}")

        stream.schedule(sample_entry)

        assert capsys.readouterr().err == "INFO - Test log message\n"


class TestLoggingConfig:
    def test_disable_and_enable(self):
        config = LoggingConfig()

        config.disable("toggled")
        assert config.enabled("toggled", LogLevel.FATAL) is False

        config.enable("toggled")
        assert config.enabled("toggled", LogLevel.FATAL) is True

    def test_level_ordering(self):
        config = LoggingConfig()
        config.update(log_level="warn")

        assert config.enabled("ordered", LogLevel.INFO) is False
        assert config.enabled("ordered", LogLevel.WARN) is True
        assert config.level == LogLevel.WARN

    def test_unknown_level_is_rejected(self):
        with pytest.raises(ValueError):
            LogLevel.to_level("verbose")
