import asyncio
import datetime
import io
import os
import pathlib
import sys
import threading
from collections import defaultdict
from typing import (
    Any,
    Callable,
    Dict,
    Tuple,
    TypeVar,
)

import msgspec

from mercury_http.logging.config import LoggingConfig, StreamType
from mercury_http.logging.models import Entry, Log, LogLevel

T = TypeVar('T', bound=Entry)


DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"
ERROR_TEMPLATE = "{timestamp} - {level} - {thread_id}.{filename}:{function_name}.{line_number} - {error}"


def split_logfile_path(path: str | None) -> Tuple[str | None, str | None]:
    """Split a path into (filename, directory). Paths without a suffix are directories."""
    if not path:
        return None, None

    logfile_path = pathlib.Path(path)

    if logfile_path.suffix:
        return logfile_path.name, str(logfile_path.parent.absolute())

    return None, str(logfile_path.absolute())


class LoggerStream:
    """
    Writes entries either as formatted lines to stdout/stderr or as JSON lines
    to a logfile. Entries below the configured level, or from a disabled
    logger, are dropped before any I/O.
    """

    def __init__(
        self,
        name: str | None = None,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
        models: Dict[str, Tuple[type[T], Dict[str, Any]]] | None = None,
    ) -> None:
        self._name = name or "default"
        self._default_template = template
        self._default_logfile = filename
        self._default_log_directory = directory

        self._init_lock = asyncio.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._cwd: str | None = None
        self._initialized = False

        self._files: Dict[str, io.BufferedRandom] = {}
        self._file_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

        self._config = LoggingConfig()
        self._pending: set[asyncio.Future] = set()

        self._models: Dict[str, Tuple[type[Entry], Dict[str, Any]]] = dict(models or {})
        self._models['default'] = (
            Entry,
            {'level': LogLevel.INFO},
        )

    @property
    def name(self):
        return self._name

    @property
    def pending(self):
        return len(self._pending)

    def set_defaults(
        self,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
    ):
        self._default_template = template
        self._default_logfile = filename
        self._default_log_directory = directory

    async def initialize(self):
        async with self._init_lock:
            if self._initialized:
                return

            self._loop = asyncio.get_running_loop()

            if self._cwd is None:
                self._cwd = await self._loop.run_in_executor(None, os.getcwd)

            self._initialized = True

    async def open_file(
        self,
        filename: str,
        directory: str | None = None,
    ):
        if self._initialized is False:
            await self.initialize()

        logfile_path = self._to_logfile_path(filename, directory=directory)

        async with self._file_locks[logfile_path]:
            if self._files.get(logfile_path) is None:
                self._files[logfile_path] = await self._loop.run_in_executor(
                    None,
                    self._open_file,
                    logfile_path,
                )

    def _open_file(self, logfile_path: str) -> io.BufferedRandom:
        resolved_path = pathlib.Path(logfile_path).absolute().resolve()
        resolved_path.parent.mkdir(parents=True, exist_ok=True)

        return open(resolved_path, "ab+")

    def _to_logfile_path(
        self,
        filename: str,
        directory: str | None = None,
    ):
        filename_path = pathlib.Path(filename)

        if filename_path.suffix != ".json":
            filename = f"{filename_path.stem}.json"

        if directory is None:
            directory = os.path.join(self._cwd, "logs")

        return os.path.join(directory, filename)

    def schedule(
        self,
        entry: T,
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        """Log without awaiting. Outside a running loop the entry is written to the std stream at once."""
        log = self._to_log(entry, sys._getframe(1))

        try:
            loop = asyncio.get_running_loop()

        except RuntimeError:
            if self._config.enabled(self._name, entry.level):
                self._write_to_stream(
                    self._format(log, template or self._default_template or DEFAULT_TEMPLATE),
                    self._config.output,
                )

            return

        task = loop.create_task(
            self._dispatch(
                log,
                template=template,
                path=path,
                filter=filter,
            )
        )

        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def log_prepared(
        self,
        message: str,
        name: str = 'default',
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        model, defaults = self._models.get(name, self._models['default'])

        await self._dispatch(
            self._to_log(
                model(message=message, **defaults),
                sys._getframe(1),
            ),
            template=template,
            path=path,
            filter=filter,
        )

    async def log(
        self,
        entry: T,
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        await self._dispatch(
            self._to_log(entry, sys._getframe(1)),
            template=template,
            path=path,
            filter=filter,
        )

    async def _dispatch(
        self,
        log: Log[T],
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        entry = log.entry

        if self._config.enabled(self._name, entry.level) is False:
            return

        if filter and filter(entry) is False:
            return

        if self._initialized is False:
            await self.initialize()

        filename, directory = split_logfile_path(path)

        filename = filename or self._default_logfile
        directory = directory or self._default_log_directory

        if filename or directory:
            await self._log_to_file(
                log,
                filename=filename,
                directory=directory,
            )

        else:
            await self._log_to_stream(
                log,
                template=template or self._default_template,
            )

    def _to_log(self, entry: T, frame) -> Log[T]:
        code = frame.f_code

        return Log(
            entry=entry,
            logger=self._name,
            filename=code.co_filename,
            function_name=code.co_name,
            line_number=frame.f_lineno,
            thread_id=threading.get_native_id(),
            timestamp=datetime.datetime.now(datetime.UTC).isoformat(),
        )

    def _format(self, log: Log[T], template: str, **context: Any):
        return log.entry.to_template(
            template,
            context={
                "logger": log.logger,
                "filename": log.filename,
                "function_name": log.function_name,
                "line_number": log.line_number,
                "thread_id": log.thread_id,
                "timestamp": log.timestamp,
                **context,
            },
        )

    async def _log_to_stream(
        self,
        log: Log[T],
        template: str | None = None,
    ):
        try:
            line = self._format(log, template or DEFAULT_TEMPLATE)
            stream_type = self._config.output

        except Exception as err:
            # A template naming a field the entry lacks still gets reported.
            line = self._format(log, ERROR_TEMPLATE, error=str(err))
            stream_type = StreamType.STDERR

        await self._loop.run_in_executor(
            None,
            self._write_to_stream,
            line,
            stream_type,
        )

    def _write_to_stream(
        self,
        line: str,
        stream_type: StreamType,
    ):
        stream = sys.stdout if stream_type == StreamType.STDOUT else sys.stderr
        stream.write(f"{line}\n")
        stream.flush()

    async def _log_to_file(
        self,
        log: Log[T],
        filename: str | None = None,
        directory: str | None = None,
    ):
        filename = filename or "logs.json"
        logfile_path = self._to_logfile_path(filename, directory=directory)

        if self._files.get(logfile_path) is None:
            await self.open_file(
                filename,
                directory=directory,
            )

        async with self._file_locks[logfile_path]:
            await self._loop.run_in_executor(
                None,
                self._write_to_file,
                msgspec.json.encode(log),
                logfile_path,
            )

    def _write_to_file(
        self,
        line: bytes,
        logfile_path: str,
    ):
        logfile = self._files.get(logfile_path)

        if logfile and logfile.closed is False:
            logfile.write(line + b"\n")
            logfile.flush()

    async def close(self):
        if self._pending:
            await asyncio.gather(
                *list(self._pending),
                return_exceptions=True,
            )

        for logfile_path in list(self._files):
            async with self._file_locks[logfile_path]:
                logfile = self._files.pop(logfile_path)

                if logfile.closed is False:
                    await self._loop.run_in_executor(None, logfile.close)

        self._initialized = False

    def abort(self):
        for pending in list(self._pending):
            pending.cancel()

        for logfile in self._files.values():
            if logfile.closed is False:
                logfile.close()

        self._files.clear()
        self._pending.clear()
