from __future__ import annotations

import asyncio
import re
import ssl
import time
import uuid
from typing import (
    Any,
    Awaitable,
    Callable,
    List,
    TypeVar,
)

from mercury_http.logging import Logger, LoggerStream
from mercury_http.logging.http_client_models import (
    HTTPClientDebug,
    HTTPClientErrorEntry,
    HTTPClientInfo,
    HTTPClientTrace,
)

from .connection_state import ConnectionState, ShutdownReason
from .dispatch import SessionDispatcher
from .errors import (
    ConnectError,
    HandshakeError,
    HTTPClientError,
    InvalidMessageError,
    NoEventLoopError,
    ProtocolError,
    ReadError,
    RequestAbortedError,
    RequestTimeoutError,
    ResolutionError,
    ResponseSizeError,
    WriteError,
)
from .models import (
    EndpointCursor,
    HTTPMessage,
    HTTPMethod,
    HTTPResponse,
)
from .resolver import Resolver
from .transports import Transport

T = TypeVar("T")

CompletionCallback = Callable[[HTTPClientError | None, HTTPResponse], Any]

NEW_LINE = "\r\n"
STATUS_LINE_DELIMITER = b"\r\n"
HEADERS_DELIMITER = b"\r\n\r\n"

status_line_pattern = re.compile(rb"^(HTTP/\S*)[ \t]+(\d+)(?:[ \t]+(.*))?$")
line_pattern = re.compile(r"\r?\n")

# Peer-side closes that end a body read the same way EOF does.
GRACEFUL_CLOSE_ERRORS = (
    asyncio.IncompleteReadError,
    ConnectionResetError,
    BrokenPipeError,
    ssl.SSLZeroReturnError,
    ssl.SSLEOFError,
)


class HTTPConnection:
    """
    Drives one HTTP/1.0 request over one transport:

    resolve -> connect (next endpoint on failure) -> handshake -> write
    -> status line -> headers -> body until EOF -> complete

    Every step runs under a watchdog that is armed before the step starts
    and cancelled as soon as it finishes. When the watchdog fires it shuts
    the transport down and cancels the step, and the step's failure is what
    ends the request. Completion callbacks run exactly once.
    """

    def __init__(
        self,
        transport: Transport,
        resolver: Resolver,
        logger: Logger | None = None,
        timeout: int | float = 10,
        max_response_size: int = 65536,
        dispatcher: SessionDispatcher | None = None,
        session_id: str | None = None,
    ) -> None:
        if logger is None:
            logger = Logger()

        self.request_id = uuid.uuid4().int >> 64
        self.state = ConnectionState.IDLE
        self.transport = transport
        self.resolver = resolver
        self.timeout = timeout
        self.max_response_size = max_response_size

        self.method: HTTPMethod | None = None
        self.host: str | None = None
        self.port: int | None = None
        self.path: str | None = None
        self.endpoints: EndpointCursor | None = None

        self.response = HTTPResponse()
        self.response_size = 0
        self.error: HTTPClientError | None = None

        self._dispatcher = dispatcher
        self._session_id = session_id
        self._logger = logger
        self._logger_name = f"http_connection_{self.request_id}"
        self._log: LoggerStream | None = None

        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Future | None = None
        self._step: asyncio.Future | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._shutdown_reason = ShutdownReason.NONE
        self._completed = False
        self._done: List[CompletionCallback] = []
        self._request: bytes = b""

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def shutdown_reason(self) -> ShutdownReason:
        return self._shutdown_reason

    def on_done(self, callback: CompletionCallback):
        self._done.append(callback)

    @staticmethod
    def encode_request(
        method: HTTPMethod,
        host: str,
        path: str,
        message: HTTPMessage,
    ) -> bytes:
        header_items = f"{method.value} {path} HTTP/1.0{NEW_LINE}Host: {host}{NEW_LINE}"

        for name, value in message.headers:
            header_items += f"{name}: {value}{NEW_LINE}"

        if method.has_body and not message.has_header("Content-Length"):
            header_items += f"Content-Length: {len(message.body)}{NEW_LINE}"

        header_items += f"Connection: close{NEW_LINE}{NEW_LINE}"

        try:
            encoded = header_items.encode("latin-1")

        except UnicodeEncodeError as err:
            raise InvalidMessageError(
                f"Request line and headers must be latin-1 encodable - {err}"
            ) from err

        if method.has_body:
            encoded += message.body

        return encoded

    def start(
        self,
        method: HTTPMethod | str,
        host: str,
        port: int,
        path: str,
        message: HTTPMessage | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> asyncio.Future:
        if self.state != ConnectionState.IDLE or self._task is not None:
            raise RuntimeError("An HTTPConnection can only be started once.")

        if message is None:
            message = HTTPMessage()

        self.method = HTTPMethod(method)
        self.host = host
        self.port = port
        self.path = path
        self._request = self.encode_request(
            self.method,
            host,
            path,
            message,
        )

        default_config = {
            "request_id": self.request_id,
            "method": self.method.value,
            "url": f"{host}:{port}{path}",
        }

        self._logger.configure(
            name=self._logger_name,
            models={
                "trace": (HTTPClientTrace, default_config),
                "debug": (HTTPClientDebug, default_config),
                "info": (HTTPClientInfo, default_config),
                "error": (HTTPClientErrorEntry, default_config),
            },
        )

        try:
            running_loop = asyncio.get_running_loop()

        except RuntimeError:
            running_loop = None

        self._loop = loop or running_loop

        if self._loop is None:
            raise NoEventLoopError("No event loop is available to run the request.")

        if self._loop is running_loop:
            self._task = self._loop.create_task(self.run())

        else:
            self._task = asyncio.run_coroutine_threadsafe(self.run(), self._loop)

        return self._task

    def stop(
        self,
        reason: ShutdownReason = ShutdownReason.ABORTED,
    ):
        if self._completed:
            return

        if self._shutdown_reason == ShutdownReason.NONE:
            self._shutdown_reason = reason

        self.transport.shutdown_and_close()

        if self._step and not self._step.done():
            self._step.cancel()

    async def run(self):
        try:
            async with self._logger.context(name=self._logger_name) as ctx:
                self._log = ctx

                try:
                    await self._execute()

                except HTTPClientError as err:
                    self.error = err

                    await ctx.log_prepared(
                        message=f"Request {self.method.value} {self.host}:{self.port}{self.path} failed in state {self.state.value} - {err}",
                        name="error",
                    )

                except asyncio.CancelledError:
                    self.error = RequestAbortedError("Request task was cancelled.")
                    self._complete()
                    raise

                else:
                    await ctx.log_prepared(
                        message=f"Request {self.method.value} {self.host}:{self.port}{self.path} completed with status {self.response.status}",
                        name="info",
                    )

                self._complete()

        finally:
            self._logger.remove(self._logger_name)

    async def _execute(self):
        self.response.timings["request_start"] = time.monotonic()

        await self._enter(ConnectionState.RESOLVING)
        self.response.timings["resolve_start"] = time.monotonic()

        step = await self._await_step(
            self.resolver.resolve(self.host, self.port)
        )
        endpoints = self._result(
            step,
            ResolutionError,
            f"Could not resolve host {self.host}",
        )

        self.response.timings["resolve_end"] = time.monotonic()

        if not endpoints:
            raise ResolutionError(f"Could not resolve host {self.host}")

        self.endpoints = EndpointCursor(endpoints)
        self.response.timings["connect_start"] = time.monotonic()

        await self._connect()

        self.response.timings["connect_end"] = time.monotonic()

        await self._enter(ConnectionState.HANDSHAKING)
        self.response.timings["handshake_start"] = time.monotonic()

        step = await self._await_step(self.transport.handshake())
        self._result(
            step,
            HandshakeError,
            f"Handshake with {self.host} failed",
        )

        self.response.timings["handshake_end"] = time.monotonic()

        await self._enter(ConnectionState.WRITING_REQUEST)
        self.response.timings["write_start"] = time.monotonic()

        step = await self._await_step(self.transport.write_all(self._request))
        self._result(
            step,
            WriteError,
            "Writing request failed",
        )

        self.response.timings["write_end"] = time.monotonic()

        await self._enter(ConnectionState.READING_STATUS_LINE)
        self.response.timings["read_start"] = time.monotonic()

        await self._read_until(
            STATUS_LINE_DELIMITER,
            "Reading status line failed",
        )
        await self._parse_status_line(
            self.transport.take_before(STATUS_LINE_DELIMITER)
        )

        await self._enter(ConnectionState.READING_HEADERS)

        # The status line's CRLF is still buffered, so a response without
        # headers shows up as the delimiter at offset zero.
        await self._read_until(
            HEADERS_DELIMITER,
            "Reading headers failed",
        )
        self._parse_headers(
            self.transport.take_until(HEADERS_DELIMITER)
        )

        if self.transport.buffered > 0:
            self.response.add_body(self.transport.take_buffered())

        await self._enter(ConnectionState.READING_BODY)
        await self._read_body()

        self.response.timings["read_end"] = time.monotonic()

    async def _connect(self):
        while True:
            endpoint = self.endpoints.current

            await self._enter(
                ConnectionState.CONNECTING,
                detail=f"to {endpoint}",
            )

            step = await self._await_step(self.transport.connect(endpoint))

            connect_error = step.exception()
            if connect_error is None:
                return

            if self.endpoints.remaining == 0:
                raise ConnectError(
                    f"Could not connect to {self.host}:{self.port} after {self.endpoints.attempted} attempt(s) - {connect_error}"
                ) from connect_error

            await self._log.log_prepared(
                message=f"Connection to {endpoint} failed - {connect_error}, {self.endpoints.remaining} endpoint(s) left",
                name="debug",
            )

            self.transport.close()
            self.endpoints.advance()

    async def _read_until(
        self,
        delimiter: bytes,
        message: str,
    ):
        max_bytes: int | None = None
        if self.max_response_size:
            max_bytes = self.max_response_size - self.response_size

        step = await self._await_step(
            self.transport.read_until(
                delimiter,
                max_bytes=max_bytes,
            )
        )

        if isinstance(step.exception(), ResponseSizeError):
            raise ResponseSizeError(
                f"Response exceeded maximum size of {self.max_response_size} bytes"
            ) from step.exception()

        received: int = self._result(
            step,
            ReadError,
            message,
        )

        self._add_response_size(received)

    async def _read_body(self):
        while True:
            step = await self._await_step(self.transport.read_some())

            read_error = step.exception()

            if read_error is None:
                received: int = step.result()
                if received == 0:
                    return

                self._add_response_size(received)
                self.response.add_body(self.transport.take_buffered())

            elif isinstance(read_error, GRACEFUL_CLOSE_ERRORS):
                return

            else:
                raise ReadError(f"Reading body failed - {read_error}") from read_error

    async def _parse_status_line(self, status_line: bytes):
        match = status_line_pattern.match(status_line)

        if match is None:
            raise ProtocolError(
                f"Malformed status line: {status_line[:128]!r}"
            )

        version, status, status_message = match.groups()

        self.response.version = version.decode("latin-1")
        self.response.status = int(status)
        self.response.status_message = (status_message or b"").decode("latin-1").strip()

        await self._log.log_prepared(
            message=f"{self.response.status} {self.response.status_message}",
            name="debug",
        )

    def _parse_headers(self, header_block: bytes):
        for line in line_pattern.split(header_block.decode("latin-1")):
            name, colon, value = line.partition(":")

            if colon:
                self.response.add_header(
                    name.strip(),
                    value.strip(),
                )

    def _add_response_size(self, size: int):
        self.response_size += size

        if self.max_response_size and self.response_size > self.max_response_size:
            raise ResponseSizeError(
                f"Response exceeded maximum size of {self.max_response_size} bytes"
            )

    async def _enter(
        self,
        state: ConnectionState,
        detail: str | None = None,
    ):
        self.state = state

        message = f"Request {self.request_id} entering {state.value}"
        if detail:
            message = f"{message} {detail}"

        await self._log.log_prepared(
            message=message,
            name="trace",
        )

    async def _await_step(
        self,
        awaitable: Awaitable[T],
    ) -> asyncio.Future:
        """
        Run one transport operation under the watchdog and return the
        finished future. The watchdog is cancelled before the caller looks
        at the outcome.
        """
        if self._shutdown_reason != ShutdownReason.NONE:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()

            raise self._shutdown_error()

        step = asyncio.ensure_future(awaitable)
        self._step = step
        self._start_timer()

        try:
            await asyncio.wait((step,))

        finally:
            self._cancel_timer()
            self._step = None

            if not step.done():
                step.cancel()

        if self._shutdown_reason != ShutdownReason.NONE:
            if not step.cancelled():
                # Retrieve the exception so the loop does not report it.
                step.exception()

            raise self._shutdown_error()

        if step.cancelled():
            raise RequestAbortedError("Request step was cancelled.")

        return step

    def _result(
        self,
        step: asyncio.Future,
        error_type: type[HTTPClientError],
        message: str,
    ):
        error = step.exception()

        if isinstance(error, HTTPClientError):
            raise error

        elif error is not None:
            raise error_type(f"{message} - {error}") from error

        return step.result()

    def _shutdown_error(self) -> HTTPClientError:
        if self._shutdown_reason == ShutdownReason.TIMEOUT:
            return RequestTimeoutError(
                f"Request timed out after {self.timeout}s in state {self.state.value}"
            )

        return RequestAbortedError(
            f"Request was aborted in state {self.state.value}"
        )

    def _start_timer(self):
        self._cancel_timer()

        if self.timeout and self.timeout > 0:
            self._timer = asyncio.get_running_loop().call_later(
                self.timeout,
                self._on_timeout,
            )

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timeout(self):
        self._timer = None

        if self._completed is False:
            self.stop(ShutdownReason.TIMEOUT)

    def _complete(self):
        if self._completed:
            return

        self._completed = True
        self._cancel_timer()

        self.state = ConnectionState.COMPLETED
        self.transport.shutdown_and_close()
        self.response.timings["request_end"] = time.monotonic()

        if self._dispatcher:
            self._dispatcher.post(self._session_id, self._emit_done)

        else:
            self._emit_done()

    def _emit_done(self):
        for callback in list(self._done):
            callback(self.error, self.response)
