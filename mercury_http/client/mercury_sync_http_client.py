from __future__ import annotations

import asyncio
import inspect
from concurrent.futures import Future as ConcurrentFuture
from typing import (
    Callable,
    Dict,
    List,
    Set,
    Tuple,
)

from mercury_http.env import Env, TimeParser, load_env
from mercury_http.logging import Logger, LoggingConfig
from mercury_http.logging.http_client_models import ClientConfigError

from .connection_state import ShutdownReason
from .dispatch import SessionDispatcher
from .errors import (
    HTTPClientError,
    InvalidURLError,
    NoEventLoopError,
    RequestAbortedError,
    UnsupportedSchemeError,
)
from .http_connection import CompletionCallback, HTTPConnection
from .models import (
    URL,
    HTTPMessage,
    HTTPMethod,
    HTTPResponse,
)
from .resolver import Resolver
from .ssl_context import VerifyMode, create_client_ssl_context
from .transports import SSLTransport, TCPTransport, Transport


TransportFactory = Callable[[URL], Transport]

SUPPORTED_SCHEMES = ("http", "https")


class MercurySyncHTTPClient:
    """
    Issues one HTTP or HTTPS request at a time. Starting a new request aborts
    the one in flight, and only the current request's completion reaches
    the subscribers registered with on_done().
    """

    def __init__(
        self,
        env: Env | None = None,
        dispatcher: SessionDispatcher | None = None,
        session_id: str | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        resolver: Resolver | None = None,
        transports: Dict[str, TransportFactory] | None = None,
    ) -> None:
        if env is None:
            env = load_env(Env)

        if resolver is None:
            resolver = Resolver(family=env.MERCURY_HTTP_ADDRESS_FAMILY)

        if transports is None:
            transports = {}

        self.env = env
        self.dispatcher = dispatcher
        self.session_id = session_id
        self.resolver = resolver

        self._loop = loop
        self._transports = transports
        self._time_parser = TimeParser()

        self._timeout = self._time_parser.parse(env.MERCURY_HTTP_TIMEOUT)
        self._max_response_size = env.MERCURY_HTTP_MAX_RESPONSE_SIZE
        self._ssl_verify_file = env.MERCURY_HTTP_SSL_VERIFY_FILE
        self._ssl_verify_path = env.MERCURY_HTTP_SSL_VERIFY_PATH
        self._verify_mode: VerifyMode = env.MERCURY_HTTP_VERIFY_SSL_CERT
        self._read_chunk_size = env.MERCURY_HTTP_READ_CHUNK_SIZE

        self._connection: HTTPConnection | None = None
        self._subscribers: List[CompletionCallback] = []
        self._waiters: Dict[HTTPConnection, asyncio.Future] = {}
        self._tasks: Set[asyncio.Future | ConcurrentFuture] = set()

        logging_config = LoggingConfig()
        logging_config.update(
            log_level=env.MERCURY_HTTP_LOG_LEVEL,
            log_output=env.MERCURY_HTTP_LOG_OUTPUT,
        )

        self._logger = Logger()
        self._log = self._logger.get_stream(name="mercury_http_client")

    @property
    def timeout(self) -> float:
        return self._timeout

    @timeout.setter
    def timeout(self, value: str | int | float):
        self._timeout = self._time_parser.parse(value)

    @property
    def max_response_size(self) -> int:
        return self._max_response_size

    @max_response_size.setter
    def max_response_size(self, value: int):
        if value < 0:
            raise ValueError("max_response_size must be zero (unlimited) or positive.")

        self._max_response_size = value

    @property
    def ssl_verify_file(self) -> str | None:
        return self._ssl_verify_file

    @ssl_verify_file.setter
    def ssl_verify_file(self, value: str | None):
        self._ssl_verify_file = value

    @property
    def ssl_verify_path(self) -> str | None:
        return self._ssl_verify_path

    @ssl_verify_path.setter
    def ssl_verify_path(self, value: str | None):
        self._ssl_verify_path = value

    @property
    def verify_mode(self) -> VerifyMode:
        return self._verify_mode

    @verify_mode.setter
    def verify_mode(self, value: VerifyMode):
        if value not in ("REQUIRED", "OPTIONAL", "NONE"):
            raise ValueError(f"Unknown verify mode: {value}")

        self._verify_mode = value

    @property
    def active(self) -> bool:
        return self._connection is not None

    def on_done(self, callback: CompletionCallback):
        self._subscribers.append(callback)

    def remove_done(self, callback: CompletionCallback):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def get(
        self,
        url: str,
        headers: Dict[str, str] | List[Tuple[str, str]] | None = None,
    ) -> bool:
        return self.request(
            HTTPMethod.GET,
            url,
            message=HTTPMessage.create(headers=headers),
        )

    def post(self, url: str, message: HTTPMessage | None = None) -> bool:
        return self.request(HTTPMethod.POST, url, message=message)

    def put(self, url: str, message: HTTPMessage | None = None) -> bool:
        return self.request(HTTPMethod.PUT, url, message=message)

    def delete(self, url: str, message: HTTPMessage | None = None) -> bool:
        return self.request(HTTPMethod.DELETE, url, message=message)

    def request(
        self,
        method: HTTPMethod | str,
        url: str,
        message: HTTPMessage | None = None,
    ) -> bool:
        try:
            self._start(method, url, message)

        except HTTPClientError as err:
            self._log.schedule(
                ClientConfigError(
                    message=f"Request {method} {url} rejected - {err}",
                    url=url,
                )
            )

            return False

        return True

    async def fetch(
        self,
        method: HTTPMethod | str,
        url: str,
        message: HTTPMessage | None = None,
    ) -> Tuple[HTTPClientError | None, HTTPResponse]:
        waiter = asyncio.get_running_loop().create_future()

        connection = self._start(method, url, message)
        self._waiters[connection] = waiter

        try:
            return await waiter

        finally:
            self._waiters.pop(connection, None)

    def abort(self):
        connection = self._connection
        if connection is None:
            return

        self._connection = None

        connection_loop = self._get_loop()
        if connection_loop is None or connection_loop is self._running_loop():
            connection.stop(ShutdownReason.ABORTED)

        else:
            connection_loop.call_soon_threadsafe(
                connection.stop,
                ShutdownReason.ABORTED,
            )

        waiter = self._waiters.pop(connection, None)
        if waiter is not None:
            self._resolve_waiter(
                waiter,
                RequestAbortedError("Request was aborted."),
                HTTPResponse(),
            )

    async def close(self):
        self.abort()

        pending = [
            asyncio.wrap_future(task) for task in list(self._tasks)
        ]

        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        await self._logger.close()

    def _start(
        self,
        method: HTTPMethod | str,
        url: str,
        message: HTTPMessage | None,
    ) -> HTTPConnection:
        parsed = URL.parse(url)

        if parsed.scheme not in SUPPORTED_SCHEMES and parsed.scheme not in self._transports:
            raise UnsupportedSchemeError(f"unsupported scheme: {parsed.scheme}")

        try:
            method = HTTPMethod(method.upper() if isinstance(method, str) else method)

        except ValueError:
            raise InvalidURLError(f"unsupported method: {method}")

        # Encoding failures are rejected before the request in flight is aborted.
        HTTPConnection.encode_request(
            method,
            parsed.host,
            parsed.path,
            message or HTTPMessage(),
        )

        loop = self._get_loop()
        if loop is None:
            raise NoEventLoopError("No event loop is running or configured.")

        self.abort()

        connection = HTTPConnection(
            self._create_transport(parsed),
            self.resolver,
            logger=self._logger,
            timeout=self._timeout,
            max_response_size=self._max_response_size,
            dispatcher=self.dispatcher,
            session_id=self.session_id,
        )
        connection.on_done(self._relay(connection))

        self._connection = connection

        task = connection.start(
            method,
            parsed.host,
            parsed.port,
            parsed.path,
            message=message,
            loop=loop,
        )

        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        return connection

    def _create_transport(self, url: URL) -> Transport:
        factory = self._transports.get(url.scheme)
        if factory:
            return factory(url)

        if url.is_ssl:
            return SSLTransport(
                url.host,
                create_client_ssl_context(
                    verify_file=self._ssl_verify_file,
                    verify_path=self._ssl_verify_path,
                    verify_mode=self._verify_mode,
                ),
                read_chunk_size=self._read_chunk_size,
            )

        return TCPTransport(read_chunk_size=self._read_chunk_size)

    def _relay(self, connection: HTTPConnection) -> CompletionCallback:
        def relay(error: HTTPClientError | None, response: HTTPResponse):
            # Completions from a superseded or aborted connection are dropped.
            if connection is not self._connection:
                return

            self._connection = None

            waiter = self._waiters.pop(connection, None)
            if waiter is not None:
                self._resolve_waiter(waiter, error, response)

            self._deliver(error, response)

        return relay

    def _deliver(
        self,
        error: HTTPClientError | None,
        response: HTTPResponse,
    ):
        for subscriber in list(self._subscribers):
            try:
                result = subscriber(error, response)

                if inspect.isawaitable(result):
                    task = asyncio.ensure_future(result)
                    self._tasks.add(task)
                    task.add_done_callback(self._on_subscriber_done)

            except Exception as err:
                self._log_subscriber_error(err)

    def _on_subscriber_done(self, task: asyncio.Future):
        self._tasks.discard(task)

        if task.cancelled() is False and (err := task.exception()):
            self._log_subscriber_error(err)

    def _log_subscriber_error(self, err: Exception):
        self._log.schedule(
            ClientConfigError(
                message=f"Completion subscriber failed - {err}",
                url="",
            )
        )

    def _resolve_waiter(
        self,
        waiter: asyncio.Future,
        error: HTTPClientError | None,
        response: HTTPResponse,
    ):
        waiter_loop = waiter.get_loop()

        if waiter_loop is self._running_loop():
            self._set_waiter(waiter, error, response)

        else:
            waiter_loop.call_soon_threadsafe(
                self._set_waiter,
                waiter,
                error,
                response,
            )

    def _set_waiter(
        self,
        waiter: asyncio.Future,
        error: HTTPClientError | None,
        response: HTTPResponse,
    ):
        if waiter.done() is False:
            waiter.set_result((error, response))

    def _get_loop(self) -> asyncio.AbstractEventLoop | None:
        if self._loop is not None:
            return self._loop

        return self._running_loop()

    def _running_loop(self) -> asyncio.AbstractEventLoop | None:
        try:
            return asyncio.get_running_loop()

        except RuntimeError:
            return None
