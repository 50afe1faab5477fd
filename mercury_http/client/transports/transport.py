import asyncio
import socket
from abc import ABC, abstractmethod

from mercury_http.client.errors import ResponseSizeError
from mercury_http.client.models import Endpoint


class Transport(ABC):
    """
    Base byte stream used by an HTTPConnection. Subclasses decide what
    happens between a successful connect and the first write (nothing for
    plain TCP, a TLS handshake for SSL).

    Only one operation is ever outstanding on a transport. Reads land in
    an internal buffer so that bytes received past a delimiter are kept
    for the next read rather than dropped.
    """

    def __init__(
        self,
        read_chunk_size: int = 4096,
    ) -> None:
        self.read_chunk_size = read_chunk_size
        self.endpoint: Endpoint | None = None

        self._socket: socket.socket | None = None
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._buffer = bytearray()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    async def connect(self, endpoint: Endpoint) -> None:
        if self._closed:
            raise ConnectionAbortedError("Transport was shut down.")

        loop = asyncio.get_running_loop()

        self.endpoint = endpoint
        self._socket = socket.socket(
            family=endpoint.family,
            type=socket.SOCK_STREAM,
        )
        self._socket.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        self._socket.setblocking(False)

        try:
            await loop.sock_connect(self._socket, endpoint.socket_address)

            reader = asyncio.StreamReader(
                limit=max(self.read_chunk_size, 2 ** 16),
                loop=loop,
            )
            reader_protocol = asyncio.StreamReaderProtocol(reader, loop=loop)

            transport, _ = await loop.create_connection(
                lambda: reader_protocol,
                sock=self._socket,
            )

        except BaseException:
            self.close()
            raise

        self._reader = reader
        self._writer = asyncio.StreamWriter(
            transport,
            reader_protocol,
            reader,
            loop,
        )

    @abstractmethod
    async def handshake(self) -> None:
        ...

    async def write_all(self, data: bytes) -> int:
        self._check_open()

        self._writer.write(data)
        await self._writer.drain()

        return len(data)

    async def read_until(
        self,
        delimiter: bytes,
        max_bytes: int | None = None,
    ) -> int:
        """
        Read until the delimiter is buffered and return the bytes received.
        Raises ResponseSizeError as soon as more than max_bytes arrive.
        """
        received = 0
        search_start = 0

        while self._buffer.find(delimiter, search_start) < 0:
            search_start = max(len(self._buffer) - len(delimiter) + 1, 0)

            chunk = await self._read_chunk()
            if not chunk:
                raise asyncio.IncompleteReadError(bytes(self._buffer), None)

            self._buffer.extend(chunk)
            received += len(chunk)

            if max_bytes is not None and received > max_bytes:
                raise ResponseSizeError(
                    f"Read {received} bytes, over the {max_bytes} byte limit"
                )

        return received

    async def read_some(self) -> int:
        chunk = await self._read_chunk()
        self._buffer.extend(chunk)

        return len(chunk)

    def take_until(self, delimiter: bytes) -> bytes:
        index = self._buffer.find(delimiter)
        if index < 0:
            return b""

        end = index + len(delimiter)
        data = bytes(self._buffer[:end])
        del self._buffer[:end]

        return data

    def take_before(self, delimiter: bytes) -> bytes:
        """Remove and return the bytes ahead of the delimiter, leaving it buffered."""
        index = self._buffer.find(delimiter)
        if index < 0:
            return b""

        data = bytes(self._buffer[:index])
        del self._buffer[:index]

        return data

    def take_buffered(self) -> bytes:
        data = bytes(self._buffer)
        self._buffer.clear()

        return data

    async def _read_chunk(self) -> bytes:
        self._check_open()
        return await self._reader.read(self.read_chunk_size)

    def _check_open(self):
        if self._closed:
            raise ConnectionAbortedError("Transport was shut down.")

        if self._writer is None or self._reader is None:
            raise ConnectionError("Transport is not connected.")

    def close(self) -> None:
        """Drop the current connection but leave the transport reusable."""
        writer = self._writer
        tcp_socket = self._socket

        self._writer = None
        self._reader = None
        self._socket = None
        self._buffer.clear()

        if writer is not None:
            writer.transport.abort()

        elif tcp_socket is not None:
            tcp_socket.close()

    def shutdown_and_close(self) -> None:
        if self._closed:
            return

        self._closed = True

        if self._writer is not None and self._writer.transport.is_closing() is False:
            try:
                if self._writer.can_write_eof():
                    self._writer.write_eof()

            except (OSError, RuntimeError):
                # Half-close is best effort, the abort below always runs.
                pass

        self.close()
