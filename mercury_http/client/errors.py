from enum import Enum


class ErrorKind(Enum):
    INPUT = "INPUT"
    RESOLUTION = "RESOLUTION"
    CONNECTION = "CONNECTION"
    HANDSHAKE = "HANDSHAKE"
    IO = "IO"
    PROTOCOL = "PROTOCOL"
    SIZE_LIMIT = "SIZE_LIMIT"
    TIMEOUT = "TIMEOUT"
    ABORTED = "ABORTED"


class HTTPClientError(Exception):
    """Base exception for the mercury_http client."""
    kind: ErrorKind = ErrorKind.IO


# --- Input Errors ---

class InvalidURLError(HTTPClientError):
    kind = ErrorKind.INPUT

class UnsupportedSchemeError(HTTPClientError):
    kind = ErrorKind.INPUT

class InvalidMessageError(HTTPClientError):
    kind = ErrorKind.INPUT

class NoEventLoopError(HTTPClientError):
    kind = ErrorKind.INPUT


# --- Transport Errors ---

class ResolutionError(HTTPClientError):
    kind = ErrorKind.RESOLUTION

class ConnectError(HTTPClientError):
    kind = ErrorKind.CONNECTION

class HandshakeError(HTTPClientError):
    kind = ErrorKind.HANDSHAKE

class WriteError(HTTPClientError):
    kind = ErrorKind.IO

class ReadError(HTTPClientError):
    kind = ErrorKind.IO


# --- Response Errors ---

class ProtocolError(HTTPClientError):
    kind = ErrorKind.PROTOCOL

class ResponseSizeError(HTTPClientError):
    kind = ErrorKind.SIZE_LIMIT


# --- Cancellation Errors ---

class RequestTimeoutError(HTTPClientError):
    kind = ErrorKind.TIMEOUT

class RequestAbortedError(HTTPClientError):
    kind = ErrorKind.ABORTED
