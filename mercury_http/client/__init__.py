from .connection_state import (
    ConnectionState as ConnectionState,
    ShutdownReason as ShutdownReason,
)
from .dispatch import (
    LoopDispatcher as LoopDispatcher,
    SessionDispatcher as SessionDispatcher,
)
from .errors import (
    ConnectError as ConnectError,
    ErrorKind as ErrorKind,
    HandshakeError as HandshakeError,
    HTTPClientError as HTTPClientError,
    InvalidMessageError as InvalidMessageError,
    InvalidURLError as InvalidURLError,
    NoEventLoopError as NoEventLoopError,
    ProtocolError as ProtocolError,
    ReadError as ReadError,
    RequestAbortedError as RequestAbortedError,
    RequestTimeoutError as RequestTimeoutError,
    ResolutionError as ResolutionError,
    ResponseSizeError as ResponseSizeError,
    UnsupportedSchemeError as UnsupportedSchemeError,
    WriteError as WriteError,
)
from .http_connection import HTTPConnection as HTTPConnection
from .mercury_sync_http_client import MercurySyncHTTPClient as MercurySyncHTTPClient
from .models import (
    URL as URL,
    Endpoint as Endpoint,
    EndpointCursor as EndpointCursor,
    HTTPMessage as HTTPMessage,
    HTTPMethod as HTTPMethod,
    HTTPResponse as HTTPResponse,
)
from .resolver import Resolver as Resolver
from .ssl_context import create_client_ssl_context as create_client_ssl_context
from .transports import (
    SSLTransport as SSLTransport,
    TCPTransport as TCPTransport,
    Transport as Transport,
)
