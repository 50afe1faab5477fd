from .endpoint import (
    Endpoint as Endpoint,
    EndpointCursor as EndpointCursor,
)
from .http_message import (
    HeaderPair as HeaderPair,
    HTTPMessage as HTTPMessage,
)
from .http_method import HTTPMethod as HTTPMethod
from .http_response import (
    HTTPResponse as HTTPResponse,
    TimingName as TimingName,
)
from .url import URL as URL
