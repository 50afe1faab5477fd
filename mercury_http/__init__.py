from .client import (
    HTTPMessage as HTTPMessage,
    HTTPMethod as HTTPMethod,
    HTTPResponse as HTTPResponse,
    MercurySyncHTTPClient as MercurySyncHTTPClient,
)
from .env import Env as Env
