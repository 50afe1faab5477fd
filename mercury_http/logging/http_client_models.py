from .models import Entry, LogLevel


class HTTPClientTrace(Entry, kw_only=True):
    request_id: int
    method: str
    url: str
    level: LogLevel = LogLevel.TRACE

class HTTPClientDebug(Entry, kw_only=True):
    request_id: int
    method: str
    url: str
    level: LogLevel = LogLevel.DEBUG

class HTTPClientInfo(Entry, kw_only=True):
    request_id: int
    method: str
    url: str
    level: LogLevel = LogLevel.INFO

class HTTPClientErrorEntry(Entry, kw_only=True):
    request_id: int
    method: str
    url: str
    level: LogLevel = LogLevel.ERROR

class ClientConfigError(Entry, kw_only=True):
    url: str
    level: LogLevel = LogLevel.ERROR
