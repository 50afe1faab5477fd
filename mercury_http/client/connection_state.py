from enum import Enum


class ConnectionState(Enum):
    IDLE = "IDLE"
    RESOLVING = "RESOLVING"
    CONNECTING = "CONNECTING"
    HANDSHAKING = "HANDSHAKING"
    WRITING_REQUEST = "WRITING_REQUEST"
    READING_STATUS_LINE = "READING_STATUS_LINE"
    READING_HEADERS = "READING_HEADERS"
    READING_BODY = "READING_BODY"
    COMPLETED = "COMPLETED"


class ShutdownReason(Enum):
    NONE = "NONE"
    TIMEOUT = "TIMEOUT"
    ABORTED = "ABORTED"
