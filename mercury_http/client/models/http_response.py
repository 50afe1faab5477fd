from typing import Dict, List, Literal, Tuple

import msgspec
import orjson


TimingName = Literal[
    "request_start",
    "resolve_start",
    "resolve_end",
    "connect_start",
    "connect_end",
    "handshake_start",
    "handshake_end",
    "write_start",
    "write_end",
    "read_start",
    "read_end",
    "request_end",
]


class HTTPResponse(msgspec.Struct):
    status: int = 0
    status_message: str | None = None
    version: str | None = None
    headers: List[Tuple[str, str]] = msgspec.field(default_factory=list)
    body: bytearray = msgspec.field(default_factory=bytearray)
    timings: Dict[TimingName, float | None] = msgspec.field(default_factory=dict)

    def add_header(self, name: str, value: str):
        self.headers.append((name, value))

    def add_body(self, data: bytes):
        self.body.extend(data)

    def header(self, name: str) -> str | None:
        lowered = name.lower()

        for header_name, value in self.headers:
            if header_name.lower() == lowered:
                return value

        return None

    def get_all(self, name: str) -> List[str]:
        lowered = name.lower()
        return [
            value for header_name, value in self.headers
            if header_name.lower() == lowered
        ]

    @property
    def content(self) -> bytes:
        return bytes(self.body)

    @property
    def content_type(self):
        return self.header("content-type")

    def text(self, encoding: str = "utf-8"):
        return self.body.decode(encoding)

    def json(self):
        if self.body:
            return orjson.loads(self.body)

        return {}

    @property
    def successful(self) -> bool:
        return self.status >= 200 and self.status < 300
