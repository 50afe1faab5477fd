from __future__ import annotations

from typing import Dict, Iterable, Tuple

import msgspec


HeaderPair = Tuple[str, str]


class HTTPMessage(msgspec.Struct, frozen=True):
    headers: Tuple[HeaderPair, ...] = ()
    body: bytes = b""

    @classmethod
    def create(
        cls,
        headers: Iterable[HeaderPair] | Dict[str, str] | None = None,
        body: str | bytes | bytearray | None = None,
    ) -> HTTPMessage:
        if isinstance(headers, dict):
            headers = headers.items()

        if isinstance(body, str):
            body = body.encode()

        elif isinstance(body, (bytearray, memoryview)):
            body = bytes(body)

        return cls(
            headers=tuple(
                (str(name), str(value)) for name, value in (headers or ())
            ),
            body=body or b"",
        )

    def header(self, name: str) -> str | None:
        lowered = name.lower()

        for header_name, value in self.headers:
            if header_name.lower() == lowered:
                return value

        return None

    def has_header(self, name: str) -> bool:
        return self.header(name) is not None

    def with_header(self, name: str, value: str) -> HTTPMessage:
        return HTTPMessage(
            headers=self.headers + ((name, value),),
            body=self.body,
        )

    def with_body(self, body: str | bytes) -> HTTPMessage:
        if isinstance(body, str):
            body = body.encode()

        return HTTPMessage(
            headers=self.headers,
            body=body,
        )
