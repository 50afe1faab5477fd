from __future__ import annotations

import socket
from typing import Sequence, Tuple

import msgspec


class Endpoint(msgspec.Struct, frozen=True):
    address: str
    port: int
    family: int = socket.AF_INET

    @property
    def socket_address(self) -> Tuple[str, int] | Tuple[str, int, int, int]:
        if self.family == socket.AF_INET6:
            return (self.address, self.port, 0, 0)

        return (self.address, self.port)

    def __str__(self) -> str:
        if self.family == socket.AF_INET6:
            return f"[{self.address}]:{self.port}"

        return f"{self.address}:{self.port}"


class EndpointCursor:
    __slots__ = (
        "_endpoints",
        "_position",
    )

    def __init__(self, endpoints: Sequence[Endpoint]) -> None:
        self._endpoints: Tuple[Endpoint, ...] = tuple(endpoints)
        self._position = 0

    def __len__(self):
        return len(self._endpoints)

    def __iter__(self):
        for endpoint in self._endpoints:
            yield endpoint

    @property
    def current(self) -> Endpoint | None:
        if self.exhausted:
            return None

        return self._endpoints[self._position]

    @property
    def exhausted(self) -> bool:
        return self._position >= len(self._endpoints)

    @property
    def remaining(self) -> int:
        return max(len(self._endpoints) - self._position - 1, 0)

    @property
    def attempted(self) -> int:
        return min(self._position + 1, len(self._endpoints))

    def advance(self) -> bool:
        if self.exhausted is False:
            self._position += 1

        return self.exhausted is False
