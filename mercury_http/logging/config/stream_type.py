from __future__ import annotations

from enum import Enum


class StreamType(Enum):
    STDOUT = "STDOUT"
    STDERR = "STDERR"

    @classmethod
    def from_name(cls, name: str) -> StreamType:
        return cls.STDOUT if name.lower() == "stdout" else cls.STDERR
