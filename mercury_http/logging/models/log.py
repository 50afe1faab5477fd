from typing import Generic, TypeVar

import msgspec

from .entry import Entry


T = TypeVar('T', bound=Entry)


class Log(msgspec.Struct, Generic[T], kw_only=True):
    """An entry plus where and when it was logged."""

    entry: T
    logger: str
    filename: str
    function_name: str
    line_number: int
    thread_id: int
    timestamp: str
