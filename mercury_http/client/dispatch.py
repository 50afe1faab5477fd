import asyncio
from typing import Callable, Dict, Protocol


class SessionDispatcher(Protocol):
    def post(
        self,
        session_id: str | None,
        callback: Callable[[], None],
    ) -> None:
        ...


class LoopDispatcher:
    """
    Runs completion callbacks on the event loop that owns a session. Sessions
    without a registered loop fall back to the dispatcher's default loop, and
    a callback posted without a session id runs immediately.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._default_loop = loop
        self._sessions: Dict[str, asyncio.AbstractEventLoop] = {}

    def register(
        self,
        session_id: str,
        loop: asyncio.AbstractEventLoop,
    ):
        self._sessions[session_id] = loop

    def unregister(self, session_id: str):
        self._sessions.pop(session_id, None)

    def post(
        self,
        session_id: str | None,
        callback: Callable[[], None],
    ) -> None:
        if session_id is None:
            callback()
            return

        loop = self._sessions.get(session_id, self._default_loop)
        if loop is None:
            loop = asyncio.get_running_loop()

        loop.call_soon_threadsafe(callback)
