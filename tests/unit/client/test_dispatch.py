"""
Tests for LoopDispatcher, the TLS context factory and the transport base.
"""

import asyncio
import ssl
import threading

import pytest

from mercury_http.client import (
    LoopDispatcher,
    SSLTransport,
    TCPTransport,
    Transport,
    create_client_ssl_context,
)


class TestLoopDispatcher:
    """Tests for LoopDispatcher.post."""

    def test_no_session_runs_inline(self) -> None:
        """Callbacks without a session run immediately."""
        calls = []

        LoopDispatcher().post(None, lambda: calls.append("ran"))

        assert calls == ["ran"]

    @pytest.mark.asyncio
    async def test_unregistered_session_uses_running_loop(self) -> None:
        """Unknown sessions fall back to the running loop."""
        ran = asyncio.Event()

        LoopDispatcher().post("session", ran.set)

        assert ran.is_set() is False
        await asyncio.wait_for(ran.wait(), timeout=1)

    @pytest.mark.asyncio
    async def test_registered_session_runs_on_its_loop(self) -> None:
        """Registered sessions marshal callbacks onto their own loop."""
        session_loop = asyncio.new_event_loop()
        thread = threading.Thread(target=session_loop.run_forever, daemon=True)
        thread.start()

        dispatcher = LoopDispatcher()
        dispatcher.register("session", session_loop)

        ran_on = []
        finished = threading.Event()

        def callback():
            ran_on.append(threading.get_ident())
            finished.set()

        try:
            dispatcher.post("session", callback)
            assert await asyncio.to_thread(finished.wait, 1) is True
            assert ran_on == [thread.ident]

        finally:
            session_loop.call_soon_threadsafe(session_loop.stop)
            thread.join(timeout=1)
            session_loop.close()

        dispatcher.unregister("session")
        dispatcher.post(None, lambda: ran_on.append("inline"))
        assert ran_on[-1] == "inline"


class TestClientSSLContext:
    """Tests for create_client_ssl_context."""

    def test_required_verifies_hostname(self) -> None:
        """REQUIRED checks both chain and hostname."""
        ctx = create_client_ssl_context(verify_mode="REQUIRED")

        assert ctx.verify_mode == ssl.CERT_REQUIRED
        assert ctx.check_hostname is True
        assert ctx.minimum_version == ssl.TLSVersion.TLSv1_2

    def test_optional_and_none_skip_hostname(self) -> None:
        """OPTIONAL and NONE relax verification."""
        optional = create_client_ssl_context(verify_mode="OPTIONAL")
        disabled = create_client_ssl_context(verify_mode="NONE")

        assert optional.verify_mode == ssl.CERT_OPTIONAL
        assert optional.check_hostname is False
        assert disabled.verify_mode == ssl.CERT_NONE
        assert disabled.check_hostname is False

    def test_missing_trust_file_raises(self, tmp_path) -> None:
        """A configured trust file that does not exist is an error."""
        with pytest.raises(FileNotFoundError):
            create_client_ssl_context(verify_file=str(tmp_path / "missing.pem"))


class TestTransportBase:
    """Tests for the Transport base class."""

    def test_base_transport_is_abstract(self) -> None:
        """Transport leaves handshake() to its subclasses."""
        with pytest.raises(TypeError):
            Transport()

    def test_concrete_transports_start_open(self) -> None:
        """TCP and TLS transports can be built and start neither closed nor buffered."""
        transports = [
            TCPTransport(),
            SSLTransport("example.com", ssl.create_default_context()),
        ]

        for transport in transports:
            assert transport.closed is False
            assert transport.buffered == 0
