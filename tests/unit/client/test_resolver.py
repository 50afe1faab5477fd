"""
Tests for Resolver.

Covers:
- IP literals bypassing DNS
- Family ordering and deduplication
- Resolution failures
"""

import socket
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import aiodns
import pytest

from mercury_http.client import Endpoint, ResolutionError, Resolver


def create_dns(answers: dict[int, list[str] | Exception]) -> MagicMock:
    async def gethostbyname(host: str, family: int):
        answer = answers[family]
        if isinstance(answer, Exception):
            raise answer

        return SimpleNamespace(name=host, aliases=[], addresses=answer)

    dns = MagicMock()
    dns.gethostbyname = AsyncMock(side_effect=gethostbyname)
    return dns


class TestResolver:
    """Tests for Resolver.resolve."""

    @pytest.mark.asyncio
    async def test_ipv4_literal_skips_dns(self) -> None:
        """IPv4 literals resolve to themselves."""
        resolver = Resolver()
        resolver._resolver = create_dns({})

        endpoints = await resolver.resolve("127.0.0.1", 8080)

        assert endpoints == [Endpoint(address="127.0.0.1", port=8080)]
        resolver._resolver.gethostbyname.assert_not_called()

    @pytest.mark.asyncio
    async def test_ipv6_literal_skips_dns(self) -> None:
        """IPv6 literals resolve to an AF_INET6 endpoint."""
        endpoints = await Resolver().resolve("::1", 443)

        assert endpoints == [Endpoint(address="::1", port=443, family=socket.AF_INET6)]

    @pytest.mark.asyncio
    async def test_any_family_orders_ipv4_first(self) -> None:
        """IPv4 answers come before IPv6 answers, duplicates removed."""
        resolver = Resolver(family="any")
        resolver._resolver = create_dns({
            socket.AF_INET: ["10.0.0.1", "10.0.0.2", "10.0.0.1"],
            socket.AF_INET6: ["2001:db8::1"],
        })

        endpoints = await resolver.resolve("example.com", 80)

        assert endpoints == [
            Endpoint(address="10.0.0.1", port=80),
            Endpoint(address="10.0.0.2", port=80),
            Endpoint(address="2001:db8::1", port=80, family=socket.AF_INET6),
        ]

    @pytest.mark.asyncio
    async def test_single_family(self) -> None:
        """A fixed family only queries that family."""
        resolver = Resolver(family="ipv6")
        resolver._resolver = create_dns({
            socket.AF_INET6: ["2001:db8::2"],
        })

        endpoints = await resolver.resolve("example.com", 443)

        assert [endpoint.family for endpoint in endpoints] == [socket.AF_INET6]
        resolver._resolver.gethostbyname.assert_awaited_once_with("example.com", socket.AF_INET6)

    @pytest.mark.asyncio
    async def test_partial_failure_still_resolves(self) -> None:
        """One family failing is fine when the other answers."""
        resolver = Resolver()
        resolver._resolver = create_dns({
            socket.AF_INET: ["10.0.0.1"],
            socket.AF_INET6: aiodns.error.DNSError(1, "no AAAA"),
        })

        endpoints = await resolver.resolve("example.com", 80)

        assert endpoints == [Endpoint(address="10.0.0.1", port=80)]

    @pytest.mark.asyncio
    async def test_total_failure_raises(self) -> None:
        """Nothing resolving raises ResolutionError chained to the DNS error."""
        resolver = Resolver()
        resolver._resolver = create_dns({
            socket.AF_INET: aiodns.error.DNSError(4, "not found"),
            socket.AF_INET6: aiodns.error.DNSError(4, "not found"),
        })

        with pytest.raises(ResolutionError) as raised:
            await resolver.resolve("missing.invalid", 80)

        assert isinstance(raised.value.__cause__, aiodns.error.DNSError)
