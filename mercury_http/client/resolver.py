import socket
from ipaddress import IPv6Address, ip_address
from typing import List, Literal

import aiodns

from .errors import ResolutionError
from .models import Endpoint


AddressFamily = Literal["ipv4", "ipv6", "any"]


class Resolver:
    def __init__(
        self,
        family: AddressFamily = "any",
    ) -> None:
        self.family = family
        self._resolver: aiodns.DNSResolver | None = None

    def _families(self) -> List[socket.AddressFamily]:
        match self.family:
            case "ipv4":
                return [socket.AF_INET]

            case "ipv6":
                return [socket.AF_INET6]

            case _:
                return [socket.AF_INET, socket.AF_INET6]

    async def resolve(
        self,
        host: str,
        port: int,
    ) -> List[Endpoint]:
        try:
            literal = ip_address(host)

            return [
                Endpoint(
                    address=str(literal),
                    port=port,
                    family=socket.AF_INET6 if isinstance(literal, IPv6Address) else socket.AF_INET,
                )
            ]

        except ValueError:
            pass

        if self._resolver is None:
            self._resolver = aiodns.DNSResolver()

        endpoints: List[Endpoint] = []
        last_error: aiodns.error.DNSError | None = None

        for family in self._families():
            try:
                resolved = await self._resolver.gethostbyname(host, family)

            except aiodns.error.DNSError as err:
                last_error = err
                continue

            for address in resolved.addresses:
                endpoint = Endpoint(
                    address=address,
                    port=port,
                    family=family,
                )

                if endpoint not in endpoints:
                    endpoints.append(endpoint)

        if len(endpoints) < 1:
            raise ResolutionError(f"Could not resolve host {host}") from last_error

        return endpoints
