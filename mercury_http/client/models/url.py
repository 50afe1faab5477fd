from __future__ import annotations

import msgspec

from mercury_http.client.errors import InvalidURLError


DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
}


class URL(msgspec.Struct, frozen=True):
    scheme: str
    host: str
    port: int
    path: str = "/"

    @classmethod
    def parse(cls, url: str) -> URL:
        scheme, separator, rest = url.partition("://")
        if not separator:
            raise InvalidURLError(f"ill-formed URL: {url}")

        host, slash, path = rest.partition("/")
        path = f"{slash}{path}" if slash else "/"

        port = DEFAULT_PORTS.get(scheme, 80)

        if host.startswith("["):
            # Bracketed IPv6 literal, e.g. [::1]:8080
            literal, bracket, port_part = host[1:].partition("]")
            if not bracket or (port_part and not port_part.startswith(":")):
                raise InvalidURLError(f"ill-formed URL: {url}")

            host = literal
            colon, port_string = port_part[:1], port_part[1:]

        else:
            host, colon, port_string = host.partition(":")

        if colon:
            if not (port_string.isascii() and port_string.isdigit()):
                raise InvalidURLError(f"invalid port: {port_string}")

            port = int(port_string)

            if port < 1 or port > 65535:
                raise InvalidURLError(f"invalid port: {port_string}")

        if not host:
            raise InvalidURLError(f"missing host: {url}")

        return cls(
            scheme=scheme,
            host=host,
            port=port,
            path=path,
        )

    @property
    def is_ssl(self) -> bool:
        return self.scheme == "https"

    @property
    def authority(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host

        if self.port == DEFAULT_PORTS.get(self.scheme):
            return host

        return f"{host}:{self.port}"
