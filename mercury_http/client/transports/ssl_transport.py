import ssl

from .transport import Transport


class SSLTransport(Transport):
    def __init__(
        self,
        hostname: str,
        ssl_context: ssl.SSLContext,
        read_chunk_size: int = 4096,
    ) -> None:
        super().__init__(read_chunk_size=read_chunk_size)
        self.hostname = hostname
        self.ssl_context = ssl_context

    async def handshake(self) -> None:
        self._check_open()

        # The server_hostname drives both SNI and, when the context has
        # check_hostname enabled, certificate hostname verification.
        await self._writer.start_tls(
            self.ssl_context,
            server_hostname=self.hostname,
        )
