from .transport import Transport


class TCPTransport(Transport):

    async def handshake(self) -> None:
        self._check_open()
