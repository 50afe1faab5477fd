from typing import Any, Dict, Tuple, TypeVar

from mercury_http.logging.models import Entry

from .logger_stream import LoggerStream


T = TypeVar('T', bound=Entry)


class LoggerContext:
    """
    Async context owning one LoggerStream. Entering initializes the stream
    and opens its default logfile, exiting flushes and closes it unless the
    context is nested inside a longer-lived one.
    """

    def __init__(
        self,
        name: str | None = None,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
        nested: bool = False,
        models: Dict[str, Tuple[type[T], Dict[str, Any]]] | None = None,
    ) -> None:
        self.name = name
        self.template = template
        self.filename = filename
        self.directory = directory
        self.nested = nested
        self.stream = LoggerStream(
            name=name,
            template=template,
            filename=filename,
            directory=directory,
            models=models,
        )

    async def __aenter__(self) -> LoggerStream:
        self.stream.set_defaults(
            template=self.template,
            filename=self.filename,
            directory=self.directory,
        )

        await self.stream.initialize()

        if self.filename:
            await self.stream.open_file(
                self.filename,
                directory=self.directory,
            )

        return self.stream

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if not self.nested:
            await self.stream.close()
