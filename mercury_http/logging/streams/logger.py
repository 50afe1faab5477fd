from __future__ import annotations

import asyncio
from typing import (
    Any,
    Dict,
    Tuple,
    TypeVar,
)

from mercury_http.logging.models import Entry

from .logger_context import LoggerContext
from .logger_stream import LoggerStream, split_logfile_path

T = TypeVar('T', bound=Entry)

EntryModels = Dict[str, Tuple[type[T], Dict[str, Any]]]


class Logger:
    """
    Registry of named logger contexts. A connection configures its context
    once with the entry models it logs, then enters it for each run.
    """

    def __init__(self) -> None:
        self._contexts: Dict[str, LoggerContext] = {}

    def __getitem__(self, name: str) -> LoggerContext:
        if name not in self._contexts:
            self._contexts[name] = LoggerContext(name=name)

        return self._contexts[name]

    def __contains__(self, name: str):
        return name in self._contexts

    def configure(
        self,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
        models: EntryModels | None = None,
        nested: bool = False,
    ) -> LoggerContext:
        name = name or 'default'
        filename, directory = split_logfile_path(path)

        context = LoggerContext(
            name=name,
            template=template,
            filename=filename,
            directory=directory,
            nested=nested,
            models=models,
        )

        self._contexts[name] = context

        return context

    def get_stream(
        self,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
        models: EntryModels | None = None,
    ) -> LoggerStream:
        return self.configure(
            name=name,
            template=template,
            path=path,
            models=models,
        ).stream

    def context(
        self,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
        nested: bool = False,
        models: EntryModels | None = None,
    ) -> LoggerContext:
        name = name or 'default'

        context = self._contexts.get(name)
        if context is None:
            return self.configure(
                name=name,
                template=template,
                path=path,
                models=models,
                nested=nested,
            )

        # Settings passed here only fill in what configure() left unset.
        filename, directory = split_logfile_path(path)

        context.template = template or context.template
        context.filename = filename or context.filename
        context.directory = directory or context.directory
        context.nested = nested

        return context

    def remove(self, name: str) -> LoggerContext | None:
        return self._contexts.pop(name, None)

    async def close(self):
        await asyncio.gather(*[
            context.stream.close() for context in self._contexts.values()
        ])

    def abort(self):
        for context in self._contexts.values():
            context.stream.abort()

