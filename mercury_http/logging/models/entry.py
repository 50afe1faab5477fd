from typing import Any, Dict

import msgspec

from .log_level import LogLevel


class Entry(msgspec.Struct, kw_only=True):
    """Base log entry. Subclasses add fields that templates can reference by name."""

    level: LogLevel
    message: str | None = None
    tags: set[str] = msgspec.field(default_factory=set)

    def to_template(
        self,
        template: str,
        context: Dict[str, Any] | None = None,
    ) -> str:
        fields = msgspec.structs.asdict(self)
        fields["level"] = self.level.value

        if context:
            fields.update(context)

        return template.format(**fields)
