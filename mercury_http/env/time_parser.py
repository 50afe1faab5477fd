import re
from datetime import timedelta


duration_pattern = re.compile(
    r"(?P<value>\d+(?:\.\d+)?)\s*(?P<unit>ms|[smhdw])?",
    flags=re.IGNORECASE,
)


class TimeParser:
    """Parses durations like "10s", "250ms" or "1m30s" into seconds. Bare numbers are seconds."""

    units = {
        "ms": "milliseconds",
        "s": "seconds",
        "m": "minutes",
        "h": "hours",
        "d": "days",
        "w": "weeks",
    }

    def parse(self, time_amount: str | int | float) -> float:
        if isinstance(time_amount, (int, float)):
            return float(time_amount)

        matches = list(duration_pattern.finditer(time_amount))
        if not matches:
            raise ValueError(f"Invalid duration: {time_amount!r}")

        total = timedelta()
        for match in matches:
            unit = (match.group("unit") or "s").lower()
            total += timedelta(**{self.units[unit]: float(match.group("value"))})

        seconds = total.total_seconds()

        if time_amount.strip().startswith("-"):
            return -seconds

        return seconds
