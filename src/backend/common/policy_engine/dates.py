from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from .models import Instant


class InvalidExpenseDate(ValueError):
    """The expense date cannot be parsed into a valid instant."""

    def __init__(self, value: object):
        super().__init__(f"Invalid expense date: {value!r}")
        self.value = value


def parse_instant(value: Optional[Instant]) -> Optional[datetime]:
    """Parse an ISO-8601 string, date, or datetime into an aware UTC datetime.

    Date-only values and naive datetimes are taken as UTC. Returns None for
    missing or unparsable input; callers decide whether that fails open or closed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def require_instant(value: Optional[Instant]) -> datetime:
    parsed = parse_instant(value)
    if parsed is None:
        raise InvalidExpenseDate(value)
    return parsed
