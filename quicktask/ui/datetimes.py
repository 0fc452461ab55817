from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

DISPLAY_FORMAT = "%d.%m.%Y %H:%M"


def to_local(value: datetime) -> datetime:
    """Stored naive UTC to naive local time, using the offset in effect at ``value``."""
    return value.replace(tzinfo=timezone.utc).astimezone().replace(tzinfo=None)


def to_utc(value: datetime) -> datetime:
    """Naive local time from an editor back to the naive UTC the database stores."""
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def format_local(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return to_local(value).strftime(DISPLAY_FORMAT)
