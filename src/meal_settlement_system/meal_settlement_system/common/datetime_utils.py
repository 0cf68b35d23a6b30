from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse a YYYY-MM-DD string (or a full ISO timestamp) into a date.

    A timestamp carrying an offset is first converted to local time, so
    "2025-06-10T22:00:00Z" lands on the local calendar day it denotes.
    """
    v = (value or "").strip()
    if v.endswith(("Z", "z")):
        v = v[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.date()


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if value is None or not str(value).strip():
        return None
    return parse_iso_date(str(value))


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
