"""Date/time rendering for client-facing messages (en-US style)."""

from __future__ import annotations

from datetime import date, datetime, time

MISSING = "N/A"


def format_date(value: date | datetime | str | None) -> str:
    """Render as M/D/YYYY, e.g. 6/1/2026. Anything unparseable becomes N/A."""
    if not value:
        return MISSING
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return MISSING
    return f"{value.month}/{value.day}/{value.year}"


def _parse_time(value: str) -> time | None:
    # Accepts "HH:mm" and "HH:mm:ss"; seconds are ignored.
    parts = value.strip().split(":")
    if len(parts) < 2:
        return None
    try:
        return time(int(parts[0]), int(parts[1]))
    except ValueError:
        return None


def format_time(value: time | str | None) -> str:
    """Render as 12-hour clock, e.g. 2:30 PM. A missing or bad value becomes N/A."""
    if not value:
        return MISSING
    if isinstance(value, str):
        parsed = _parse_time(value)
        if parsed is None:
            return MISSING
        value = parsed
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"
