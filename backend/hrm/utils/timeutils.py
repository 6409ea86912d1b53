"""
Zeit-Helfer: Wanduhrzeiten (HH:MM) der Organisation <-> absolute UTC-Zeitpunkte.

Alle Wanduhrzeiten beziehen sich auf den festen UTC-Offset aus
settings.ORG_UTC_OFFSET_MINUTES.
"""
from __future__ import annotations

from datetime import date, datetime, time, timezone

from hrm.core.config import settings


def parse_time(value: str | time) -> time:
    """'HH:MM' oder 'HH:MM:SS' -> time."""
    if isinstance(value, time):
        return value
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Ungültige Uhrzeit: {value!r}")
    hour = int(parts[0])
    minute = int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return time(hour, minute, second)


def format_time(value: time) -> str:
    return value.strftime("%H:%M") if value.second == 0 else value.strftime("%H:%M:%S")


def to_utc(ts: datetime) -> datetime:
    # SQLite liefert DateTime(timezone=True) ohne tzinfo zurück – gespeichert wird immer UTC
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def org_date_of(ts: datetime) -> date:
    """Kalendertag eines Zeitpunkts in der Zeitzone der Organisation."""
    return to_utc(ts).astimezone(settings.org_timezone).date()


def org_instant(day: date, wall_clock: time) -> datetime:
    """Wanduhrzeit an einem Kalendertag der Organisation als UTC-Zeitpunkt."""
    local = datetime.combine(day, wall_clock.replace(tzinfo=None), tzinfo=settings.org_timezone)
    return local.astimezone(timezone.utc)


def org_now() -> datetime:
    return datetime.now(settings.org_timezone)


def js_day_of_week(day: date) -> int:
    """Wochentag mit 0=Sonntag … 6=Samstag (Schlüssel der Wochenvorlagen)."""
    return (day.weekday() + 1) % 7
