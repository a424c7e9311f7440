"""Shared UTC timestamp helpers."""

from __future__ import annotations

from datetime import UTC, date, datetime, tzinfo
from zoneinfo import ZoneInfo

ET_ZONE = ZoneInfo("America/New_York")


def utc_now() -> datetime:
    """Return current UTC time with second precision."""
    return datetime.now(UTC).replace(microsecond=0)


def iso_z(value: datetime) -> str:
    """Format a datetime as ISO-8601 with trailing Z in UTC."""
    normalized = value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)
    return normalized.isoformat().replace("+00:00", "Z")


def utc_today(now: datetime | None = None) -> date:
    """Return the UTC calendar date, the default for date-level game comparisons."""
    return calendar_today(now, UTC)


def parse_iso_z(value: str) -> datetime | None:
    """Parse an ISO timestamp and normalize to UTC."""
    raw = value.strip()
    if not raw:
        return None
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_game_date(value: object) -> date | None:
    """Parse the calendar date of an upstream game.

    Upstream dates arrive either as a bare `YYYY-MM-DD` or as a full ISO
    timestamp; only the date prefix is meaningful at the date level.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    raw = value.strip()
    if len(raw) < 10:
        return None
    try:
        return date.fromisoformat(raw.split("T", 1)[0][:10])
    except ValueError:
        return None


def has_time_component(value: object) -> bool:
    return isinstance(value, str) and "T" in value.strip()


def league_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (KeyError, ValueError):
        return ET_ZONE


def calendar_today(now: datetime | None = None, tz: tzinfo = UTC) -> date:
    """Calendar date of `now` in `tz`; UTC unless a league timezone is supplied."""
    current = now or utc_now()
    if current.tzinfo is None:
        current = current.replace(tzinfo=UTC)
    return current.astimezone(tz).date()
