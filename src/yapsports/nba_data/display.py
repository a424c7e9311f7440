"""Display helpers that never raise on malformed upstream dates."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, tzinfo

from yapsports.time_utils import ET_ZONE, parse_game_date, parse_iso_z

logger = logging.getLogger(__name__)

UNAVAILABLE = "N/A"
TIME_TBD = "Time TBD"


def format_tip_time(value: datetime | None, *, tz: tzinfo = ET_ZONE) -> str:
    """Format a tip-off instant as e.g. `7:30 PM ET`."""
    if value is None:
        return TIME_TBD
    aware = value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    local = aware.astimezone(tz)
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {suffix} ET"


def format_game_time(raw: object, *, tz: tzinfo = ET_ZONE) -> str:
    if not isinstance(raw, str) or "T" not in raw:
        return TIME_TBD
    parsed = parse_iso_z(raw)
    if parsed is None:
        return TIME_TBD
    return format_tip_time(parsed, tz=tz)


def format_game_date(raw: object) -> str:
    """Format an upstream date (bare or ISO) as e.g. `Oct 22`."""
    parsed = parse_game_date(raw)
    if parsed is None:
        logger.warning("unparseable game date %r", raw)
        return UNAVAILABLE
    return f"{parsed.strftime('%b')} {parsed.day}"


def format_period(period: int) -> str:
    """Quarter or overtime label: Q1..Q4, OT, 2OT, ..."""
    if period <= 0:
        return ""
    if period <= 4:
        return f"Q{period}"
    if period == 5:
        return "OT"
    return f"{period - 4}OT"
