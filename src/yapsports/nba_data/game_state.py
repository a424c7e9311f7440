"""Game lifecycle predicates over normalized games.

Every predicate takes `now` explicitly. Date-level comparisons use the
calendar date of `now` in `tz`, UTC by default; callers that know the
league timezone pass it, since upstream game dates are league-local.
Precedence when signals conflict is FINISHED > LIVE > UPCOMING. Games dated
in the past that are neither final nor scored land in PENDING: their result
has not been published yet and the backfill is what repairs them.
"""

from __future__ import annotations

from datetime import UTC, datetime, time, timedelta, tzinfo
from enum import StrEnum

from yapsports.nba_data.models import Game, ProgressStatus
from yapsports.time_utils import calendar_today

NOMINAL_GAME_HOURS = 2.5
OVERTIME_HOURS = 0.25


class GamePhase(StrEnum):
    LIVE = "live"
    FINISHED = "finished"
    UPCOMING = "upcoming"
    PENDING = "pending"


def upstream_flags_live(game: Game) -> bool:
    """True when upstream itself reports the game as in progress."""
    if game.progress_status == ProgressStatus.FINAL:
        return False
    return game.period > 0 or game.progress_status == ProgressStatus.LIVE


def has_start_evidence(game: Game) -> bool:
    return game.has_score or game.played


def start_has_passed(game: Game, now: datetime) -> bool:
    return game.scheduled_start is not None and game.scheduled_start <= now


def is_finished(game: Game, now: datetime, *, tz: tzinfo = UTC) -> bool:
    if game.progress_status == ProgressStatus.FINAL:
        return True
    if game.date is not None and game.date < calendar_today(now, tz) and game.has_score:
        return True
    return game.played and game.has_score


def is_live(game: Game, now: datetime, *, tz: tzinfo = UTC) -> bool:
    if is_finished(game, now, tz=tz):
        return False
    if upstream_flags_live(game):
        return True
    return (
        game.date is not None
        and game.date == calendar_today(now, tz)
        and start_has_passed(game, now)
        and has_start_evidence(game)
    )


def is_upcoming(game: Game, now: datetime, *, tz: tzinfo = UTC) -> bool:
    if is_finished(game, now, tz=tz) or is_live(game, now, tz=tz):
        return False
    return game.date is not None and game.date >= calendar_today(now, tz)


def classify_game(game: Game, now: datetime, *, tz: tzinfo = UTC) -> GamePhase:
    """Return the single lifecycle phase of a game."""
    if is_finished(game, now, tz=tz):
        return GamePhase.FINISHED
    if is_live(game, now, tz=tz):
        return GamePhase.LIVE
    if is_upcoming(game, now, tz=tz):
        return GamePhase.UPCOMING
    return GamePhase.PENDING


def start_time(game: Game) -> datetime | None:
    """Scheduled start, falling back to midnight UTC of the game date."""
    if game.scheduled_start is not None:
        return game.scheduled_start
    if game.date is None:
        return None
    return datetime.combine(game.date, time(0, 0), tzinfo=UTC)


def estimated_end_time(
    game: Game,
    *,
    nominal_hours: float = NOMINAL_GAME_HOURS,
    overtime_hours: float = OVERTIME_HOURS,
) -> datetime | None:
    """Start plus nominal length plus an increment per overtime period."""
    start = start_time(game)
    if start is None:
        return None
    length = nominal_hours + overtime_hours * game.overtime_periods
    return start + timedelta(hours=length)
