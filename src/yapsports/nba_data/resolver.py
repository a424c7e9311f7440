"""Pick the single most relevant game for a player's team."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta, tzinfo

from yapsports.nba_data.cache import GameDataCache
from yapsports.nba_data.game_state import (
    GamePhase,
    classify_game,
    estimated_end_time,
    is_finished,
    is_live,
    is_upcoming,
    start_has_passed,
    start_time,
)
from yapsports.nba_data.live_policy import LivePromotionPolicy
from yapsports.nba_data.models import Game
from yapsports.nba_data.selection import ResolvedState, Selection
from yapsports.settings import Settings
from yapsports.time_utils import calendar_today, league_zone, utc_now

logger = logging.getLogger(__name__)

LOOKAHEAD_DAYS = 7

_PHASE_RANK = {
    GamePhase.UPCOMING: 0,
    GamePhase.PENDING: 1,
    GamePhase.LIVE: 2,
    GamePhase.FINISHED: 3,
}


def _sort_key(game: Game) -> tuple[datetime, int]:
    start = start_time(game)
    return (start or datetime.max.replace(tzinfo=UTC), game.id)


class GameRelevanceResolver:
    """State machine over LIVE / RECENT / UPCOMING / NONE.

    Priority: keep a still-live previous pick, then scan for live games
    (refreshing started-but-unflagged ones), then a recently finished game,
    then the next upcoming one.
    """

    def __init__(
        self,
        cache: GameDataCache,
        *,
        policy: LivePromotionPolicy | None = None,
        recent_window: timedelta = timedelta(hours=3),
        nominal_game_hours: float = 2.5,
        overtime_hours: float = 0.25,
        lookahead_days: int = LOOKAHEAD_DAYS,
        calendar_tz: tzinfo = UTC,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self.cache = cache
        self.policy = policy or LivePromotionPolicy()
        self.recent_window = recent_window
        self.nominal_game_hours = nominal_game_hours
        self.overtime_hours = overtime_hours
        self.lookahead_days = lookahead_days
        self.calendar_tz = calendar_tz
        self._now = now

    @classmethod
    def from_settings(
        cls,
        cache: GameDataCache,
        settings: Settings,
        *,
        now: Callable[[], datetime] = utc_now,
    ) -> GameRelevanceResolver:
        return cls(
            cache,
            policy=LivePromotionPolicy.from_minutes(settings.live_grace_minutes),
            recent_window=timedelta(hours=settings.recent_window_hours),
            nominal_game_hours=settings.nominal_game_hours,
            overtime_hours=settings.overtime_hours,
            calendar_tz=league_zone(settings.league_timezone),
            now=now,
        )

    def end_time(self, game: Game) -> datetime | None:
        return estimated_end_time(
            game,
            nominal_hours=self.nominal_game_hours,
            overtime_hours=self.overtime_hours,
        )

    def finished_recently(self, game: Game, now: datetime) -> bool:
        end = self.end_time(game)
        return end is not None and now - end < self.recent_window

    def _phase(self, game: Game, now: datetime) -> GamePhase:
        return classify_game(game, now, tz=self.calendar_tz)

    def _finished(self, game: Game, now: datetime) -> bool:
        return is_finished(game, now, tz=self.calendar_tz)

    def _live(self, game: Game, now: datetime) -> bool:
        return is_live(game, now, tz=self.calendar_tz)

    def _upcoming(self, game: Game, now: datetime) -> bool:
        return is_upcoming(game, now, tz=self.calendar_tz)

    def _working_set(
        self, team_id: int, supplied: Iterable[Game], now: datetime
    ) -> dict[int, Game]:
        merged: dict[int, Game] = {}
        for game in supplied:
            merged[game.id] = game
        for game in self.cache.get_live_games():
            existing = merged.get(game.id)
            if existing is None:
                merged[game.id] = game
                continue
            supplied_rank = _PHASE_RANK[self._phase(existing, now)]
            if supplied_rank <= _PHASE_RANK[self._phase(game, now)]:
                merged[game.id] = game
        return {
            game_id: game
            for game_id, game in merged.items()
            if game.involves(team_id) and game.date is not None
        }

    def _refresh(self, game: Game, working: dict[int, Game]) -> Game:
        refreshed = self.cache.get_game_by_id(game.id, force_refresh=True)
        if refreshed is None:
            return game
        working[game.id] = refreshed
        return refreshed

    def _stability_check(
        self, previous: Selection | None, working: dict[int, Game], now: datetime
    ) -> Selection | None:
        if previous is None or previous.state != ResolvedState.LIVE or previous.game is None:
            return None
        refreshed = self._refresh(working.get(previous.game.id, previous.game), working)
        if self._live(refreshed, now):
            return Selection(game=refreshed, state=ResolvedState.LIVE)
        if self._finished(refreshed, now) and self.finished_recently(refreshed, now):
            logger.info("game %s went final, moving to recent", refreshed.id)
            return Selection(game=refreshed.as_final(), state=ResolvedState.RECENT)
        return None

    def _live_scan(self, working: dict[int, Game], now: datetime) -> Selection | None:
        today = calendar_today(now, self.calendar_tz)
        # late tips run past midnight while still dated the previous day
        slate = {today, today - timedelta(days=1)}
        candidates = sorted(
            (
                game
                for game in working.values()
                if game.date in slate and not self._finished(game, now)
            ),
            key=_sort_key,
        )
        for game in candidates:
            if self._live(game, now):
                return Selection(game=game, state=ResolvedState.LIVE)
        for game in candidates:
            if not start_has_passed(game, now):
                continue
            refreshed = self._refresh(game, working)
            if self._finished(refreshed, now):
                continue
            if self._live(refreshed, now):
                return Selection(game=refreshed, state=ResolvedState.LIVE)
            if self.policy.should_promote(refreshed, now):
                logger.info("promoting game %s to live ahead of upstream", refreshed.id)
                return Selection(game=refreshed, state=ResolvedState.LIVE)
        return None

    def _recent_scan(self, working: dict[int, Game], now: datetime) -> Selection | None:
        finished = [game for game in working.values() if self._finished(game, now)]
        if not finished:
            return None
        latest = max(finished, key=_sort_key)
        if not self.finished_recently(latest, now):
            return None
        return Selection(game=latest.as_final(), state=ResolvedState.RECENT)

    def _upcoming_scan(self, working: dict[int, Game], now: datetime) -> Selection | None:
        today = calendar_today(now, self.calendar_tz)
        for offset in range(self.lookahead_days + 1):
            day = today + timedelta(days=offset)
            on_day = [
                game
                for game in working.values()
                if game.date == day and not self._finished(game, now)
            ]
            if on_day:
                return Selection(game=min(on_day, key=_sort_key), state=ResolvedState.UPCOMING)
        later = [game for game in working.values() if self._upcoming(game, now)]
        if later:
            return Selection(game=min(later, key=_sort_key), state=ResolvedState.UPCOMING)
        return None

    def resolve(
        self,
        team_id: int,
        games: Iterable[Game] = (),
        *,
        previous: Selection | None = None,
    ) -> Selection:
        """Return the most relevant `(game, state)` for a team."""
        if not team_id:
            return Selection.none()
        now = self._now()
        working = self._working_set(team_id, games, now)
        for step in (
            lambda: self._stability_check(previous, working, now),
            lambda: self._live_scan(working, now),
            lambda: self._recent_scan(working, now),
            lambda: self._upcoming_scan(working, now),
        ):
            selection = step()
            if selection is not None:
                return selection
        return Selection.none()
