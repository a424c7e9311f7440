"""Per-player game tracking loop: resolve, debounce, publish."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from datetime import datetime

from yapsports.nba_data.models import Game
from yapsports.nba_data.polling import PollSchedule
from yapsports.nba_data.resolver import GameRelevanceResolver
from yapsports.nba_data.selection import Selection, SelectionBuffer
from yapsports.settings import Settings
from yapsports.time_utils import league_zone, utc_now

logger = logging.getLogger(__name__)


class PlayerGameTracker:
    """Drive one consumer's view of "the game that matters" for a team.

    The caller invokes `tick()` from its own timer; the tracker decides whether
    a recompute is due and only exposes settled selections. `games` is the
    caller-side schedule (typically the reconciled season list) that the
    resolver merges with the cached slate.
    """

    def __init__(
        self,
        resolver: GameRelevanceResolver,
        team_id: int,
        *,
        games: Iterable[Game] = (),
        buffer: SelectionBuffer | None = None,
        schedule: PollSchedule | None = None,
    ) -> None:
        self.resolver = resolver
        self.team_id = team_id
        self.games: list[Game] = list(games)
        self.buffer = buffer or SelectionBuffer()
        self.schedule = schedule or PollSchedule()

    @classmethod
    def from_settings(
        cls,
        resolver: GameRelevanceResolver,
        team_id: int,
        settings: Settings,
        *,
        games: Iterable[Game] = (),
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = utc_now,
    ) -> PlayerGameTracker:
        return cls(
            resolver,
            team_id,
            games=games,
            buffer=SelectionBuffer(settle_delay_s=settings.settle_delay_s, clock=clock),
            schedule=PollSchedule(
                league_tz=league_zone(settings.league_timezone),
                clock=clock,
                now=now,
            ),
        )

    @property
    def selection(self) -> Selection:
        return self.buffer.current

    def set_games(self, games: Iterable[Game]) -> None:
        """Replace the caller-side schedule; picked up on the next recompute."""
        self.games = list(games)

    def recompute(self) -> Selection:
        """Resolve now regardless of cadence and feed the result to the buffer."""
        proposal = self.resolver.resolve(self.team_id, self.games, previous=self.buffer.latest)
        self.buffer.propose(proposal)
        self.schedule.mark_ran()
        return proposal

    def tick(self) -> Selection:
        """Recompute when due, then commit any settled proposal."""
        if self.schedule.is_due(self.buffer.latest.state):
            self.recompute()
        if self.buffer.commit_due():
            logger.info(
                "team %s now showing game=%s state=%s",
                self.team_id,
                self.buffer.current.game_id,
                self.buffer.current.state,
            )
        return self.buffer.current

    def set_visible(self, visible: bool) -> Selection:
        if self.schedule.set_visible(visible):
            self.recompute()
        return self.buffer.current

    def stop(self) -> None:
        self.schedule.stop()
        self.buffer.clear()
