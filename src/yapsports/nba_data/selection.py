"""Double-buffered publication of resolved game selections."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from yapsports.nba_data.models import Game

logger = logging.getLogger(__name__)


class ResolvedState(StrEnum):
    LIVE = "live"
    RECENT = "recent"
    UPCOMING = "upcoming"
    NONE = "none"


@dataclass(frozen=True)
class Selection:
    game: Game | None
    state: ResolvedState

    @classmethod
    def none(cls) -> Selection:
        return cls(game=None, state=ResolvedState.NONE)

    @property
    def game_id(self) -> int | None:
        return self.game.id if self.game is not None else None

    def as_payload(self) -> dict[str, object]:
        state = None if self.state == ResolvedState.NONE else self.state.value
        return {"selectedGame": self.game, "state": state}

    def differs_from(self, other: Selection) -> bool:
        """Different game, different state, or a moved scoreboard while live."""
        if self.game_id != other.game_id or self.state != other.state:
            return True
        if self.state != ResolvedState.LIVE or self.game is None or other.game is None:
            return False
        mine, theirs = self.game, other.game
        return (
            mine.home_team_score != theirs.home_team_score
            or mine.visitor_team_score != theirs.visitor_team_score
            or mine.period != theirs.period
            or mine.time != theirs.time
        )


class SelectionBuffer:
    """pending -> (settle delay) -> committed.

    A proposal only becomes visible after it has stood unchanged for the
    settle delay; a newer differing proposal restarts the wait. Proposals that
    match the committed selection drop any pending one.
    """

    def __init__(
        self,
        *,
        settle_delay_s: float = 1.5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settle_delay_s = max(0.0, settle_delay_s)
        self._clock = clock
        self._current = Selection.none()
        self._pending: Selection | None = None
        self._pending_since = 0.0

    @property
    def current(self) -> Selection:
        return self._current

    @property
    def pending(self) -> Selection | None:
        return self._pending

    @property
    def latest(self) -> Selection:
        """Most recent proposal, committed or not."""
        return self._pending if self._pending is not None else self._current

    def propose(self, selection: Selection) -> None:
        if not selection.differs_from(self._current):
            self._pending = None
            return
        if self._pending is None or selection.differs_from(self._pending):
            self._pending_since = self._clock()
        self._pending = selection

    def commit_due(self) -> bool:
        """Promote the pending selection once it has settled."""
        if self._pending is None:
            return False
        if self._clock() - self._pending_since < self.settle_delay_s:
            return False
        logger.debug(
            "committing selection game=%s state=%s",
            self._pending.game_id,
            self._pending.state,
        )
        self._current = self._pending
        self._pending = None
        return True

    def flush(self) -> Selection:
        if self._pending is not None:
            self._current = self._pending
            self._pending = None
        return self._current

    def clear(self) -> None:
        self._current = Selection.none()
        self._pending = None
