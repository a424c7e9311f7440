"""Heuristic promotion of started-but-unflagged games to live."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from yapsports.nba_data.game_state import has_start_evidence
from yapsports.nba_data.models import Game


@dataclass(frozen=True)
class LivePromotionPolicy:
    """Promote a game to live once it is past tip by a grace period and shows a start.

    Upstream can lag behind the real tip-off by several minutes; this covers
    that window without guessing for games with no evidence at all.
    """

    grace: timedelta = timedelta(minutes=20)
    evidence: Callable[[Game], bool] = field(default=has_start_evidence)

    @classmethod
    def from_minutes(cls, minutes: int) -> LivePromotionPolicy:
        return cls(grace=timedelta(minutes=max(0, minutes)))

    def should_promote(self, game: Game, now: datetime) -> bool:
        if game.scheduled_start is None:
            return False
        if now - game.scheduled_start < self.grace:
            return False
        return self.evidence(game)
