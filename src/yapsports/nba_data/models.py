"""Typed records for normalized games and per-player stat lines."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import StrEnum


class ProgressStatus(StrEnum):
    """Explicit progress of a game, split out of the overloaded upstream status."""

    SCHEDULED = "scheduled"
    LIVE = "live"
    FINAL = "final"


@dataclass(frozen=True)
class TeamRef:
    id: int
    abbreviation: str = ""
    full_name: str = ""


@dataclass(frozen=True)
class GameStat:
    """One player's box-score line for one game."""

    game_id: int
    player_id: int | None = None
    minutes: str = "0:00"
    points: int = 0
    offensive_rebounds: int = 0
    defensive_rebounds: int = 0
    rebounds: int = 0
    assists: int = 0
    steals: int = 0
    blocks: int = 0
    turnovers: int = 0
    personal_fouls: int = 0
    field_goals_made: int = 0
    field_goals_attempted: int = 0
    field_goal_pct: float = 0.0
    three_pointers_made: int = 0
    three_pointers_attempted: int = 0
    three_point_pct: float = 0.0
    free_throws_made: int = 0
    free_throws_attempted: int = 0
    free_throw_pct: float = 0.0

    @classmethod
    def zeroed(cls, game_id: int, player_id: int | None = None) -> GameStat:
        return cls(game_id=game_id, player_id=player_id)

    @property
    def is_placeholder(self) -> bool:
        """A stat line whose point total carries no information yet."""
        return self.points == 0


@dataclass
class Game:
    """Normalized game record.

    `status_text` keeps the raw upstream string; `progress_status` and
    `scheduled_time_display` are the two meanings it is split into.
    """

    id: int
    date: date | None
    home_team: TeamRef
    visitor_team: TeamRef
    home_team_score: int = 0
    visitor_team_score: int = 0
    status_text: str = ""
    progress_status: ProgressStatus = ProgressStatus.SCHEDULED
    scheduled_time_display: str | None = None
    scheduled_start: datetime | None = None
    period: int = 0
    time: str = ""
    played: bool = False
    season: int | None = None
    postseason: bool = False
    raw_date: str = ""
    stats: GameStat | None = None
    needs_recent_check: bool = False

    def __post_init__(self) -> None:
        if self.stats is None:
            self.stats = GameStat.zeroed(self.id)

    @property
    def has_score(self) -> bool:
        return self.home_team_score > 0 or self.visitor_team_score > 0

    @property
    def overtime_periods(self) -> int:
        return max(0, self.period - 4)

    def involves(self, team_id: int) -> bool:
        return team_id in (self.home_team.id, self.visitor_team.id)

    def attach_stats(self, stat: GameStat | None) -> None:
        self.stats = stat if stat is not None else GameStat.zeroed(self.id)

    def as_final(self) -> Game:
        """Copy of this game with an unambiguous final marker."""
        copy = replace(self, progress_status=ProgressStatus.FINAL)
        if "final" not in self.status_text.lower():
            copy.status_text = "Final"
        return copy


@dataclass(frozen=True)
class SeasonAverages:
    player_id: int
    season: int
    games_played: int = 0
    pts: float = 0.0
    reb: float = 0.0
    ast: float = 0.0
    stl: float = 0.0
    blk: float = 0.0
    fg_pct: float = 0.0
    fg3_pct: float = 0.0
    ft_pct: float = 0.0
