"""Repair missing scores and stat lines for a player's past games."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from yapsports.nba_data.client import GameGateway, list_games, list_stats
from yapsports.nba_data.errors import UpstreamError
from yapsports.nba_data.models import Game, GameStat
from yapsports.nba_data.normalize import (
    box_score_game_id,
    box_score_scores,
    find_box_score_player,
    normalize_game,
    normalize_stat,
    stat_from_box_score_player,
)
from yapsports.settings import Settings
from yapsports.time_utils import ET_ZONE, calendar_today, league_zone, utc_now

logger = logging.getLogger(__name__)


@dataclass
class BackfillResult:
    """Outcome of one reconciliation pass for one player."""

    games: list[Game]
    stats: list[GameStat]
    patched_game_ids: list[int] = field(default_factory=list)
    failed_game_ids: list[int] = field(default_factory=list)

    @property
    def pending_game_ids(self) -> list[int]:
        return [game.id for game in self.games if game.needs_recent_check]

    def as_payload(self) -> dict[str, Any]:
        return {"games": self.games}


def upsert_stat(stats_by_game: dict[int, GameStat], stat: GameStat) -> bool:
    """Insert a stat line, replacing only a zero-point placeholder.

    A non-zero point total is never overwritten, even by a later fetch that
    disagrees with it.
    """
    existing = stats_by_game.get(stat.game_id)
    if existing is not None and not existing.is_placeholder:
        return False
    if existing == stat:
        return False
    stats_by_game[stat.game_id] = stat
    return True


def patch_scores(game: Game, scores: tuple[int, int] | None) -> bool:
    """Overwrite stored scores with fetched ones; mark played on any positive score."""
    if scores is None:
        return False
    home, visitor = scores
    changed = (game.home_team_score, game.visitor_team_score) != (home, visitor)
    game.home_team_score = home
    game.visitor_team_score = visitor
    if home > 0 or visitor > 0:
        changed = changed or not game.played
        game.played = True
    return changed


def _batches(items: list[Game], size: int) -> Iterable[list[Game]]:
    step = max(1, size)
    for start in range(0, len(items), step):
        yield items[start : start + step]


class StatBackfillReconciler:
    """Detect past games with missing data and fetch what upstream now has.

    Recent gaps (inside `recent_window_days`) are fetched one game at a time;
    older gaps go through batched box-score lookups. A failed fetch only
    skips its own game or batch.
    """

    def __init__(
        self,
        gateway: GameGateway,
        *,
        batch_size: int = 10,
        recent_window_days: int = 7,
        per_page: int = 100,
        league_tz: ZoneInfo = ET_ZONE,
        default_tip_hour: int = 19,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self.gateway = gateway
        self.batch_size = max(1, batch_size)
        self.recent_window_days = recent_window_days
        self.per_page = per_page
        self.league_tz = league_tz
        self.default_tip_hour = default_tip_hour
        self._now = now

    @classmethod
    def from_settings(
        cls,
        gateway: GameGateway,
        settings: Settings,
        *,
        now: Callable[[], datetime] = utc_now,
    ) -> StatBackfillReconciler:
        return cls(
            gateway,
            batch_size=settings.box_score_batch_size,
            recent_window_days=settings.recent_window_days,
            per_page=settings.per_page,
            league_tz=league_zone(settings.league_timezone),
            default_tip_hour=settings.default_tip_hour_local,
            now=now,
        )

    def needs_data(self, game: Game, stats_by_game: dict[int, GameStat], today: date) -> bool:
        if game.date is None or game.date >= today:
            return False
        return game.id not in stats_by_game or not game.has_score

    def is_recent(self, game: Game, today: date) -> bool:
        return game.date is not None and game.date >= today - timedelta(
            days=self.recent_window_days
        )

    def _normalize(self, raw: Any) -> Game | None:
        return normalize_game(raw, league_tz=self.league_tz, default_tip_hour=self.default_tip_hour)

    def _fetch_recent(
        self,
        player_id: int,
        game: Game,
        stats_by_game: dict[int, GameStat],
        result: BackfillResult,
    ) -> None:
        try:
            payload = self.gateway.get_game(game.id)
            raw_game = payload.get("data")
            if isinstance(raw_game, dict):
                if patch_scores(game, box_score_scores(raw_game)):
                    result.patched_game_ids.append(game.id)
                refreshed = self._normalize(raw_game)
                if refreshed is not None and refreshed.played:
                    game.played = True
            rows = list_stats(
                self.gateway,
                player_ids=[player_id],
                game_ids=[game.id],
                per_page=self.per_page,
            )
        except UpstreamError as exc:
            logger.warning("recent backfill for game %s failed: %s", game.id, exc)
            result.failed_game_ids.append(game.id)
            return
        for row in rows:
            stat = normalize_stat(row, game_id=game.id)
            if stat is None or stat.player_id not in (None, player_id):
                continue
            upsert_stat(stats_by_game, stat)

    def _fetch_batch(
        self,
        player_id: int,
        batch: list[Game],
        stats_by_game: dict[int, GameStat],
        result: BackfillResult,
    ) -> None:
        game_ids = [game.id for game in batch]
        logger.debug("fetching box scores for %d games: %s", len(game_ids), game_ids)
        try:
            payload = self.gateway.get_box_scores(game_ids=game_ids)
        except UpstreamError as exc:
            logger.warning("box score batch %s failed: %s", game_ids, exc)
            result.failed_game_ids.extend(game_ids)
            return
        by_id = {game.id: game for game in batch}
        box_scores = payload.get("data")
        if not isinstance(box_scores, list):
            return
        for box_score in box_scores:
            if not isinstance(box_score, dict):
                continue
            game_id = box_score_game_id(box_score)
            game = by_id.get(game_id) if game_id is not None else None
            if game is None:
                continue
            if patch_scores(game, box_score_scores(box_score)):
                result.patched_game_ids.append(game.id)
            row = find_box_score_player(box_score, player_id)
            if row is not None:
                upsert_stat(stats_by_game, stat_from_box_score_player(game.id, row))

    def reconcile(
        self,
        player_id: int,
        games: Iterable[Game],
        stats: Iterable[GameStat],
    ) -> BackfillResult:
        """Fill gaps in `games`/`stats` for one player.

        Inputs are not mutated; the result carries patched copies with
        `Game.stats` attached. Running it again on its own output is a no-op
        for games that are already complete.
        """
        today = calendar_today(self._now(), self.league_tz)
        working = [replace(game) for game in games]
        stats_by_game: dict[int, GameStat] = {}
        for stat in stats:
            if stat.player_id in (None, player_id):
                upsert_stat(stats_by_game, stat)
        result = BackfillResult(games=working, stats=[])

        gaps = [game for game in working if self.needs_data(game, stats_by_game, today)]
        recent = [game for game in gaps if self.is_recent(game, today)]
        older = [game for game in gaps if not self.is_recent(game, today)]
        if gaps:
            logger.info(
                "player %s: %d games need data (%d recent)", player_id, len(gaps), len(recent)
            )

        for game in recent:
            self._fetch_recent(player_id, game, stats_by_game, result)
        for batch in _batches(older, self.batch_size):
            self._fetch_batch(player_id, batch, stats_by_game, result)

        for game in working:
            game.needs_recent_check = self.is_recent(game, today) and self.needs_data(
                game, stats_by_game, today
            )
            game.attach_stats(stats_by_game.get(game.id))
        result.stats = [stats_by_game[game.id] for game in working if game.id in stats_by_game]
        return result

    def load_player_games(
        self, player_id: int, team_id: int, season: int
    ) -> tuple[list[Game], list[GameStat]]:
        """Fetch a team's season schedule and a player's stat rows, all pages."""
        try:
            game_rows = list_games(
                self.gateway, team_ids=[team_id], seasons=[season], per_page=self.per_page
            )
            stat_rows = list_stats(
                self.gateway, player_ids=[player_id], seasons=[season], per_page=self.per_page
            )
        except UpstreamError as exc:
            logger.warning("loading season %s for player %s failed: %s", season, player_id, exc)
            return [], []
        games = [game for game in map(self._normalize, game_rows) if game is not None]
        games.sort(key=lambda game: (game.date or date.min, game.id))
        stats = [stat for stat in map(normalize_stat, stat_rows) if stat is not None]
        return games, stats

    def backfill_player(self, player_id: int, team_id: int, season: int) -> BackfillResult:
        games, stats = self.load_player_games(player_id, team_id, season)
        return self.reconcile(player_id, games, stats)
