"""Short-TTL in-memory cache in front of the upstream game endpoints."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Generic, TypeVar
from zoneinfo import ZoneInfo

from yapsports.nba_data.client import GameGateway, list_games
from yapsports.nba_data.errors import UpstreamError
from yapsports.nba_data.models import Game
from yapsports.nba_data.normalize import normalize_game
from yapsports.settings import Settings
from yapsports.time_utils import ET_ZONE, league_zone, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    data: T
    fetched_at: float

    def age(self, now: float) -> float:
        return now - self.fetched_at


class GameDataCache:
    """Shared game cache keyed by live slate, team and single game id.

    Every lookup fails soft: upstream errors fall back to the best cached value
    and otherwise to an empty result. Two near-simultaneous misses may both
    reach upstream; the gateway is read-only so that is harmless.
    """

    def __init__(
        self,
        gateway: GameGateway,
        *,
        live_ttl_s: float = 30.0,
        team_ttl_s: float = 60.0,
        single_ttl_s: float = 60.0,
        single_game_timeout_s: float = 3.0,
        per_page: int = 100,
        league_tz: ZoneInfo = ET_ZONE,
        default_tip_hour: int = 19,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self.gateway = gateway
        self.live_ttl_s = live_ttl_s
        self.team_ttl_s = team_ttl_s
        self.single_ttl_s = single_ttl_s
        self.single_game_timeout_s = single_game_timeout_s
        self.per_page = per_page
        self.league_tz = league_tz
        self.default_tip_hour = default_tip_hour
        self._clock = clock
        self._now = now
        self._live: CacheEntry[list[Game]] | None = None
        self._teams: dict[int, CacheEntry[list[Game]]] = {}
        self._games: dict[int, CacheEntry[Game]] = {}

    @classmethod
    def from_settings(
        cls, gateway: GameGateway, settings: Settings, **kwargs: Any
    ) -> GameDataCache:
        return cls(
            gateway,
            live_ttl_s=settings.live_games_ttl_s,
            team_ttl_s=settings.team_games_ttl_s,
            single_ttl_s=settings.single_game_ttl_s,
            single_game_timeout_s=settings.single_game_timeout_s,
            per_page=settings.per_page,
            league_tz=league_zone(settings.league_timezone),
            default_tip_hour=settings.default_tip_hour_local,
            **kwargs,
        )

    def _normalize(self, raw: Any) -> Game | None:
        return normalize_game(raw, league_tz=self.league_tz, default_tip_hour=self.default_tip_hour)

    def _normalize_rows(self, rows: list[dict[str, Any]]) -> list[Game]:
        games = [self._normalize(row) for row in rows]
        return [game for game in games if game is not None]

    def _fetch_slate(self) -> list[Game]:
        slate_day = self._now().astimezone(self.league_tz).date()
        for day in (slate_day, slate_day + timedelta(days=1)):
            rows = list_games(self.gateway, dates=[day.isoformat()], per_page=self.per_page)
            if rows:
                return self._normalize_rows(rows)
        return []

    def get_live_games(self, force_refresh: bool = False) -> list[Game]:
        """Games on the current slate (or the next one when today is empty)."""
        now = self._clock()
        cached = self._live
        if not force_refresh and cached is not None and cached.age(now) < self.live_ttl_s:
            return cached.data
        try:
            games = self._fetch_slate()
        except UpstreamError as exc:
            if cached is not None:
                logger.warning("live games fetch failed, serving stale cache: %s", exc)
                return cached.data
            logger.warning("live games fetch failed with no cache: %s", exc)
            return []
        self._live = CacheEntry(data=games, fetched_at=now)
        return games

    def get_team_games(self, team_id: int) -> list[Game]:
        """Slice of the live slate involving one team."""
        if not team_id:
            return []
        now = self._clock()
        cached = self._teams.get(team_id)
        if cached is not None and cached.age(now) < self.team_ttl_s:
            return cached.data
        team_games = [game for game in self.get_live_games() if game.involves(team_id)]
        if team_games:
            self._teams[team_id] = CacheEntry(data=team_games, fetched_at=now)
        return team_games

    def get_game_by_id(self, game_id: int, *, force_refresh: bool = False) -> Game | None:
        """Single game from the per-id cache, the live slate, or one upstream call.

        `force_refresh` skips both caches and goes straight upstream, falling
        back to whatever is cached when that call fails.
        """
        if not game_id:
            return None
        now = self._clock()
        cached = self._games.get(game_id)
        if not force_refresh:
            if cached is not None and cached.age(now) < self.single_ttl_s:
                return cached.data
            live = self._live
            if live is not None:
                for game in live.data:
                    if game.id == game_id:
                        self._games[game_id] = CacheEntry(data=game, fetched_at=now)
                        return game
        try:
            payload = self.gateway.get_game(game_id, timeout_s=self.single_game_timeout_s)
        except UpstreamError as exc:
            logger.warning("game %s fetch failed: %s", game_id, exc)
            return cached.data if cached is not None else None
        game = self._normalize(payload.get("data"))
        if game is None:
            return cached.data if cached is not None else None
        self.store_game(game)
        return game

    def store_game(self, game: Game) -> None:
        """Record a directly fetched game so later lookups see the fresher copy."""
        now = self._clock()
        self._games[game.id] = CacheEntry(data=game, fetched_at=now)
        live = self._live
        if live is not None and any(item.id == game.id for item in live.data):
            patched = [game if item.id == game.id else item for item in live.data]
            self._live = CacheEntry(data=patched, fetched_at=live.fetched_at)
