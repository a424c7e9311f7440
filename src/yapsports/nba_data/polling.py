"""Recompute cadence for game-status consumers."""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime
from zoneinfo import ZoneInfo

from yapsports.nba_data.selection import ResolvedState
from yapsports.time_utils import ET_ZONE, utc_now

LIVE_INTERVAL_S = 45.0
PRIME_TIME_INTERVAL_S = 90.0
IDLE_INTERVAL_S = 180.0
RESUME_AFTER_S = 60.0
PRIME_TIME_START_HOUR = 19
PRIME_TIME_END_HOUR = 23


class PollSchedule:
    """Decide when a mounted consumer should re-resolve its game."""

    def __init__(
        self,
        *,
        league_tz: ZoneInfo = ET_ZONE,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self.league_tz = league_tz
        self._clock = clock
        self._now = now
        self._last_run: float | None = None
        self._visible = True
        self._active = True

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def active(self) -> bool:
        return self._active

    def is_prime_time(self) -> bool:
        local_hour = self._now().astimezone(self.league_tz).hour
        return PRIME_TIME_START_HOUR <= local_hour < PRIME_TIME_END_HOUR

    def interval_s(self, state: ResolvedState) -> float:
        if state == ResolvedState.LIVE:
            return LIVE_INTERVAL_S
        if self.is_prime_time():
            return PRIME_TIME_INTERVAL_S
        return IDLE_INTERVAL_S

    def is_due(self, state: ResolvedState) -> bool:
        if not self._active or not self._visible:
            return False
        if self._last_run is None:
            return True
        return self._clock() - self._last_run >= self.interval_s(state)

    def mark_ran(self) -> None:
        self._last_run = self._clock()

    def set_visible(self, visible: bool) -> bool:
        """Track view visibility; True when regaining it calls for an immediate recompute."""
        was_visible = self._visible
        self._visible = visible
        if not visible or was_visible or not self._active:
            return False
        if self._last_run is None:
            return True
        return self._clock() - self._last_run > RESUME_AFTER_S

    def stop(self) -> None:
        self._active = False
