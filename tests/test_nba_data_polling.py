from __future__ import annotations

from datetime import datetime

import pytest

from yapsports.nba_data.polling import PollSchedule
from yapsports.nba_data.selection import ResolvedState
from yapsports.time_utils import ET_ZONE


class Clock:
    def __init__(self) -> None:
        self.value = 0.0

    def __call__(self) -> float:
        return self.value


def _schedule(clock: Clock, hour: int) -> PollSchedule:
    now = datetime(2025, 1, 13, hour, 0, tzinfo=ET_ZONE)
    return PollSchedule(league_tz=ET_ZONE, clock=clock, now=lambda: now)


@pytest.mark.parametrize(
    ("state", "hour", "expected"),
    [
        (ResolvedState.LIVE, 14, 45.0),
        (ResolvedState.LIVE, 20, 45.0),
        (ResolvedState.UPCOMING, 19, 90.0),
        (ResolvedState.RECENT, 22, 90.0),
        (ResolvedState.UPCOMING, 23, 180.0),
        (ResolvedState.NONE, 10, 180.0),
    ],
)
def test_interval_by_state_and_hour(state: ResolvedState, hour: int, expected: float) -> None:
    assert _schedule(Clock(), hour).interval_s(state) == expected


def test_is_due_after_interval() -> None:
    clock = Clock()
    schedule = _schedule(clock, 14)

    assert schedule.is_due(ResolvedState.LIVE)
    schedule.mark_ran()
    clock.value = 44
    assert not schedule.is_due(ResolvedState.LIVE)
    clock.value = 45
    assert schedule.is_due(ResolvedState.LIVE)
    assert not schedule.is_due(ResolvedState.UPCOMING)


def test_hidden_view_suspends_and_resume_forces_recompute() -> None:
    clock = Clock()
    schedule = _schedule(clock, 14)
    schedule.mark_ran()

    assert not schedule.set_visible(False)
    clock.value = 500
    assert not schedule.is_due(ResolvedState.NONE)

    assert schedule.set_visible(True)
    assert schedule.is_due(ResolvedState.NONE)


def test_quick_resume_does_not_force_recompute() -> None:
    clock = Clock()
    schedule = _schedule(clock, 14)
    schedule.mark_ran()
    schedule.set_visible(False)
    clock.value = 30

    assert not schedule.set_visible(True)


def test_stop_cancels_polling() -> None:
    clock = Clock()
    schedule = _schedule(clock, 14)
    schedule.stop()

    assert not schedule.is_due(ResolvedState.LIVE)
    schedule.set_visible(False)
    assert not schedule.set_visible(True)
