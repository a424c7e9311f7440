from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from yapsports.nba_data.game_state import (
    GamePhase,
    classify_game,
    estimated_end_time,
    is_finished,
    is_live,
    is_upcoming,
    start_time,
    upstream_flags_live,
)
from yapsports.nba_data.live_policy import LivePromotionPolicy
from yapsports.nba_data.models import Game, ProgressStatus, TeamRef

NOW = datetime(2025, 1, 13, 23, 0, tzinfo=UTC)
TODAY = date(2025, 1, 13)
YESTERDAY = TODAY - timedelta(days=1)


def _game(**overrides) -> Game:
    fields = {
        "id": 1,
        "date": TODAY,
        "home_team": TeamRef(id=14, abbreviation="LAL"),
        "visitor_team": TeamRef(id=2, abbreviation="BOS"),
        "scheduled_start": datetime(2025, 1, 13, 22, 0, tzinfo=UTC),
    }
    fields.update(overrides)
    return Game(**fields)


CASES = [
    ("future-not-started", _game(date=TODAY + timedelta(days=2)), GamePhase.UPCOMING),
    (
        "period-set-but-final",
        _game(period=2, progress_status=ProgressStatus.FINAL),
        GamePhase.FINISHED,
    ),
    ("today-past-tip-no-evidence", _game(), GamePhase.UPCOMING),
    ("today-past-tip-scored", _game(home_team_score=12), GamePhase.LIVE),
    ("today-past-tip-played-flag", _game(played=True), GamePhase.LIVE),
    ("upstream-period", _game(period=3, home_team_score=70), GamePhase.LIVE),
    ("upstream-live-status", _game(progress_status=ProgressStatus.LIVE), GamePhase.LIVE),
    ("past-date-scored", _game(date=YESTERDAY, home_team_score=99), GamePhase.FINISHED),
    (
        "played-and-scored",
        _game(played=True, home_team_score=101, visitor_team_score=99, period=4),
        GamePhase.FINISHED,
    ),
    ("past-date-unscored", _game(date=YESTERDAY), GamePhase.PENDING),
    (
        "today-before-tip",
        _game(scheduled_start=datetime(2025, 1, 14, 0, 30, tzinfo=UTC)),
        GamePhase.UPCOMING,
    ),
    ("undated", _game(date=None, scheduled_start=None), GamePhase.PENDING),
]


@pytest.mark.parametrize(("label", "game", "expected"), CASES, ids=[case[0] for case in CASES])
def test_classify_game_single_phase(label: str, game: Game, expected: GamePhase) -> None:
    flags = [is_finished(game, NOW), is_live(game, NOW), is_upcoming(game, NOW)]

    assert sum(flags) <= 1
    assert classify_game(game, NOW) == expected
    assert any(flags) == (expected != GamePhase.PENDING)


def test_upstream_flags_live_ignores_final_games() -> None:
    assert upstream_flags_live(_game(period=1))
    assert not upstream_flags_live(_game(period=4, progress_status=ProgressStatus.FINAL))
    assert not upstream_flags_live(_game())


def test_start_time_falls_back_to_midnight_utc() -> None:
    game = _game(scheduled_start=None)

    assert start_time(game) == datetime(2025, 1, 13, tzinfo=UTC)
    assert start_time(_game(date=None, scheduled_start=None)) is None


def test_estimated_end_time_adds_overtime_increments() -> None:
    start = datetime(2025, 1, 13, 0, 0, tzinfo=UTC)

    regulation = estimated_end_time(_game(scheduled_start=start, period=4))
    double_ot = estimated_end_time(_game(scheduled_start=start, period=6))

    assert regulation == start + timedelta(hours=2.5)
    assert double_ot == start + timedelta(hours=3)


def test_live_policy_requires_grace_and_evidence() -> None:
    policy = LivePromotionPolicy.from_minutes(20)
    start = datetime(2025, 1, 13, 22, 0, tzinfo=UTC)

    assert not policy.should_promote(_game(scheduled_start=None, played=True), NOW)
    assert not policy.should_promote(
        _game(scheduled_start=start, played=True), start + timedelta(minutes=19)
    )
    assert not policy.should_promote(_game(scheduled_start=start), start + timedelta(minutes=25))
    assert policy.should_promote(
        _game(scheduled_start=start, home_team_score=2), start + timedelta(minutes=20)
    )


def test_live_policy_evidence_is_pluggable() -> None:
    policy = LivePromotionPolicy(grace=timedelta(0), evidence=lambda game: True)

    assert policy.should_promote(_game(), NOW)
