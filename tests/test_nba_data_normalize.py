from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from yapsports.nba_data.models import ProgressStatus
from yapsports.nba_data.normalize import (
    box_score_game_id,
    box_score_scores,
    find_box_score_player,
    normalize_game,
    normalize_season_averages,
    normalize_stat,
    split_status,
    stat_from_box_score_player,
)
from yapsports.time_utils import ET_ZONE


def _raw_game(**overrides) -> dict:
    raw = {
        "id": 101,
        "date": "2025-01-13",
        "season": 2024,
        "status": "7:00 pm ET",
        "period": 0,
        "time": "",
        "postseason": False,
        "home_team_score": 0,
        "visitor_team_score": 0,
        "home_team": {"id": 14, "abbreviation": "LAL", "full_name": "Los Angeles Lakers"},
        "visitor_team": {"id": 2, "abbreviation": "BOS", "full_name": "Boston Celtics"},
    }
    raw.update(overrides)
    return raw


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        ("Final", ProgressStatus.FINAL),
        ("Final/OT", ProgressStatus.FINAL),
        ("finished", ProgressStatus.FINAL),
        ("2nd Qtr", ProgressStatus.LIVE),
        ("Halftime", ProgressStatus.LIVE),
        ("In Progress", ProgressStatus.LIVE),
        ("OT", ProgressStatus.LIVE),
        ("7:00 pm ET", ProgressStatus.SCHEDULED),
        ("2025-01-14T00:30:00Z", ProgressStatus.SCHEDULED),
        ("", ProgressStatus.SCHEDULED),
        ("Postponed", ProgressStatus.SCHEDULED),
    ],
)
def test_split_status_progress(status: str, expected: ProgressStatus) -> None:
    progress, _, _ = split_status(status)
    assert progress == expected


def test_split_status_keeps_scheduled_display() -> None:
    _, display, start = split_status("2025-01-14T00:30:00Z")
    assert display == "7:30 PM ET"
    assert start == datetime(2025, 1, 14, 0, 30, tzinfo=UTC)

    _, display, start = split_status("7:00 pm ET")
    assert display == "7:00 pm ET"
    assert start is None

    _, display, _ = split_status("Final")
    assert display is None


def test_normalize_game_splits_clock_status_into_start() -> None:
    game = normalize_game(_raw_game())

    assert game is not None
    assert game.date == date(2025, 1, 13)
    assert game.progress_status == ProgressStatus.SCHEDULED
    assert game.scheduled_time_display == "7:00 pm ET"
    assert game.scheduled_start == datetime(2025, 1, 13, 19, 0, tzinfo=ET_ZONE)
    assert game.home_team.abbreviation == "LAL"
    assert game.status_text == "7:00 pm ET"
    assert game.stats is not None and game.stats.points == 0


def test_normalize_game_iso_midnight_date_uses_default_tip() -> None:
    game = normalize_game(_raw_game(date="2025-01-13T00:00:00.000Z", status="Final"))

    assert game is not None
    assert game.date == date(2025, 1, 13)
    assert game.progress_status == ProgressStatus.FINAL
    assert game.scheduled_start == datetime(2025, 1, 13, 19, 0, tzinfo=ET_ZONE)
    assert game.scheduled_time_display is None


def test_normalize_game_prefers_datetime_field() -> None:
    game = normalize_game(_raw_game(status="Final", datetime="2025-01-14T03:00:00Z"))

    assert game is not None
    assert game.scheduled_start == datetime(2025, 1, 14, 3, 0, tzinfo=UTC)


def test_normalize_game_tolerates_bad_shapes() -> None:
    assert normalize_game(None) is None
    assert normalize_game({"status": "Final"}) is None

    game = normalize_game(_raw_game(date="garbage", home_team=None, home_team_score="n/a"))
    assert game is not None
    assert game.date is None
    assert game.scheduled_start is None
    assert game.home_team.id == 0
    assert game.home_team_score == 0


def test_normalize_stat_reads_nested_ids_and_percentages() -> None:
    stat = normalize_stat(
        {
            "game": {"id": 101},
            "player": {"id": 237},
            "min": "36:12",
            "pts": 30,
            "reb": 10,
            "ast": 5,
            "fgm": 11,
            "fga": 20,
            "fg3m": 4,
            "fg3a": 0,
            "ftm": 4,
            "fta": 4,
            "turnover": 3,
        }
    )

    assert stat is not None
    assert stat.game_id == 101
    assert stat.player_id == 237
    assert stat.minutes == "36:12"
    assert stat.field_goal_pct == pytest.approx(0.55)
    assert stat.three_point_pct == 0.0
    assert stat.free_throw_pct == 1.0
    assert stat.turnovers == 3


def test_normalize_stat_requires_game_id() -> None:
    assert normalize_stat({"pts": 10}) is None
    assert normalize_stat({"pts": 10}, game_id=5) is not None


def test_box_score_helpers_find_player_on_either_side() -> None:
    box_score = {
        "game": {"id": 101, "home_team_score": 110, "visitor_team_score": 99},
        "home_team": {"players": [{"player": {"id": 1}, "pts": 12}]},
        "away_team": {"players": [{"player": {"id": 237}, "pts": 28, "fga": 0}]},
    }

    assert box_score_game_id(box_score) == 101
    assert box_score_scores(box_score) == (110, 99)
    row = find_box_score_player(box_score, 237)
    assert row is not None
    stat = stat_from_box_score_player(101, row)
    assert stat.points == 28
    assert stat.player_id == 237
    assert stat.field_goal_pct == 0.0
    assert find_box_score_player(box_score, 999) is None


def test_box_score_scores_absent_when_missing() -> None:
    assert box_score_scores({"game": {"id": 1}}) is None
    assert box_score_scores({"home_team_score": 0, "visitor_team_score": 0}) == (0, 0)


def test_normalize_season_averages() -> None:
    averages = normalize_season_averages(
        {"player_id": 237, "season": 2024, "games_played": 40, "pts": "25.4"}
    )

    assert averages is not None
    assert averages.pts == 25.4
    assert averages.reb == 0.0
    assert normalize_season_averages({"season": 2024}) is None
