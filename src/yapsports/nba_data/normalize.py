"""Normalization of upstream game, stat and box-score payloads."""

from __future__ import annotations

import re
from datetime import datetime, time, tzinfo
from typing import Any

from yapsports.nba_data.display import format_tip_time
from yapsports.nba_data.models import Game, GameStat, ProgressStatus, SeasonAverages, TeamRef
from yapsports.time_utils import ET_ZONE, has_time_component, parse_game_date, parse_iso_z
from yapsports.util.parsing import count, ratio, safe_float, safe_int

_LIVE_STATUS_RE = re.compile(
    r"\b(live|in progress|halftime|half|qtr|quarter|ot|\d(st|nd|rd|th))\b",
    re.IGNORECASE,
)
_CLOCK_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([ap])\.?m\.?", re.IGNORECASE)


def _team(raw: Any) -> TeamRef:
    if not isinstance(raw, dict):
        return TeamRef(id=0)
    return TeamRef(
        id=safe_int(raw.get("id")) or 0,
        abbreviation=str(raw.get("abbreviation") or ""),
        full_name=str(raw.get("full_name") or ""),
    )


def _clock_time(text: str) -> time | None:
    match = _CLOCK_TIME_RE.match(text)
    if not match:
        return None
    hour = int(match.group(1)) % 12
    minute = int(match.group(2))
    if match.group(3).lower() == "p":
        hour += 12
    if minute > 59:
        return None
    return time(hour=hour, minute=minute)


def split_status(text: str) -> tuple[ProgressStatus, str | None, datetime | None]:
    """Split the overloaded upstream status into progress and scheduled start.

    Returns `(progress, scheduled_display, scheduled_start)`. A clock-only
    scheduled string yields a display value but no instant; the caller anchors
    it to the game date.
    """
    cleaned = text.strip()
    lowered = cleaned.lower()
    if not cleaned:
        return ProgressStatus.SCHEDULED, None, None
    if "final" in lowered or lowered == "finished":
        return ProgressStatus.FINAL, None, None
    start = parse_iso_z(cleaned) if has_time_component(cleaned) else None
    if start is not None:
        return ProgressStatus.SCHEDULED, format_tip_time(start), start
    if _clock_time(cleaned) is not None:
        return ProgressStatus.SCHEDULED, cleaned, None
    if _LIVE_STATUS_RE.search(cleaned):
        return ProgressStatus.LIVE, None, None
    return ProgressStatus.SCHEDULED, None, None


def _scheduled_start(
    raw: dict[str, Any],
    *,
    status_text: str,
    status_start: datetime | None,
    league_tz: tzinfo,
    default_tip_hour: int,
) -> datetime | None:
    if status_start is not None:
        return status_start
    raw_datetime = raw.get("datetime")
    if isinstance(raw_datetime, str) and raw_datetime.strip():
        parsed = parse_iso_z(raw_datetime)
        if parsed is not None:
            return parsed
    raw_date = raw.get("date")
    if has_time_component(raw_date):
        parsed = parse_iso_z(str(raw_date))
        if parsed is not None and (parsed.hour, parsed.minute) != (0, 0):
            return parsed
    game_day = parse_game_date(raw_date)
    if game_day is None:
        return None
    tip = _clock_time(status_text) or time(hour=max(0, min(default_tip_hour, 23)))
    return datetime.combine(game_day, tip, tzinfo=league_tz)


def normalize_game(
    raw: Any,
    *,
    league_tz: tzinfo = ET_ZONE,
    default_tip_hour: int = 19,
) -> Game | None:
    """Build a `Game` from an upstream row, or None when it has no usable id."""
    if not isinstance(raw, dict):
        return None
    game_id = safe_int(raw.get("id"))
    if game_id is None:
        return None
    status_text = str(raw.get("status") or "")
    progress, display, status_start = split_status(status_text)
    start = _scheduled_start(
        raw,
        status_text=status_text,
        status_start=status_start,
        league_tz=league_tz,
        default_tip_hour=default_tip_hour,
    )
    if display is None and progress == ProgressStatus.SCHEDULED and start is not None:
        display = format_tip_time(start)
    stats_payload = raw.get("stats")
    return Game(
        id=game_id,
        date=parse_game_date(raw.get("date")),
        home_team=_team(raw.get("home_team")),
        visitor_team=_team(raw.get("visitor_team")),
        home_team_score=count(raw.get("home_team_score")),
        visitor_team_score=count(raw.get("visitor_team_score")),
        status_text=status_text,
        progress_status=progress,
        scheduled_time_display=display,
        scheduled_start=start,
        period=count(raw.get("period")),
        time=str(raw.get("time") or "").strip(),
        played=bool(raw.get("played", False)),
        season=safe_int(raw.get("season")),
        postseason=bool(raw.get("postseason", False)),
        raw_date=str(raw.get("date") or ""),
        stats=normalize_stat(stats_payload, game_id=game_id) if stats_payload else None,
    )


def _stat_game_id(raw: dict[str, Any]) -> int | None:
    game = raw.get("game")
    if isinstance(game, dict):
        return safe_int(game.get("id"))
    return safe_int(raw.get("game_id"))


def _stat_player_id(raw: dict[str, Any]) -> int | None:
    player = raw.get("player")
    if isinstance(player, dict):
        return safe_int(player.get("id"))
    return safe_int(raw.get("player_id"))


def _build_stat(game_id: int, player_id: int | None, raw: dict[str, Any]) -> GameStat:
    fgm, fga = count(raw.get("fgm")), count(raw.get("fga"))
    fg3m, fg3a = count(raw.get("fg3m")), count(raw.get("fg3a"))
    ftm, fta = count(raw.get("ftm")), count(raw.get("fta"))
    return GameStat(
        game_id=game_id,
        player_id=player_id,
        minutes=str(raw.get("min") or "0:00"),
        points=count(raw.get("pts")),
        offensive_rebounds=count(raw.get("oreb")),
        defensive_rebounds=count(raw.get("dreb")),
        rebounds=count(raw.get("reb")),
        assists=count(raw.get("ast")),
        steals=count(raw.get("stl")),
        blocks=count(raw.get("blk")),
        turnovers=count(raw.get("turnover")),
        personal_fouls=count(raw.get("pf")),
        field_goals_made=fgm,
        field_goals_attempted=fga,
        field_goal_pct=ratio(fgm, fga),
        three_pointers_made=fg3m,
        three_pointers_attempted=fg3a,
        three_point_pct=ratio(fg3m, fg3a),
        free_throws_made=ftm,
        free_throws_attempted=fta,
        free_throw_pct=ratio(ftm, fta),
    )


def normalize_stat(raw: Any, *, game_id: int | None = None) -> GameStat | None:
    """Build a `GameStat` from an upstream stats row."""
    if not isinstance(raw, dict):
        return None
    resolved_game_id = _stat_game_id(raw) if game_id is None else game_id
    if resolved_game_id is None:
        return None
    return _build_stat(resolved_game_id, _stat_player_id(raw), raw)


def stat_from_box_score_player(game_id: int, raw: dict[str, Any]) -> GameStat:
    """Synthesize a `GameStat` from one box-score roster row."""
    return _build_stat(game_id, _stat_player_id(raw), raw)


def find_box_score_player(box_score: dict[str, Any], player_id: int) -> dict[str, Any] | None:
    """Locate a player by numeric id in either roster of a box score."""
    for side in ("home_team", "away_team", "visitor_team"):
        team_payload = box_score.get(side)
        if not isinstance(team_payload, dict):
            continue
        players = team_payload.get("players")
        if not isinstance(players, list):
            continue
        for row in players:
            if isinstance(row, dict) and _stat_player_id(row) == player_id:
                return row
    return None


def box_score_game_id(box_score: dict[str, Any]) -> int | None:
    game = box_score.get("game")
    if isinstance(game, dict):
        return safe_int(game.get("id"))
    game_id = safe_int(box_score.get("game_id"))
    return game_id if game_id is not None else safe_int(box_score.get("id"))


def box_score_scores(box_score: dict[str, Any]) -> tuple[int, int] | None:
    """Return `(home, visitor)` scores when the box score carries both."""
    home = box_score.get("home_team_score")
    visitor = box_score.get("visitor_team_score")
    if home is None or visitor is None:
        game = box_score.get("game")
        if isinstance(game, dict):
            home = game.get("home_team_score", home)
            visitor = game.get("visitor_team_score", visitor)
    if home is None or visitor is None:
        return None
    return count(home), count(visitor)


def normalize_season_averages(raw: Any) -> SeasonAverages | None:
    if not isinstance(raw, dict):
        return None
    player_id = safe_int(raw.get("player_id"))
    season = safe_int(raw.get("season"))
    if player_id is None or season is None:
        return None
    return SeasonAverages(
        player_id=player_id,
        season=season,
        games_played=count(raw.get("games_played")),
        pts=safe_float(raw.get("pts")) or 0.0,
        reb=safe_float(raw.get("reb")) or 0.0,
        ast=safe_float(raw.get("ast")) or 0.0,
        stl=safe_float(raw.get("stl")) or 0.0,
        blk=safe_float(raw.get("blk")) or 0.0,
        fg_pct=safe_float(raw.get("fg_pct")) or 0.0,
        fg3_pct=safe_float(raw.get("fg3_pct")) or 0.0,
        ft_pct=safe_float(raw.get("ft_pct")) or 0.0,
    )
