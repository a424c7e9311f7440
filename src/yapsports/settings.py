"""Application settings for yapsports."""

import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from yapsports.runtime_config import current_runtime_config

_API_KEY_NAMES = {"BALLDONTLIE_API_KEY", "YAPSPORTS_NBA_API_KEY", "API_KEY"}


class Settings(BaseSettings):
    """Runtime settings for the NBA gateway and the game-state core."""

    model_config = SettingsConfigDict(
        env_prefix="YAPSPORTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    nba_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("BALLDONTLIE_API_KEY", "YAPSPORTS_NBA_API_KEY", "API_KEY"),
    )
    nba_api_base_url: str = "https://api.balldontlie.io/v1"
    nba_api_timeout_s: float = 5.0
    single_game_timeout_s: float = 3.0
    nba_api_max_retries: int = 3
    season: int = 2024
    per_page: int = 100
    live_games_ttl_s: float = 30.0
    team_games_ttl_s: float = 60.0
    single_game_ttl_s: float = 60.0
    live_grace_minutes: int = 20
    recent_window_hours: float = 3.0
    nominal_game_hours: float = 2.5
    overtime_hours: float = 0.25
    settle_delay_s: float = 1.5
    league_timezone: str = "America/New_York"
    default_tip_hour_local: int = 19
    box_score_batch_size: int = 10
    recent_window_days: int = 7

    @staticmethod
    def _parse_key_file(path: Path, *, allowed_names: set[str]) -> str:
        try:
            raw = path.read_text(encoding="utf-8").strip()
        except OSError:
            return ""
        if not raw:
            return ""
        first_line = raw.splitlines()[0].strip()
        if not first_line:
            return ""
        if "=" in first_line:
            key_name, value = first_line.split("=", 1)
            if key_name.strip().upper() not in allowed_names:
                return ""
            return value.strip().strip('"').strip("'")
        return first_line.strip().strip('"').strip("'")

    @classmethod
    def from_runtime(cls) -> "Settings":
        """Construct settings from runtime config + direct secret env/key-file fallback."""
        runtime = current_runtime_config()
        config_root = runtime.config_path.parent.resolve()

        resolved_key = (
            os.environ.get("BALLDONTLIE_API_KEY", "").strip()
            or os.environ.get("YAPSPORTS_NBA_API_KEY", "").strip()
        )
        if not resolved_key:
            for candidate in runtime.nba_api_key_files:
                candidate_path = Path(candidate).expanduser()
                path = (
                    candidate_path
                    if candidate_path.is_absolute()
                    else (config_root / candidate_path).resolve()
                )
                if not path.exists() or not path.is_file():
                    continue
                parsed = cls._parse_key_file(path, allowed_names=_API_KEY_NAMES)
                if parsed:
                    resolved_key = parsed
                    break

        return cls(
            nba_api_key=resolved_key,
            nba_api_base_url=runtime.nba_api_base_url,
            nba_api_timeout_s=runtime.nba_api_timeout_s,
            single_game_timeout_s=runtime.single_game_timeout_s,
            nba_api_max_retries=runtime.nba_api_max_retries,
            season=runtime.season,
            per_page=runtime.per_page,
            live_games_ttl_s=runtime.live_games_ttl_s,
            team_games_ttl_s=runtime.team_games_ttl_s,
            single_game_ttl_s=runtime.single_game_ttl_s,
            live_grace_minutes=runtime.live_grace_minutes,
            recent_window_hours=runtime.recent_window_hours,
            nominal_game_hours=runtime.nominal_game_hours,
            overtime_hours=runtime.overtime_hours,
            settle_delay_s=runtime.settle_delay_s,
            league_timezone=runtime.league_timezone,
            default_tip_hour_local=runtime.default_tip_hour_local,
            box_score_batch_size=runtime.box_score_batch_size,
            recent_window_days=runtime.recent_window_days,
        )
