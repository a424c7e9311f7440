"""Runtime configuration loader (config-first, explicit overrides)."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from yapsports.util.parsing import safe_float, safe_int

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "runtime.toml"
DEFAULT_LOCAL_OVERRIDE_PATH = Path(__file__).resolve().parents[2] / "config" / "runtime.local.toml"


@dataclass(frozen=True)
class RuntimeConfig:
    """Materialized runtime configuration."""

    config_path: Path
    nba_api_base_url: str
    nba_api_timeout_s: float
    single_game_timeout_s: float
    nba_api_max_retries: int
    nba_api_key_files: tuple[str, ...]
    season: int
    per_page: int
    live_games_ttl_s: float
    team_games_ttl_s: float
    single_game_ttl_s: float
    live_grace_minutes: int
    recent_window_hours: float
    nominal_game_hours: float
    overtime_hours: float
    settle_delay_s: float
    league_timezone: str
    default_tip_hour_local: int
    box_score_batch_size: int
    recent_window_days: int


_CURRENT_RUNTIME_CONFIG: RuntimeConfig | None = None


def set_current_runtime_config(config: RuntimeConfig | None) -> None:
    global _CURRENT_RUNTIME_CONFIG
    _CURRENT_RUNTIME_CONFIG = config


def current_runtime_config() -> RuntimeConfig:
    config = _CURRENT_RUNTIME_CONFIG
    if config is not None:
        return config
    loaded = load_runtime_config()
    set_current_runtime_config(loaded)
    return loaded


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in overlay.items():
        existing = out.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            out[key] = _deep_merge(existing, value)
        else:
            out[key] = value
    return out


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        payload = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RuntimeError(f"failed reading runtime config: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise RuntimeError(f"invalid runtime config TOML: {path}") from exc
    if not isinstance(payload, dict):
        raise RuntimeError(f"runtime config root must be a table: {path}")
    return payload


def _as_table(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise RuntimeError(f"runtime config section [{key}] must be a table")
    return value


def _as_str(value: Any, *, default: str) -> str:
    text = value.strip() if isinstance(value, str) else ""
    return text or default


def _as_int(value: Any, *, default: int) -> int:
    parsed = safe_int(value)
    return default if parsed is None else parsed


def _as_float(value: Any, *, default: float) -> float:
    parsed = safe_float(value)
    return default if parsed is None else parsed


def _as_names(values: Any, *, default: tuple[str, ...]) -> tuple[str, ...]:
    """Key-file names from a TOML list or a comma-separated string."""
    if isinstance(values, str):
        values = values.split(",")
    if not isinstance(values, list):
        return default
    names = tuple(name for name in (str(value).strip() for value in values) if name)
    return names or default


def load_runtime_config(config_path: Path | None = None) -> RuntimeConfig:
    """Load runtime config from `config/runtime.toml` plus optional local override."""
    source = (config_path or DEFAULT_CONFIG_PATH).expanduser().resolve()
    if not source.exists():
        raise RuntimeError(f"runtime config file not found: {source}")

    payload = _read_toml(source)
    if source == DEFAULT_CONFIG_PATH and DEFAULT_LOCAL_OVERRIDE_PATH.exists():
        payload = _deep_merge(payload, _read_toml(DEFAULT_LOCAL_OVERRIDE_PATH))

    nba_api = _as_table(payload, "nba_api")
    cache = _as_table(payload, "cache")
    resolver = _as_table(payload, "resolver")
    backfill = _as_table(payload, "backfill")

    return RuntimeConfig(
        config_path=source,
        nba_api_base_url=_as_str(
            nba_api.get("base_url"),
            default="https://api.balldontlie.io/v1",
        ),
        nba_api_timeout_s=_as_float(nba_api.get("timeout_s"), default=5.0),
        single_game_timeout_s=_as_float(nba_api.get("single_game_timeout_s"), default=3.0),
        nba_api_max_retries=_as_int(nba_api.get("max_retries"), default=3),
        nba_api_key_files=_as_names(
            nba_api.get("key_files"),
            default=("BALLDONTLIE_API_KEY.ignore", "BALLDONTLIE_API_KEY"),
        ),
        season=_as_int(nba_api.get("season"), default=2024),
        per_page=_as_int(nba_api.get("per_page"), default=100),
        live_games_ttl_s=_as_float(cache.get("live_games_ttl_s"), default=30.0),
        team_games_ttl_s=_as_float(cache.get("team_games_ttl_s"), default=60.0),
        single_game_ttl_s=_as_float(cache.get("single_game_ttl_s"), default=60.0),
        live_grace_minutes=_as_int(resolver.get("live_grace_minutes"), default=20),
        recent_window_hours=_as_float(resolver.get("recent_window_hours"), default=3.0),
        nominal_game_hours=_as_float(resolver.get("nominal_game_hours"), default=2.5),
        overtime_hours=_as_float(resolver.get("overtime_hours"), default=0.25),
        settle_delay_s=_as_float(resolver.get("settle_delay_s"), default=1.5),
        league_timezone=_as_str(resolver.get("league_timezone"), default="America/New_York"),
        default_tip_hour_local=_as_int(resolver.get("default_tip_hour_local"), default=19),
        box_score_batch_size=_as_int(backfill.get("box_score_batch_size"), default=10),
        recent_window_days=_as_int(backfill.get("recent_window_days"), default=7),
    )
