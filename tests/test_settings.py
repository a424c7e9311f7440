from pathlib import Path

import pytest

from yapsports.runtime_config import load_runtime_config, set_current_runtime_config
from yapsports.settings import Settings


def _clear_key_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("BALLDONTLIE_API_KEY", "YAPSPORTS_NBA_API_KEY", "API_KEY"):
        monkeypatch.delenv(name, raising=False)


def test_settings_load_with_balldontlie_key(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_key_env(monkeypatch)
    monkeypatch.setenv("BALLDONTLIE_API_KEY", "test-key")

    settings = Settings(_env_file=None)

    assert settings.nba_api_key == "test-key"
    assert settings.nba_api_base_url == "https://api.balldontlie.io/v1"
    assert settings.nba_api_timeout_s == 5.0
    assert settings.single_game_timeout_s == 3.0
    assert settings.live_games_ttl_s == 30.0
    assert settings.team_games_ttl_s == 60.0
    assert settings.single_game_ttl_s == 60.0
    assert settings.box_score_batch_size == 10
    assert settings.recent_window_days == 7
    assert settings.live_grace_minutes == 20
    assert settings.recent_window_hours == 3.0
    assert settings.settle_delay_s == 1.5
    assert settings.league_timezone == "America/New_York"


def test_settings_allows_missing_key(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_key_env(monkeypatch)

    settings = Settings(_env_file=None)
    assert settings.nba_api_key == ""


def test_settings_reads_prefixed_tunables(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_key_env(monkeypatch)
    monkeypatch.setenv("YAPSPORTS_LIVE_GRACE_MINUTES", "15")
    monkeypatch.setenv("YAPSPORTS_BOX_SCORE_BATCH_SIZE", "5")

    settings = Settings(_env_file=None)

    assert settings.live_grace_minutes == 15
    assert settings.box_score_batch_size == 5


def _write_config(path: Path, key_file: str) -> None:
    path.write_text(
        "\n".join(
            [
                "[nba_api]",
                f'key_files = ["{key_file}"]',
                "per_page = 25",
                "",
                "[resolver]",
                "live_grace_minutes = 30",
            ]
        )
        + "\n",
        encoding="utf-8",
    )


def test_settings_from_runtime_uses_key_file_fallback(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _clear_key_env(monkeypatch)
    config_path = tmp_path / "runtime.toml"
    _write_config(config_path, "BALLDONTLIE_API_KEY")
    (tmp_path / "BALLDONTLIE_API_KEY").write_text("file-key\n", encoding="utf-8")

    runtime_config = load_runtime_config(config_path)
    set_current_runtime_config(runtime_config)
    try:
        settings = Settings.from_runtime()
    finally:
        set_current_runtime_config(None)

    assert settings.nba_api_key == "file-key"
    assert settings.per_page == 25
    assert settings.live_grace_minutes == 30


def test_settings_from_runtime_accepts_assignment_style_key_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _clear_key_env(monkeypatch)
    nested = tmp_path / "nested"
    nested.mkdir(parents=True, exist_ok=True)
    config_path = nested / "runtime.toml"
    _write_config(config_path, "BALLDONTLIE_API_KEY.ignore")
    (nested / "BALLDONTLIE_API_KEY.ignore").write_text(
        'BALLDONTLIE_API_KEY="relative-key"\n', encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)

    runtime_config = load_runtime_config(config_path)
    set_current_runtime_config(runtime_config)
    try:
        settings = Settings.from_runtime()
    finally:
        set_current_runtime_config(None)

    assert settings.nba_api_key == "relative-key"


def test_settings_from_runtime_prefers_environment_key(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _clear_key_env(monkeypatch)
    monkeypatch.setenv("BALLDONTLIE_API_KEY", "env-key")
    config_path = tmp_path / "runtime.toml"
    _write_config(config_path, "BALLDONTLIE_API_KEY")
    (tmp_path / "BALLDONTLIE_API_KEY").write_text("file-key\n", encoding="utf-8")

    set_current_runtime_config(load_runtime_config(config_path))
    try:
        settings = Settings.from_runtime()
    finally:
        set_current_runtime_config(None)

    assert settings.nba_api_key == "env-key"
