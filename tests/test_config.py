# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from mission_control.config import Settings

_VARS = (
    "MC_DATA_DIR",
    "MC_OFFLINE_CACHE_PATH",
    "MC_API_BASE_URL",
    "MC_SERVER_HOST",
    "MC_SERVER_PORT",
    "PORT",
    "MC_REQUEST_TIMEOUT_SECONDS",
    "MC_SAVE_DEBOUNCE_SECONDS",
    "MC_AUTOSAVE_INTERVAL_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = Settings.from_env()
    assert s.data_dir == Path(".local/mission_control")
    assert s.offline_cache_path == s.data_dir / "offline_cache.json"
    assert s.server_port == 8080
    assert s.api_base_url == "http://127.0.0.1:8080/api"
    assert s.request_timeout_seconds is None
    assert s.save_debounce_seconds == 1.0
    assert s.autosave_interval_seconds == 30.0


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MC_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("PORT", "9090")
    monkeypatch.setenv("MC_REQUEST_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("MC_SAVE_DEBOUNCE_SECONDS", "not-a-number")

    s = Settings.from_env()
    assert s.offline_cache_path == tmp_path / "offline_cache.json"
    assert s.server_port == 9090
    assert s.api_base_url == "http://127.0.0.1:9090/api"
    assert s.request_timeout_seconds == 2.5
    assert s.save_debounce_seconds == 1.0

    monkeypatch.setenv("MC_API_BASE_URL", "https://tasks.example.com/api/")
    assert Settings.from_env().api_base_url == "https://tasks.example.com/api"
