# src/mission_control/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing is required at import time; every value has a local default.
- Components receive settings injected; get_settings() is only for the entrypoints.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "MC"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# A local .env never overrides variables already set in the environment.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    offline_cache_path: Path
    export_dir: Path

    # ---- Remote store (client side) ----
    api_base_url: str
    # None keeps the httpx client default.
    request_timeout_seconds: Optional[float]

    # ---- Persistence cadence ----
    save_debounce_seconds: float
    autosave_interval_seconds: float

    # ---- Data server ----
    server_host: str
    server_port: int
    server_data_file: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "mission-control")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/mission_control"))
        offline_cache_path = _env_path(_k("OFFLINE_CACHE_PATH"), data_dir / "offline_cache.json")
        export_dir = _env_path(_k("EXPORT_DIR"), Path("."))

        server_host = _env(_k("SERVER_HOST"), "127.0.0.1")
        # PORT is honoured for parity with the usual hosting conventions.
        server_port = _env_int(_k("SERVER_PORT"), _env_int("PORT", 8080))
        server_data_file = _env_path(_k("SERVER_DATA_FILE"), data_dir / "data.json")

        api_base_url = (
            _first_env(_k("API_BASE_URL"), default=f"http://{server_host}:{server_port}/api")
            or ""
        ).rstrip("/")
        request_timeout_seconds = _env_optional_float(_k("REQUEST_TIMEOUT_SECONDS"))

        save_debounce_seconds = _env_float(_k("SAVE_DEBOUNCE_SECONDS"), 1.0)
        autosave_interval_seconds = _env_float(_k("AUTOSAVE_INTERVAL_SECONDS"), 30.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            offline_cache_path=offline_cache_path,
            export_dir=export_dir,
            api_base_url=api_base_url,
            request_timeout_seconds=request_timeout_seconds,
            save_debounce_seconds=save_debounce_seconds,
            autosave_interval_seconds=autosave_interval_seconds,
            server_host=server_host,
            server_port=server_port,
            server_data_file=server_data_file,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
