# src/taskbell/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a default.
- Invalid values fall back to defaults instead of crashing startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TASKBELL"

ORPHAN_POLICIES = ("skip", "delete")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = (os.getenv(name) or "").strip().lower()
    return raw if raw in choices else default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    store_path: Path

    # ---- Evaluator ----
    check_interval_seconds: float
    orphan_policy: str

    # ---- Alert channels ----
    notifications_enabled: bool
    sound_enabled: bool
    blocking_alert_enabled: bool

    # ---- Task helpers ----
    auto_reminder: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskbell").strip() or "taskbell"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskbell"))
        store_path = _env_path(_k("STORE_PATH"), data_dir / "taskbell.sqlite3")

        check_interval_seconds = max(0.5, _env_float(_k("CHECK_INTERVAL_SECONDS"), 10.0))
        orphan_policy = _env_choice(_k("ORPHAN_POLICY"), ORPHAN_POLICIES, "skip")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            store_path=store_path,
            check_interval_seconds=check_interval_seconds,
            orphan_policy=orphan_policy,
            notifications_enabled=_env_bool(_k("NOTIFICATIONS_ENABLED"), True),
            sound_enabled=_env_bool(_k("SOUND_ENABLED"), True),
            blocking_alert_enabled=_env_bool(_k("BLOCKING_ALERT_ENABLED"), True),
            auto_reminder=_env_bool(_k("AUTO_REMINDER"), True),
        )


def get_settings() -> Settings:
    """Read settings from the environment (call once in the entrypoint and pass it down)."""
    return Settings.from_env()
