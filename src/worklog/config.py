# src/worklog/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "WORKLOG"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
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


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path
    db_timeout_seconds: float

    # ---- Console identity (resolved outside this app in real deployments) ----
    user_id: str
    username: str
    is_admin: bool

    # ---- LLM / OpenAI (optional; AI helpers run in stub mode without a key) ----
    openai_api_key: str | None
    openai_base_url: str
    llm_model: str
    llm_timeout_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "worklog").strip() or "worklog"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/worklog"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "worklog.sqlite3")
        db_timeout_seconds = _env_float(_k("DB_TIMEOUT_SECONDS"), 30.0)

        username = _env(_k("USERNAME"), _env("USER", "local")).strip() or "local"
        user_id = _env(_k("USER_ID"), username).strip() or username
        is_admin = _env_bool(_k("IS_ADMIN"), False)

        openai_api_key = _first_env(_k("OPENAI_API_KEY"), "OPENAI_API_KEY", default=None)
        openai_base_url = _env(_k("OPENAI_BASE_URL"), "").strip()
        llm_model = _env(_k("LLM_MODEL"), "gpt-3.5-turbo").strip() or "gpt-3.5-turbo"
        llm_timeout_seconds = _env_float(_k("LLM_TIMEOUT_SECONDS"), 30.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            db_path=db_path,
            db_timeout_seconds=db_timeout_seconds,
            user_id=user_id,
            username=username,
            is_admin=is_admin,
            openai_api_key=openai_api_key,
            openai_base_url=openai_base_url,
            llm_model=llm_model,
            llm_timeout_seconds=llm_timeout_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
