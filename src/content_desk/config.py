# src/content_desk/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time.
- Legacy deployment names (PORT, PUBLIC_APP_URL,
  DAILY_DIGEST_CHAT_ID, ...) are accepted as fallbacks.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import time
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

ENV_PREFIX = "DESK"

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


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def parse_clock(raw: str | None) -> Optional[time]:
    """Parse "HH:MM" into a time; empty or malformed input disables the schedule."""
    if raw is None or raw.strip() == "":
        return None
    try:
        hh, mm = raw.strip().split(":", 1)
        return time(hour=int(hh), minute=int(mm))
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- HTTP ----
    host: str
    port: int
    public_app_url: str

    # ---- Connector flags ----
    matrix_enabled: bool

    # ---- Digest ----
    digest_chat_id: Optional[str]
    digest_time: Optional[time]

    # ---- Matrix ----
    matrix_homeserver: str
    matrix_user_id: str
    matrix_password: str
    matrix_rooms: List[str]

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    matrix_store_path: Path
    db_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _first_env(_k("APP_NAME"), default="content-desk") or "content-desk"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        host = _env(_k("HOST"), "0.0.0.0")
        port = _env_int(_k("PORT"), _env_int("PORT", 3000))
        public_app_url = (_first_env(_k("PUBLIC_APP_URL"), "PUBLIC_APP_URL", default="") or "").strip()

        matrix_enabled = _env_bool(_k("MATRIX_ENABLED"), False)

        digest_chat_id = _first_env(_k("DIGEST_CHAT_ID"), "DAILY_DIGEST_CHAT_ID", default=None)
        if digest_chat_id is not None:
            digest_chat_id = digest_chat_id.strip()
        digest_time = parse_clock(_env(_k("DIGEST_TIME"), ""))

        matrix_homeserver = _env(_k("MATRIX_HOMESERVER")).strip()
        matrix_user_id = _env(_k("MATRIX_USER_ID")).strip()
        matrix_password = _env(_k("MATRIX_PASSWORD")).strip()
        matrix_rooms = _env_list(_k("MATRIX_ROOMS"), [])

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/content-desk"))
        matrix_store_path = _env_path(_k("MATRIX_STORE_PATH"), data_dir / "matrix_store")
        db_path = _env_path(_k("DB_PATH"), data_dir / "desk.sqlite3")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            host=host,
            port=port,
            public_app_url=public_app_url,
            matrix_enabled=matrix_enabled,
            digest_chat_id=digest_chat_id or None,
            digest_time=digest_time,
            matrix_homeserver=matrix_homeserver,
            matrix_user_id=matrix_user_id,
            matrix_password=matrix_password,
            matrix_rooms=matrix_rooms,
            data_dir=data_dir,
            matrix_store_path=matrix_store_path,
            db_path=db_path,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
