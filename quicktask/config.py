from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str = "INFO"
    log_dir: str = "logs"
    page_limit: int = 10
    session_file: str = ".quicktask_session.json"
    session_ttl_hours: int = 168
    auto_create_schema: bool = False

    @property
    def session_path(self) -> Path:
        path = Path(self.session_file).expanduser()
        return path if path.is_absolute() else PROJECT_ROOT / path


def load_settings() -> Settings:
    load_env()

    database_url = os.getenv("DATABASE_URL", "").strip()
    if not database_url:
        raise RuntimeError("DATABASE_URL is not set. Create a .env file with your connection string.")

    return Settings(
        database_url=database_url,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_dir=os.getenv("LOG_DIR", "logs"),
        page_limit=int(os.getenv("TASKS_PAGE_LIMIT", "10")),
        session_file=os.getenv("SESSION_FILE", ".quicktask_session.json").strip(),
        session_ttl_hours=int(os.getenv("SESSION_TTL_HOURS", "168")),
        auto_create_schema=_env_flag("AUTO_CREATE_SCHEMA"),
    )
