"""
Roadmap Timeline configuration: single source of truth.

Pydantic BaseSettings, load at startup, fail fast on invalid.
"""

import os
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from project root so the task API creds load regardless of cwd
_CONFIG_DIR = os.path.dirname(os.path.abspath(__file__))
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(_CONFIG_DIR)))
_DOTENV_PATH = os.path.join(_PROJECT_ROOT, ".env")


class AppSettings(BaseSettings):
    """Central config; single initialization. Task API creds come only from .env / env vars."""

    model_config = SettingsConfigDict(
        env_file=_DOTENV_PATH,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # SQLite database (embedded, no server required)
    sqlite_db_path: str = Field(
        default="roadmap_timeline.db",
        description="Path to SQLite database file (relative to project root or absolute)"
    )

    # Project task listing API; when unset, child tasks are read from the local DB
    tasks_api_base_url: Optional[str] = Field(default=None, description="Base URL of the project/task listing API")
    tasks_api_token: Optional[str] = Field(default=None, description="Bearer token for the task listing API")
    tasks_api_timeout: float = Field(default=30.0, description="Request timeout in seconds")

    # Layout
    min_task_width_percent: float = Field(default=2.0, description="Minimum bar width for tasks/subtasks/milestones")
    milestone_tag: str = Field(default="milestone", description="Tag (case-insensitive) marking a milestone")

    cors_allow_all: bool = Field(default=True)
    cors_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000"
    )
    log_level: str = Field(default="INFO")

    @model_validator(mode="after")
    def _check_ranges(self) -> "AppSettings":
        if self.tasks_api_timeout <= 0:
            raise ValueError("tasks_api_timeout must be positive")
        if not 0 <= self.min_task_width_percent <= 100:
            raise ValueError("min_task_width_percent must be within [0, 100]")
        return self

    @property
    def sqlite_conn(self) -> str:
        """SQLite connection string for SQLAlchemy."""
        db_path = self.sqlite_db_path
        if not os.path.isabs(db_path):
            db_path = os.path.join(_PROJECT_ROOT, db_path)
        return f"sqlite:///{db_path}"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Return settings singleton. Fail fast on first load if invalid."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
