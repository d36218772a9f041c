from __future__ import annotations

from datetime import date
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    timezone: str = "Europe/Moscow"
    sqlite_path: str = "data/checklist.db"
    log_path: str = "logs/checklist.log"
    log_level: str = "INFO"

    catalog_url: str = ""
    catalog_timeout_sec: float = 15.0
    catalog_tasks_field: str = "weeklyTasks"
    refresh_on_startup: bool = True

    # substring of the local display name -> catalog user key, checked in order
    user_key_aliases: dict[str, str] = {}
    static_tasks_path: str | None = None

    week_cutoff_date: date | None = date(2025, 6, 29)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
