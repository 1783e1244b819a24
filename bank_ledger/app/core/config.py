from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Bank Ledger API"
    log_level: str = "INFO"
    # None keeps everything in process memory; a SQLAlchemy URL enables the SQL store.
    database_url: str | None = None
    recent_transactions_limit: int = 10
    max_name_length: int = 50

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LEDGER_",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
