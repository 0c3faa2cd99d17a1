from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    app_name: str = "CronGuard"
    app_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./cronguard.db"

    # Monitor defaults
    default_grace_minutes: int = 15
    ping_history_limit: int = 75  # pings fetched per monitor for display
    timeline_limit: int = 75  # markers returned by the timeline endpoint

    # Ping rate limiting (per monitor)
    rate_limit_requests: int = 5
    rate_limit_window_seconds: int = 60

    # Background jobs
    pause_sweep_interval_seconds: int = 60
    rate_limit_prune_interval_seconds: int = 60

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
