"""
App Config - Supabase, server and logging settings
"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings read from the environment / .env"""

    # Supabase
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None

    # Server
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8000

    # Logging (empty LOG_DIR = stderr only)
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # Stats
    TOP_PLAYERS_LIMIT: int = 10
    MINIMUM_TOURNAMENTS_FOR_RANKING: int = 2
    LATEST_TOURNAMENTS_LIMIT: int = 5

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def database_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_KEY)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
