from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import Optional
from functools import lru_cache
import logging
import sys


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./warranty.db"

    # Database Connection Pool Settings (ignored for SQLite)
    DB_POOL_SIZE: int = 10  # Base number of connections in pool
    DB_MAX_OVERFLOW: int = 20  # Extra connections allowed beyond pool_size
    DB_POOL_TIMEOUT: int = 30  # Seconds to wait for connection from pool
    DB_POOL_RECYCLE: int = 1800  # Recycle connections after 30 minutes

    # App Settings
    APP_NAME: str = "APD Warranty Lifecycle Engine"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Repair Pricing
    DEFAULT_LABOR_RATE: float = 85.00  # Used when a service center has no labor rate

    # Product policy defaults
    DEFAULT_REPLACEMENT_THRESHOLD: float = 0.70  # Fraction of purchase price
    DEFAULT_MAX_CLAIMS_PER_YEAR: int = 2
    REPLACE_RECOMMENDATION_RATIO: float = 0.90  # Repair/purchase ratio that means "replace"

    # Dispatch
    DISPATCH_RESULT_LIMIT: int = 5

    # Reporting windows (days)
    EXPIRING_SOON_DAYS: int = 30
    EXPIRATION_FORECAST_DAYS: int = 90

    @field_validator('LOG_LEVEL', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for scripts and workers embedding the engine."""
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format=settings.LOG_FORMAT,
        stream=sys.stdout,
    )
