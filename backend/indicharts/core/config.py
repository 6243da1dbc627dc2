"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "IndiCharts Indicator Engine"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS (mobile app dev tooling / admin dashboard)
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Indicator engine
    max_candles: int = Field(default=1000, ge=1)  # Longer series are cut to the most recent candles
    sparkline_points: int = Field(default=50, ge=1)  # Points kept for home-screen widget sparklines

    # Alerts
    default_cooldown_sec: int = 600

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
