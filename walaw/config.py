"""
Crawler, store and server configuration.

Settings are read from environment variables prefixed with ``WALAW_`` and from
an optional ``.env`` file in the working directory.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server settings
    app_name: str = "Washington Law API"
    app_version: str = "1.0.0"
    debug: bool = False
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Store
    db_path: Path = Path("./data/washington-laws.db")

    # Remote sources
    rcw_base_url: str = "https://app.leg.wa.gov/RCW/"
    wac_base_url: str = "https://app.leg.wa.gov/WAC/"
    court_rules_base_url: str = "https://www.courts.wa.gov"
    user_agent: str = "walaw-crawler/1.0 (+offline legal reference mirror)"

    # Politeness: the delay is a floor on courtesy toward the remote hosts and
    # may not be configured away.
    request_timeout_s: float = Field(default=30.0, gt=0)
    max_concurrency: int = Field(default=2, ge=1, le=3)
    request_delay_s: float = Field(default=0.5, gt=0)
    host_min_interval_s: float = Field(default=0.25, gt=0)

    # Extraction
    min_text_length: int = 50
    pdf_body_start_window: int = 100

    # Query
    search_default_limit: int = 20

    log_level: str = "INFO"

    class Config:
        env_prefix = "WALAW_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
