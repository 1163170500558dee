"""Application configuration via Pydantic Settings."""

from typing import List

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./scrapehub.db"

    @model_validator(mode="after")
    def fix_database_url(self) -> "Settings":
        """Async drivers need explicit dialect prefixes."""
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            self.DATABASE_URL = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            self.DATABASE_URL = url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif url.startswith("sqlite://"):
            self.DATABASE_URL = url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return self

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Proxies: plain text file, one protocol://host:port per line
    PROXY_FILE: str = "storage/proxies.txt"
    PROXY_MAX_FAILURES: int = 0  # 0 disables failure-based exclusion
    PROXY_COOLDOWN_MINUTES: int = 10

    # Fetching
    SCRAPER_TIMEOUT_SECONDS: float = 15.0
    SCRAPER_VERIFY_TLS: bool = True
    SCRAPER_FETCH_ATTEMPTS: int = 1

    # Category jobs
    JOB_MAX_ATTEMPTS: int = 3
    JOB_TIMEOUT_SECONDS: float = 300.0
    JOB_RETRY_DELAY_SECONDS: float = 5.0
    SCHEDULE_INTERVAL_MINUTES: int = 15
    SCHEDULED_CATEGORY_URLS: str = (
        "https://www.amazon.com/s?k=laptop,https://www.jumia.com.eg/laptops/"
    )

    def get_category_urls(self) -> List[str]:
        """Parse SCHEDULED_CATEGORY_URLS into a list of category URLs.

        Returns:
            List of URL strings, empty if nothing is configured
        """
        if not self.SCHEDULED_CATEGORY_URLS:
            return []
        return [u.strip() for u in self.SCHEDULED_CATEGORY_URLS.split(",") if u.strip()]


settings = Settings()
