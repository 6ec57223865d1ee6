"""
Core configuration module using Pydantic Settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database (durable backend). Falls back to the in-memory store if it cannot be initialised.
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/reviews.db"
    USE_MEMORY_STORAGE: bool = False
    MEMORY_STORE_CAPACITY: int = 10000

    # Outbound store calls
    HTTP_TIMEOUT_SECONDS: float = 15.0
    # Worker threads per adapter for blocking client calls
    ADAPTER_MAX_WORKERS: int = 16
    FANOUT_MAX_CONCURRENCY: int = 20

    # Google Play pagination
    ANDROID_PAGE_SIZE: int = 200
    ANDROID_MAX_PAGES: int = 10
    ANDROID_MAX_REVIEWS: int = 1000
    ANDROID_PAGE_DELAY_SECONDS: float = 0.1

    # App Store RSS feed exposes at most 10 pages
    IOS_MAX_PAGES: int = 10

    # Query / export limits
    SEARCH_LIMIT: int = 10
    DEFAULT_QUERY_LIMIT: int = 50
    MAX_QUERY_LIMIT: int = 1000
    MAX_EXPORT_TOTAL: int = 10000

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Logging
    LOG_LEVEL: str = "INFO"

    # Application
    APP_NAME: str = "App Review Collector"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


# Global settings instance
settings = Settings()
