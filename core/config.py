"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Remote source
    SOURCE_BASE_URL: str = "https://storage.googleapis.com/dosm-public-pricecatcher"
    FIRST_PERIOD: str = "2022-01"
    HTTP_TIMEOUT_SECONDS: float = 3600.0

    # Local storage
    CACHE_DIR: str = "cache"
    OUTPUT_DIR: str = "snapshots"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # ETL Configuration
    READ_BATCH_SIZE: int = 10000
    ETL_BATCH_SIZE: int = 500
    EXPORT_STEP_PAGES: int = 1000
    EXPORT_BACKOFF_MS: int = 250
    SCHEDULE_INTERVAL_HOURS: int = 24
    SCHEDULER_ENABLED: bool = True


settings = Settings()
