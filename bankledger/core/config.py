from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./bank_ledger.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    SQLITE_BUSY_TIMEOUT_SECONDS: float = 5.0

    # Ledger store retry policy
    STORE_MAX_ATTEMPTS: int = 3
    STORE_RETRY_BACKOFF_SECONDS: float = 0.05

    # Identifiers
    ACCOUNT_NUMBER_PREFIX: str = "ACC"
    ACCOUNT_NUMBER_MAX_ATTEMPTS: int = 5
    TRANSACTION_ID_PREFIX: str = "TXN"

    # Application
    APP_NAME: str = "Bank Ledger"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    SEED_SAMPLE_DATA: bool = True

    # Console
    DESCRIPTION_DISPLAY_WIDTH: int = 25

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
