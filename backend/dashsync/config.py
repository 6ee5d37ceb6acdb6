from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "dashsync"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database. Empty means the relational store is not configured and
    # reads are served from the flat-file fallback.
    DATABASE_URL: str = ""
    DATABASE_POOL_SIZE: int = 10

    # Reconciliation
    UPSERT_BATCH_SIZE: int = 5
    DELETE_CHUNK_SIZE: int = 500

    # Flat-file fallback
    FALLBACK_DATA_DIR: str = "data"
    FALLBACK_WRITES_ENABLED: bool = False
    FALLBACK_BACKUP_COUNT: int = 5

    # Rate limiting for sync writes
    SYNC_RATE_LIMIT_CALLS: int = 60
    SYNC_RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_MAX_KEYS: int = 10_000

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()
