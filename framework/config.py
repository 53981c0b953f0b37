from typing import Optional
from urllib.parse import quote_plus
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Basic configuration ---
    APP_NAME: str = "Library Data Access"
    APP_ENV: str = "development"  # development, production, testing
    DEBUG: bool = True

    # --- Database (SQLModel) ---
    DB_BACKEND: str = "sqlite"  # sqlite, mysql
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = "root"
    DB_NAME: str = "library"
    SQLITE_PATH: Optional[str] = "library.db"  # None -> in-memory
    DB_ECHO: bool = False

    @property
    def DATABASE_URL(self) -> str:
        # Sync driver URL
        if self.DB_BACKEND == "sqlite":
            return f"sqlite:///{self.SQLITE_PATH}" if self.SQLITE_PATH else "sqlite://"
        safe_password = quote_plus(self.DB_PASSWORD)
        return f"mysql+pymysql://{self.DB_USER}:{safe_password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def ASYNC_DATABASE_URL(self) -> str:
        # Async driver URL
        if self.DB_BACKEND == "sqlite":
            return f"sqlite+aiosqlite:///{self.SQLITE_PATH}" if self.SQLITE_PATH else "sqlite+aiosqlite://"
        safe_password = quote_plus(self.DB_PASSWORD)
        return f"mysql+aiomysql://{self.DB_USER}:{safe_password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # --- Repositories ---
    DEFAULT_PAGE_SIZE: int = 20  # Used when only `page` is given

    # --- Logging ---
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False

    # --- Pydantic ---
    # Load env from project root .env; priority: env vars > .env > defaults
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )


# Singleton settings instance
settings = Settings()
