"""
Application configuration using Pydantic Settings
"""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """
    # Database
    DATABASE_URL: str = "sqlite:///personal.db"
    SQL_ECHO: bool = False

    # Application
    TIMEZONE: str = "UTC"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Single fixed identity (no authentication in this app)
    DEFAULT_USER_ID: str = "user-1"
    DEFAULT_USER_NAME: str = "Default User"
    DEFAULT_USER_EMAIL: str = "user@example.com"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    def get_sqlalchemy_url(self) -> str:
        """
        Convert DATABASE_URL to SQLAlchemy format (postgresql+psycopg://)
        """
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+psycopg://", 1)
        return url

    def is_postgres(self) -> bool:
        return self.get_sqlalchemy_url().startswith("postgresql+psycopg://")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance (singleton)
    """
    return Settings()
