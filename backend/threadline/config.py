"""
Configuration settings for the Threadline backend.
Uses pydantic-settings for environment variable support.
"""

from pydantic_settings import BaseSettings
import os


class Settings(BaseSettings):
    """Application configuration settings."""

    # Application
    APP_NAME: str = "Threadline"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    # resolved relative to this config file (backend/threadline/config.py -> backend/threadline.db)
    _BASE_DIR: str = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    DATABASE_URL: str = f"sqlite+aiosqlite:///{os.path.join(_BASE_DIR, 'threadline.db')}"

    # JWT verification (tokens are issued by the identity service)
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"

    # Hierarchy / search windows
    HIERARCHY_DEFAULT_LIMIT: int = 50
    SEARCH_DEFAULT_LIMIT: int = 20
    SEARCH_MAX_LIMIT: int = 100

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 6666

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
