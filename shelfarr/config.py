"""
Shelfarr v1.0.0 - Configuration
Application settings and environment variables
"""

from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import Optional, Union


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Shelfarr"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./shelfarr.db"

    # Filesystem
    # Relative paths handed to the organizer resolve against APP_ROOT,
    # not against the process working directory.
    APP_ROOT: str = "/app"
    LIBRARY_PATH: str = "/library"

    # External APIs
    TMDB_API_KEY: Optional[str] = None
    TMDB_BASE_URL: str = "https://api.themoviedb.org/3"
    IGDB_CLIENT_ID: Optional[str] = None
    IGDB_CLIENT_SECRET: Optional[str] = None
    IGDB_BASE_URL: str = "https://api.igdb.com/v4"
    IGDB_AUTH_URL: str = "https://id.twitch.tv/oauth2/token"
    EXTERNAL_API_TIMEOUT: float = 10.0

    # Reverse indexing scheduler: 'inprocess', 'celery' or 'off'
    SCAN_SCHEDULER: str = "inprocess"

    # CORS
    CORS_ORIGINS: Union[list[str], str] = ["http://localhost:3000", "http://localhost:5173"]

    # Celery
    CELERY_BROKER_URL: str = "redis://redis:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/0"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("SCAN_SCHEDULER")
    @classmethod
    def validate_scheduler(cls, v: str) -> str:
        value = v.strip().lower()
        if value not in {"inprocess", "celery", "off"}:
            raise ValueError("SCAN_SCHEDULER must be one of: inprocess, celery, off")
        return value

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
