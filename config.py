from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Forum settings, read from FORUM_* environment variables or .env"""

    model_config = SettingsConfigDict(env_prefix="FORUM_", env_file=".env", case_sensitive=False)

    # Database
    database_path: str = "db.sqlite3"
    database_timeout_seconds: float = 5.0

    # Uploads
    upload_folder: str = "uploads"

    # Sessions
    session_ttl_seconds: int = 7 * 24 * 60 * 60  # 7 days
    session_cookie_name: str = "session_id"
    session_cookie_secure: bool = False

    # CSRF
    csrf_secret_key: str = "change-me-in-production"
    csrf_token_expire_minutes: int = 60

    # API
    cors_origins: List[str] = ["http://localhost:8080"]
    host: str = "0.0.0.0"
    port: int = 8080

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
