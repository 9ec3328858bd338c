"""
Configuration module for the School Occurrence Reports API.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Database
    database_url: str = "sqlite:///./school_reports.db"

    # Sessions
    secret_key: str = "change-me-in-production"
    session_cookie: str = "school_reports_session"
    session_max_age: int = 60 * 60 * 12  # 12 hours

    # Bootstrap
    admin_username: str = "Wallisson10"
    admin_password: str = "CEPI10"
    default_user_password: str = "mudar123"
    required_classes: List[str] = ["6A", "6B", "6C", "7A", "7B", "7C", "8A", "8B", "9B"]
    legacy_classes: List[str] = ["9A", "9C"]
    run_bootstrap: bool = True
    bootstrap_blocking: bool = False

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: List[str] = ["*"]
    debug: bool = False
    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


settings = get_settings()
