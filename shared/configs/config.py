"""
Application configuration using Pydantic settings.
"""
from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "Stock Watchlist"
    debug: bool = False
    environment: str = "development"

    # Database
    database_url: str = "sqlite:///./watchlist.db"
    db_pool_size: int = 10
    db_max_overflow: int = 20

    # Quote source (Finnhub)
    finnhub_api_key: Optional[str] = None
    finnhub_base_url: str = "https://finnhub.io/api/v1"
    quote_timeout_seconds: float = 10.0
    quote_max_attempts: int = 3
    quote_requests_per_second: float = 5.0
    max_concurrent_quotes: int = 8

    # Session
    session_header: str = "X-User-Email"  # Set by the upstream auth proxy
    sign_in_path: str = "/sign-in"

    # Presentation
    currency_symbol: str = "$"
    restore_rows_on_failure: bool = False

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"
    log_file: Optional[str] = None

    # Web server
    web_host: str = "0.0.0.0"
    web_port: int = 8080

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"  # Allow extra fields from .env file
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance
    """
    return Settings()
