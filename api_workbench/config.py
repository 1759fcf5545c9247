"""
Application settings for API Workbench.

Values are read from the environment (prefix ``API_WORKBENCH_``) or an
optional ``.env`` file in the working directory.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration."""

    # Storage for environments, collections and request definitions
    database_url: str = "sqlite:///./api_workbench.db"

    # Transport settings, passed straight to httpx
    request_timeout: float = 30.0
    follow_redirects: bool = True
    verify_ssl: bool = True

    # Engine settings
    history_limit: int = 10
    deep_parse_max_depth: int = 64
    run_retention: int = 20

    host: str = "127.0.0.1"
    port: int = 8000

    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    model_config = SettingsConfigDict(env_prefix="API_WORKBENCH_", env_file=".env")


@lru_cache
def get_settings() -> Settings:
    return Settings()
