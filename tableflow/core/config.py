# tableflow/core/config.py

"""
Application configuration.

Settings are read from the environment (and an optional ``.env`` file) so
that deployments can tune urgency thresholds and table provisioning without
code changes.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="TABLEFLOW_", extra="ignore"
    )

    # Database Configuration
    database_url: str = "sqlite:///./tableflow.db"
    log_sql_queries: bool = False

    # Environment Settings
    environment: str = "development"
    log_level: str = "INFO"

    # CORS origins allowed to reach the API (waiter tablets, board screens)
    cors_origins: List[str] = ["http://localhost:3000"]

    # Preparation screens: minutes after which an order is flagged urgent
    bar_urgency_minutes: int = 10
    kitchen_urgency_minutes: int = 15

    # Table priority: ranks 2..N get secondary treatment
    priority_secondary_max_rank: int = 3

    # Provisioning
    default_table_count: int = 20
    default_waiter_name: str = "Waiter"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
