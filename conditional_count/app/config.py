"""
Configuration for the Conditional Count alert condition.
Centralized settings using Pydantic Settings with environment variable support.
"""

from typing import Optional
from functools import lru_cache
from pathlib import Path
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings loaded from environment variables.
    Supports .env file loading in development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ============================================
    # Application Settings
    # ============================================
    app_name: str = Field(default="conditional-count-alert")
    app_version: str = Field(default="1.0.0")
    environment: str = Field(default="development", pattern="^(development|staging|production)$")
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    # ============================================
    # Search Backend
    # ============================================
    search_backend_url: str = Field(
        default="http://localhost:9200",
        description="Base URL of the Elasticsearch/OpenSearch cluster holding message indices"
    )
    search_index_prefix: str = Field(
        default="graylog",
        description="Message index prefix; queries target '<prefix>_*'"
    )
    search_timestamp_field: str = Field(default="timestamp")
    search_timeout_seconds: float = Field(default=30.0, gt=0)
    search_username: Optional[str] = Field(default=None)
    search_password: Optional[str] = Field(default=None)

    # ============================================
    # Alert Conditions
    # ============================================
    alerts_config_path: Path = Field(
        default=Path("./configs"),
        description="Base path; condition definitions live in '<path>/alerts/*.yml'"
    )
    default_window_minutes: int = Field(default=5, ge=1)
    default_threshold: int = Field(default=0)

    @field_validator("search_backend_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def search_index_pattern(self) -> str:
        """Index pattern covering every message index."""
        return f"{self.search_index_prefix}_*"

    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
