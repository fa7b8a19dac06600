"""Application configuration for the view-state service."""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    backend_base_url: str = Field(default="http://localhost:8000")
    backend_timeout_seconds: float = Field(default=10.0, gt=0)
    backend_token: str = Field(default="")

    database_async_url: str = Field(default="sqlite+aiosqlite:///./rentboard.db")
    database_ssl_required: bool = Field(default=False)

    edit_session_ttl_seconds: int = Field(default=900, ge=1)
    default_page_size: int = Field(default=5, ge=1)
    max_page_size: int = Field(default=50, ge=1)
    search_fetch_limit: int = Field(default=100, ge=1, le=100)

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        """Allow comma-separated env values for CORS origins."""

        if isinstance(value, str):
            parts = [item.strip() for item in value.split(",") if item.strip()]
            return parts
        return value


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


settings = get_settings()
