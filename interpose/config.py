"""
interpose configuration.

Settings for the ASGI host, the CLI and the example servers, loaded from
INTERPOSE_* environment variables (or a .env file) with pydantic-settings.
The middleware stack itself takes no configuration.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="INTERPOSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8000, ge=1, le=65535)
    reload: bool = Field(default=True, description="Auto-reload for the dev command")

    # ── Logging ───────────────────────────────────────────────────────────
    log_level: str = Field(default="info")
    json_logs: bool = Field(default=False, description="JSON lines instead of text")
    log_file: Optional[str] = Field(default=None, description="Rotating log file path")
    environment: str = Field(default="development")

    # ── Built-in middleware ───────────────────────────────────────────────
    error_mode: Literal["production", "debug"] = "production"
    gzip_level: int = Field(default=9, ge=0, le=9)
    gzip_minimum_size: int = Field(default=500, ge=0)
    basic_auth_username: Optional[str] = None
    basic_auth_password: Optional[str] = None

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        allowed = {"critical", "error", "warning", "info", "debug"}
        if value.lower() not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return value.lower()

    @model_validator(mode="after")
    def validate_basic_auth(self) -> "Settings":
        if (self.basic_auth_username is None) != (self.basic_auth_password is None):
            raise ValueError(
                "basic_auth_username and basic_auth_password must be set together"
            )
        return self

    @property
    def basic_auth_enabled(self) -> bool:
        return self.basic_auth_username is not None


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings instance."""
    return Settings()
