"""Configuration management for dui."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_prefix="DUI_", case_sensitive=False)

    # Engine
    engine_binary: str = Field(default="docker", description="Container engine command-line tool")
    auto_start: bool = Field(default=True, description="Try to start the daemon when it is not running")
    probe_interval: float = Field(default=2.0, description="Seconds between daemon liveness polls")
    probe_attempts: int = Field(default=30, description="Maximum number of liveness polls after a start")
    logs_tail: int = Field(default=50, description="Number of log lines fetched by the logs action")

    # Logging
    log_level: str = Field(default="WARNING", description="Log level")
    log_profile: Literal["default", "cli"] = Field(default="cli", description="Log profile")


def get_settings() -> Settings:
    """Get application settings.

    Values come from ``DUI_*`` environment variables; every field has a default,
    so an empty environment reproduces the built-in behaviour.
    """
    return Settings()
