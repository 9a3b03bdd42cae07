"""Configuration management for dockhand.

Settings are read from environment variables (and an optional ``.env`` file)
into a single flat Settings class, with grouped views for each concern.

Usage:
    from dockhand.config import settings

    # Grouped access
    settings.docker.timeout
    settings.logging.level

    # Flat access
    settings.docker_timeout
    settings.log_level
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .docker import DockerConfig
from .logging import LoggingConfig


class Settings(BaseSettings):
    """Library settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    # Docker Engine Configuration
    docker_base_url: str | None = Field(
        default=None,
        description="Daemon URL (e.g. unix:///var/run/docker.sock); unset uses DOCKER_HOST and friends",
    )
    docker_timeout: int = Field(default=60, ge=1, description="Seconds allowed per engine API call")
    docker_api_version: str = Field(
        default="auto",
        description="Engine API version, or 'auto' to negotiate with the daemon",
    )
    docker_pull_progress: bool = Field(
        default=True,
        description="Stream image pull progress to the manager's output sink",
    )

    # Logging Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="console")
    log_file: str | None = Field(default=None)
    log_max_size_mb: int = Field(default=100, ge=1)
    log_backup_count: int = Field(default=5, ge=1)

    # ========================================================================
    # VALIDATORS
    # ========================================================================

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def normalize_case(cls, v, info):
        """Accept log level and format in any case."""
        if isinstance(v, str):
            return v.upper() if info.field_name == "log_level" else v.lower()
        return v

    @field_validator("docker_base_url", mode="before")
    @classmethod
    def empty_base_url_is_unset(cls, v):
        """Treat an empty DOCKER_BASE_URL as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # ========================================================================
    # GROUPED CONFIG ACCESS
    # ========================================================================

    @property
    def docker(self) -> DockerConfig:
        """Access Docker engine configuration group."""
        return DockerConfig(
            docker_base_url=self.docker_base_url,
            docker_timeout=self.docker_timeout,
            docker_api_version=self.docker_api_version,
            docker_pull_progress=self.docker_pull_progress,
        )

    @property
    def logging(self) -> LoggingConfig:
        """Access logging configuration group."""
        return LoggingConfig(
            log_level=self.log_level,
            log_format=self.log_format,
            log_file=self.log_file,
            log_max_size_mb=self.log_max_size_mb,
            log_backup_count=self.log_backup_count,
        )


# Global settings instance
settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "DockerConfig",
    "LoggingConfig",
]
