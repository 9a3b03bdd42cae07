"""Docker engine connection configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings


class DockerConfig(BaseSettings):
    """Docker engine settings."""

    base_url: str | None = Field(default=None, alias="docker_base_url")
    timeout: int = Field(default=60, ge=1, alias="docker_timeout")
    api_version: str = Field(default="auto", alias="docker_api_version")
    pull_progress: bool = Field(default=True, alias="docker_pull_progress")

    class Config:
        env_prefix = ""
        extra = "ignore"
