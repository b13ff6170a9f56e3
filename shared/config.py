"""
Shared configuration management for the filter builder services.
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="FILTERS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local", description="Deployment environment")
    log_level: str = Field(default="info", description="Log level")

    # Filter engine defaults
    default_logic: Literal["AND", "OR"] = Field(
        default="AND", description="Connector given to a rule when another rule is appended after it"
    )
    max_filters: Optional[int] = Field(
        default=None, ge=0, description="Upper bound on rules per chain; unset or 0 means unbounded"
    )

    # Session store
    max_sessions: int = Field(default=1000, ge=1, description="Engine sessions kept in memory")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
