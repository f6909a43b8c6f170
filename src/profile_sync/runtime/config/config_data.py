"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field, field_validator


class RedisConfig(BaseModel):
    """Redis configuration model."""

    enabled: bool = Field(default=False, description="Enable Redis service")
    url: str = Field(default="", description="Redis connection URL")
    password: str | None = Field(
        default=None, description="Password for Redis authentication"
    )
    decode_responses: bool = Field(
        default=True, description="Decode Redis responses to strings"
    )

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the Redis connection string with password if provided."""
        if self.password:
            if "@" in self.url:
                # URL already has auth info
                return self.url
            parts = self.url.split("://", 1)
            if len(parts) == 2:
                scheme, rest = parts
                return f"{scheme}://:{self.password}@{rest}"
        return self.url


class IdentityProviderConfig(BaseModel):
    """Identity provider (GoTrue / Supabase Auth) configuration model."""

    url: str = Field(
        default="http://localhost:54321", description="Base URL of the auth server"
    )
    api_key: str = Field(default="", description="Public (anon) API key")
    timeout_seconds: float = Field(
        default=10.0, description="HTTP timeout for auth requests"
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def blank_api_key_as_empty(cls, value: str | None) -> str:
        return value or ""


class ProfilesConfig(BaseModel):
    """Profile reconciliation configuration model."""

    default_role: str = Field(
        default="user", description="Role assigned to newly created profiles"
    )


class PendingRegistrationConfig(BaseModel):
    """Pending-registration cache configuration model."""

    key_prefix: str = Field(
        default="pending_registration:", description="Storage key prefix"
    )
    ttl_seconds: int = Field(
        default=7 * 24 * 3600,
        description="How long unconsumed registration fields are kept",
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./profiles.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    redis: RedisConfig = Field(
        default_factory=RedisConfig, description="Redis configuration"
    )
    identity_provider: IdentityProviderConfig = Field(
        default_factory=IdentityProviderConfig,
        description="Identity provider configuration",
    )
    profiles: ProfilesConfig = Field(
        default_factory=ProfilesConfig, description="Profile configuration"
    )
    pending_registration: PendingRegistrationConfig = Field(
        default_factory=PendingRegistrationConfig,
        description="Pending-registration cache configuration",
    )
