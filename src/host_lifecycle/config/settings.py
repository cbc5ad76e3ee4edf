"""Configuration management with Pydantic Settings.

Environment variables are loaded from:
1. Environment variables (highest priority)
2. .env file (development)
3. Defaults (lowest priority)
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment of this process."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Logging format."""

    JSON = "json"
    TEXT = "text"


class TeletraanSettings(BaseSettings):
    """Teletraan host lifecycle API configuration.

    The path templates are appended to ``url``. ``environment`` is the
    Teletraan environment the hosts belong to, not the deployment
    environment of this process.
    """

    model_config = SettingsConfigDict(env_prefix="TELETRAAN_")

    url: str = Field(
        default="http://localhost:8080/v1",
        description="Teletraan API base URL",
    )
    token: str | None = Field(default=None, description="Teletraan API token")
    environment: str = Field(default="prod", description="Teletraan environment name")
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Per-request timeout",
    )

    replace_host_path: str = Field(
        default="/{environment}/clusters/{cluster_id}/replace",
        description="Replace endpoint template",
    )
    terminate_host_path: str = Field(
        default="/{environment}/clusters/{cluster_id}/terminate",
        description="Terminate endpoint template",
    )
    host_status_path: str = Field(
        default="/hosts/{host_name}",
        description="Host status history endpoint template",
    )

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so templates can start with '/'."""
        return v.rstrip("/")


class WaiterSettings(BaseSettings):
    """Defaults for polling a host until its termination is confirmed."""

    model_config = SettingsConfigDict(env_prefix="HOST_WAIT_")

    timeout_seconds: float = Field(default=1800.0, gt=0, description="Give up after")
    interval_seconds: float = Field(default=30.0, gt=0, description="Initial poll interval")
    max_interval_seconds: float = Field(default=300.0, gt=0, description="Poll interval cap")
    backoff: float = Field(
        default=1.0,
        ge=1.0,
        description="Interval multiplier per poll (1.0 keeps it fixed)",
    )


class Settings(BaseSettings):
    """Main application settings.

    All settings can be overridden via environment variables.
    For nested settings, use the appropriate prefix (e.g., TELETRAAN_TOKEN).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="host-lifecycle", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        alias="ENV",
        description="Deployment environment",
    )

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: LogFormat = Field(default=LogFormat.JSON, description="Logging format")

    teletraan: TeletraanSettings = Field(default_factory=TeletraanSettings)
    waiter: WaiterSettings = Field(default_factory=WaiterSettings)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses LRU cache to avoid re-parsing environment variables.
    """
    return Settings()
