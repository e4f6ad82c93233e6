"""
Unicache — Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
All configuration must be defined here and validated at startup.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Environment(str, Enum):
    """Runtime environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class CacheBackend(str, Enum):
    """Cache backends the facade can route to."""

    MEMORY = "memory"
    REDIS = "redis"

    @property
    def description(self) -> str:
        return _BACKEND_DESCRIPTIONS[self]


_BACKEND_DESCRIPTIONS = {
    CacheBackend.MEMORY: "Runtime Cache",
    CacheBackend.REDIS: "Redis Cache",
}


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class CacheConfig(BaseModel):
    """Cache configuration."""

    connection_string: str | None = Field(
        default=None,
        description="Redis connection string; unset or empty routes every call to the local store",
    )
    default_ttl_minutes: float = Field(
        default=1.0,
        ge=0,
        description="Expiration applied by add() when no minutes are passed (0 = no expiry)",
    )
    max_entries: int = Field(default=100_000, ge=1, description="Max live entries in the local store")

    @field_validator("connection_string")
    @classmethod
    def normalize_connection_string(cls, v: str | None) -> str | None:
        """Treat blank connection strings as unset."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @property
    def backend(self) -> CacheBackend:
        """Backend the configured connection string selects."""
        return CacheBackend.REDIS if self.connection_string else CacheBackend.MEMORY


class UnicacheConfig(BaseModel):
    """Root configuration for Unicache."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    cache: CacheConfig = Field(default_factory=CacheConfig)

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)
