"""
Unicache — Configuration Module

Provides typed configuration loading, validation and connection-string parsing.
"""

from .connection import ConnectionSettings, RedisEndpoint, parse_connection_string
from .loader import configure_logging, get_config, load_config, reload_config
from .schemas import (
    CacheBackend,
    CacheConfig,
    Environment,
    LogLevel,
    UnicacheConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    "configure_logging",
    # Main config
    "UnicacheConfig",
    # Enums
    "Environment",
    "CacheBackend",
    "LogLevel",
    # Config sections
    "CacheConfig",
    # Connection strings
    "ConnectionSettings",
    "RedisEndpoint",
    "parse_connection_string",
]
