"""
Unicache — Configuration Loader

Loads and validates configuration from environment variables and .env files.
Provides a singleton configuration instance for the runtime.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import UnicacheConfig

logger = logging.getLogger(__name__)

_config_instance: UnicacheConfig | None = None


def _float(name: str, default: str) -> float:
    raw = os.getenv(name, default).strip()
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be a number",
            details={"env": name, "value": raw},
        ) from e


def _int(name: str, default: str) -> int:
    raw = os.getenv(name, default).strip()
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be an integer",
            details={"env": name, "value": raw},
        ) from e


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> UnicacheConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated UnicacheConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    env_path = Path(env_file) if env_file else Path.cwd() / ".env"

    if env_path.exists():
        logger.info(f"Loading environment from {env_path}")
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                f"Failed to load .env file from {env_path}: {e}",
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    # The backend is never configured directly: a connection string selects redis
    config_dict = {
        "environment": os.getenv("ENVIRONMENT", "development"),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "cache": {
            "connection_string": os.getenv("REDIS_CONNECTION"),
            "default_ttl_minutes": _float("CACHE_DEFAULT_TTL_MINUTES", "1"),
            "max_entries": _int("CACHE_MAX_ENTRIES", "100000"),
        },
    }

    try:
        _config_instance = UnicacheConfig(**config_dict)  # type: ignore[arg-type]
        logger.info(
            f"Configuration loaded successfully (environment: {_config_instance.environment})",
            extra={
                "environment": _config_instance.environment,
                "cache_backend": _config_instance.cache.backend.value,
            },
        )
        return _config_instance
    except ValidationError as e:
        logger.error(
            f"Configuration validation failed: {e}",
            extra={"validation_errors": e.errors(), "config_dict_keys": list(config_dict.keys())},
            exc_info=True,
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your environment variables and configuration.",
            details={"validation_errors": e.errors()},
        ) from e


def get_config() -> UnicacheConfig:
    """
    Get the current configuration instance, loading it on first access.

    Returns:
        Current UnicacheConfig instance
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> UnicacheConfig:
    """
    Force reload configuration.

    Args:
        env_file: Optional path to .env file

    Returns:
        Reloaded UnicacheConfig instance
    """
    return load_config(env_file=env_file, reload=True)


def configure_logging(level: str | None = None) -> None:
    """
    Apply the configured log level to the package logger.

    Args:
        level: Log level name; defaults to the loaded configuration's log_level
    """
    if level is None:
        configured = get_config().log_level
        level = getattr(configured, "value", configured)
    logging.getLogger("unicache").setLevel(level.upper())
