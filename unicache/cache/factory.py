"""
Unicache — Cache Factory

Canonical factory for creating cache facades from configuration.

Key points:
- Named registry: create_cache() returns the same facade for the same name
- Routing is never chosen here: a facade routes to Redis whenever its
  context holds a connection string (REDIS_CONNECTION, or set_connection())
- All configuration is typed and validated via Pydantic models

Examples:
    from unicache.cache.factory import create_cache, get_cache

    # Uses env-configured connection (local store when REDIS_CONNECTION is unset)
    cache = create_cache()

    # Or explicitly supply a CacheConfig (e.g., for tests)
    from unicache.config import CacheConfig
    cfg = CacheConfig(connection_string="localhost:6379", default_ttl_minutes=10)
    redis_cache = create_cache(cfg, name="shared")
"""

from __future__ import annotations

import logging

from ..config import CacheConfig, get_config
from ..errors import ConfigurationError
from .context import CacheContext
from .facade import Cache

logger = logging.getLogger(__name__)

# Global cache instances registry
_cache_instances: dict[str, Cache] = {}


def create_cache(
    config: CacheConfig | None = None,
    name: str = "default",
) -> Cache:
    """
    Create a cache facade based on configuration.

    Args:
        config: Cache configuration (uses global config if not provided)
        name: Cache instance name (for multiple independent caches)

    Returns:
        Configured Cache facade

    Raises:
        ConfigurationError: If cache configuration is invalid
    """
    if name in _cache_instances:
        logger.debug("Returning existing cache instance: %s", name)
        return _cache_instances[name]

    if config is None:
        config = get_config().cache

    logger.info(
        "Creating cache instance '%s' with backend: %s",
        name,
        config.backend.value,
        extra={"cache_name": name, "backend": config.backend.value},
    )

    try:
        context = CacheContext.from_config(config)
        cache = Cache(context, default_minutes=config.default_ttl_minutes)
    except ConfigurationError:
        raise
    except Exception as e:
        logger.error(
            "Unexpected error creating cache instance '%s': %s",
            name,
            e,
            extra={"cache_name": name, "backend": config.backend.value, "error": str(e)},
            exc_info=True,
        )
        raise ConfigurationError(
            f"Failed to create cache instance '{name}': {e}",
            details={"cache_name": name, "backend": config.backend.value, "error": str(e)},
        ) from e

    _cache_instances[name] = cache
    logger.info("Cache instance '%s' created successfully", name, extra={"cache_name": name})
    return cache


def get_cache(name: str = "default") -> Cache:
    """
    Get an existing cache facade by name, creating it from global config if absent.

    Args:
        name: Cache instance name

    Returns:
        Cache facade
    """
    if name not in _cache_instances:
        logger.debug("Cache instance '%s' not found, creating new instance", name)
        return create_cache(name=name)

    return _cache_instances[name]


async def close_all_caches() -> None:
    """
    Close all cache instances and release Redis connections.

    Should be called during graceful shutdown.
    """
    if not _cache_instances:
        logger.debug("No cache instances to close")
        return

    logger.info("Closing %d cache instance(s)...", len(_cache_instances))

    for name, cache in list(_cache_instances.items()):
        try:
            await cache.aclose()
            logger.info("Closed cache instance: %s", name)
        except Exception as e:
            # Keep closing the rest; shutdown must not stop at the first failure
            logger.error(
                "Error closing cache instance '%s': %s",
                name,
                e,
                extra={"cache_name": name, "error": str(e)},
                exc_info=True,
            )

    _cache_instances.clear()
    logger.info("All cache instances closed")


def reset_cache_factory() -> None:
    """
    Clear all instance references without closing them.

    Used for testing. Use close_all_caches() for proper cleanup.
    """
    count = len(_cache_instances)
    _cache_instances.clear()
    logger.debug("Reset cache factory, cleared %d instance reference(s)", count)


def list_cache_instances() -> list[str]:
    """List all registered cache instance names."""
    return list(_cache_instances.keys())
