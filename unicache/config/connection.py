"""
Unicache — Redis Connection Strings

Parses the connection string handed to Cache.set_connection() into settings
redis-py clients can be built from.

Two forms are accepted:

- URL form understood by redis-py directly:
      redis://[[user]:password@]host[:port][/db]
      rediss://...   (TLS)
      unix:///path/to/redis.sock
- Endpoint-list form:
      host[:port][,host[:port]...][,option=value...]
  e.g. "localhost:6379,abortConnect=False,connectTimeout=5000,allowAdmin=true"

The first endpoint serves key operations; clear() visits every endpoint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 6379

_URL_SCHEMES = ("redis://", "rediss://", "unix://")
_TRUE_VALUES = ("true", "1", "yes")
_FALSE_VALUES = ("false", "0", "no")


@dataclass(frozen=True)
class RedisEndpoint:
    """A single host/port pair from an endpoint-list connection string."""

    host: str
    port: int = DEFAULT_PORT

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class ConnectionSettings:
    """
    Parsed connection string.

    Attributes:
        raw: The connection string as given
        url: Set for URL-form strings, None otherwise
        endpoints: Endpoints of an endpoint-list string (empty for URL form)
        options: redis-py client keyword arguments derived from the options
        allow_admin: Whether the string granted admin commands (informational)
    """

    raw: str
    url: str | None = None
    endpoints: tuple[RedisEndpoint, ...] = ()
    options: dict[str, Any] = field(default_factory=dict)
    allow_admin: bool = False

    @property
    def is_url(self) -> bool:
        return self.url is not None

    @property
    def primary(self) -> RedisEndpoint | None:
        """Endpoint that serves key operations (None for URL form)."""
        return self.endpoints[0] if self.endpoints else None

    def client_kwargs(self, endpoint: RedisEndpoint | None = None) -> dict[str, Any]:
        """
        Keyword arguments for redis.Redis / redis.asyncio.Redis.

        Args:
            endpoint: Endpoint to target (defaults to the primary endpoint)

        Returns:
            Constructor kwargs; always decode responses to str
        """
        kwargs: dict[str, Any] = {"decode_responses": True, **self.options}
        if self.is_url:
            return kwargs

        target = endpoint or self.primary
        if target is None:
            raise ConfigurationError("Connection string has no endpoints", details={"connection": self.raw})
        kwargs["host"] = target.host
        kwargs["port"] = target.port
        return kwargs

    def describe(self) -> str:
        """Connection description safe for logs (no password)."""
        if self.is_url:
            return self.url.split("@")[-1] if self.url else ""
        return ",".join(str(ep) for ep in self.endpoints)


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"Connection option '{name}' must be true or false",
        details={"option": name, "value": value},
    )


def _parse_number(name: str, value: str, cast: type = int) -> Any:
    try:
        return cast(value.strip())
    except ValueError as e:
        raise ConfigurationError(
            f"Connection option '{name}' must be numeric",
            details={"option": name, "value": value},
        ) from e


def _parse_endpoint(token: str) -> RedisEndpoint:
    if token.startswith("["):
        # [ipv6]:port
        host, _, rest = token[1:].partition("]")
        port_text = rest[1:] if rest.startswith(":") else ""
    elif token.count(":") == 1:
        host, _, port_text = token.partition(":")
    else:
        host, port_text = token, ""

    host = host.strip()
    if not host:
        raise ConfigurationError("Connection endpoint has an empty host", details={"endpoint": token})

    port = _parse_number("port", port_text) if port_text else DEFAULT_PORT
    if not 0 < port < 65536:
        raise ConfigurationError("Connection endpoint port out of range", details={"endpoint": token})
    return RedisEndpoint(host=host, port=port)


def _apply_option(name: str, value: str, options: dict[str, Any]) -> bool:
    """Translate one option into client kwargs; returns the allowAdmin flag when seen."""
    key = name.strip().lower()

    if key == "password":
        options["password"] = value
    elif key == "user":
        options["username"] = value
    elif key == "ssl":
        options["ssl"] = _parse_bool(name, value)
    elif key == "defaultdatabase":
        options["db"] = _parse_number(name, value)
    elif key == "connecttimeout":
        options["socket_connect_timeout"] = _parse_number(name, value, float) / 1000
    elif key == "synctimeout":
        options["socket_timeout"] = _parse_number(name, value, float) / 1000
    elif key == "keepalive":
        options["socket_keepalive"] = _parse_number(name, value) > 0
    elif key == "name":
        options["client_name"] = value
    elif key == "allowadmin":
        return _parse_bool(name, value)
    elif key == "abortconnect":
        # redis-py never connects eagerly, so there is nothing to abort
        _parse_bool(name, value)
    else:
        logger.debug("Ignoring unsupported connection option '%s'", name, extra={"option": name})
    return False


def parse_connection_string(connection_string: str) -> ConnectionSettings:
    """
    Parse a Redis connection string.

    Args:
        connection_string: URL or endpoint-list connection string

    Returns:
        ConnectionSettings

    Raises:
        ConfigurationError: If the string is empty or malformed
    """
    raw = (connection_string or "").strip()
    if not raw:
        raise ConfigurationError("The redis connection is null or empty")

    if raw.lower().startswith(_URL_SCHEMES):
        return ConnectionSettings(raw=raw, url=raw)

    endpoints: list[RedisEndpoint] = []
    options: dict[str, Any] = {}
    allow_admin = False

    for token in (part.strip() for part in raw.split(",")):
        if not token:
            continue
        if "=" in token:
            name, _, value = token.partition("=")
            allow_admin = _apply_option(name, value.strip(), options) or allow_admin
        else:
            endpoints.append(_parse_endpoint(token))

    if not endpoints:
        raise ConfigurationError("Connection string has no endpoints", details={"connection": raw})

    return ConnectionSettings(
        raw=raw,
        endpoints=tuple(endpoints),
        options=options,
        allow_admin=allow_admin,
    )
