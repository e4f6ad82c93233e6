"""
Unicache — Serialization Adapter

Translates values to and from the text payloads stored by both backends.

- Primitives (str, bool, int, float, Decimal) are stored as their natural text.
- Everything else is stored as compact, key-sorted UTF-8 JSON. pydantic's
  to_jsonable_python handles models, dataclasses, datetimes, UUIDs, sets, etc.
- Typed decoding goes through a pydantic TypeAdapter for the requested type.
"""

from __future__ import annotations

import functools
import json
import logging
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from ..errors import SerializationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

PRIMITIVE_TYPES: tuple[type, ...] = (str, bool, int, float, Decimal)


def is_primitive(value: Any) -> bool:
    """Check whether a value is stored as its natural text form."""
    return isinstance(value, PRIMITIVE_TYPES)


def to_text(value: Any) -> str:
    """
    Convert a value to its stored text payload.

    Args:
        value: Primitive or structured value

    Returns:
        Natural text for primitives, JSON for everything else

    Raises:
        SerializationError: If a structured value cannot be encoded
    """
    if type(value) is str:
        return value
    if isinstance(value, Enum) and is_primitive(value):
        # Members cross as their value, never as the member itself
        return to_text(value.value)
    if isinstance(value, str):
        return str(value)
    if isinstance(value, bool):
        # JSON spelling, so typed decoding reads it back
        return "true" if value else "false"
    if is_primitive(value):
        return str(value)
    return encode(value)


def encode(value: Any) -> str:
    """
    Serialize a structured value to deterministic JSON text.

    Raises:
        SerializationError: If the value has no JSON representation
    """
    try:
        return json.dumps(
            to_jsonable_python(value),
            ensure_ascii=False,
            separators=(",", ":"),
            sort_keys=True,
        )
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise SerializationError(
            f"Failed to serialize value of type {type(value).__name__}: {e}",
            details={"value_type": type(value).__name__, "error": str(e)},
        ) from e


@functools.lru_cache(maxsize=256)
def _adapter(cls: Any) -> TypeAdapter[Any]:
    return TypeAdapter(cls)


def _preview(text: str) -> str:
    return text[:100] if len(text) > 100 else text


def decode(text: str | None, cls: type[T] | Any = None) -> T | Any | None:
    """
    Deserialize a stored text payload.

    Args:
        text: Stored payload (None when the key was missing)
        cls: Requested type; None returns plain JSON data

    Returns:
        Decoded value, or None when text is absent, empty, JSON null,
        or not parseable at all

    Raises:
        SerializationError: If text parses but does not fit cls
    """
    if text is None or text == "":
        return None

    if cls is None:
        try:
            return json.loads(text)
        except ValueError as e:
            logger.warning(
                f"Failed to decode JSON from cache payload: {e}",
                extra={"data_preview": _preview(text), "error": str(e)},
            )
            return None

    if cls is str:
        return text

    if text.strip() == "null":
        return None

    if isinstance(cls, type) and issubclass(cls, str):
        # str-based types such as StrEnum are stored as their plain text, not JSON
        try:
            return _adapter(cls).validate_python(text)
        except ValidationError as e:
            raise SerializationError(
                f"Cached payload does not match {cls.__name__}",
                details={"target": cls.__name__, "validation_errors": e.errors(include_url=False)},
            ) from e

    if cls is float:
        # Natural text covers inf and nan, which JSON cannot spell
        try:
            return float(text.strip())
        except ValueError as e:
            raise SerializationError(
                "Cached payload is not a float",
                details={"target": "float", "data_preview": _preview(text)},
            ) from e

    if cls is Decimal:
        try:
            return Decimal(text.strip())
        except InvalidOperation as e:
            raise SerializationError(
                "Cached payload is not a decimal",
                details={"target": "Decimal", "data_preview": _preview(text)},
            ) from e

    try:
        return _adapter(cls).validate_json(text)
    except ValidationError as e:
        if all(err["type"] == "json_invalid" for err in e.errors()):
            logger.warning(
                "Cached payload is not valid JSON, treating as absent",
                extra={"target": getattr(cls, "__name__", str(cls)), "data_preview": _preview(text)},
            )
            return None
        raise SerializationError(
            f"Cached payload does not match {getattr(cls, '__name__', cls)}",
            details={
                "target": getattr(cls, "__name__", str(cls)),
                "validation_errors": e.errors(include_url=False),
            },
        ) from e
