"""Structured decoding of JSON payloads returned by the native core."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Sequence, TypeVar

from pydantic import TypeAdapter, ValidationError

from .errors import CitadelError

logger = logging.getLogger(__name__)

T = TypeVar("T")

REPORT_PREFIX = "Unable to recognize data from backend: "

_CORRUPTION_TYPES = frozenset({"json_invalid", "json_type", "value_error", "assertion_error"})

# pydantic error types are named after the expected type ("int_parsing",
# "string_type", ...); these are the stems that read badly on their own.
_TYPE_NAMES = {
    "string": "str",
    "model": "object",
    "dict": "object",
    "list": "array",
    "tuple": "array",
    "bool": "bool",
    "int": "int",
    "float": "float",
    "literal": "literal",
    "enum": "enum",
}


@lru_cache(maxsize=None)
def _adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def format_path(location: Sequence[Any]) -> str:
    if not location:
        return "self"
    return "\\." + ".".join(str(part) for part in location)


def _expected_type(error_type: str) -> str:
    stem = error_type.split("_", 1)[0]
    return _TYPE_NAMES.get(stem, stem)


def describe_validation_error(exc: ValidationError) -> str:
    """Render the first validation error as one of four failure shapes."""

    errors = exc.errors(include_url=False)
    if not errors:  # pragma: no cover - pydantic always reports one
        return "data corrupted at `self`"
    first = errors[0]
    location = tuple(first.get("loc", ()))
    error_type = str(first.get("type", ""))

    if error_type == "missing":
        key = location[-1] if location else "self"
        return f"key `{key}` is not found at path `{format_path(location[:-1])}`"
    if error_type in _CORRUPTION_TYPES:
        return f"data corrupted at `{format_path(location)}`"
    if first.get("input", "") is None:
        return f"value at `{format_path(location)}` of `{_expected_type(error_type)}` type is not found"
    if error_type.endswith("_type") or error_type.endswith("_parsing"):
        return f"key at `{format_path(location)}` must be of `{_expected_type(error_type)}` type"
    return f"data corrupted at `{format_path(location)}`"


def decode_structured(data: bytes | str, model: type[T] | Any) -> T:
    """Decode JSON ``data`` as ``model``.

    Any validation failure is raised as a :class:`CitadelError` of kind
    ``INVALID_STRUCTURED_DATA`` naming the field path and the expectation.
    """

    try:
        return _adapter(model).validate_json(data)
    except ValidationError as exc:
        details = describe_validation_error(exc)
        logger.debug("Structured decode into %s failed: %s", getattr(model, "__name__", model), details)
        raise CitadelError.invalid_data(REPORT_PREFIX + details) from exc
