"""
Body codecs.

A marshaler turns a request body value into a `Body` (bytes plus their length,
or a chunk iterator whose length may be unknown). An unmarshaler writes a
response body into a caller-owned destination in place.

Destinations must be mutable: a `Ref` box, a `dict`, a `list`, a `bytearray`
or a pydantic model instance. Immutable values such as `str` are rejected with
`NotAReferenceError`, since there is nothing to write into.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeAlias, TypeVar

import pydantic_core
from pydantic import BaseModel, TypeAdapter

from .exceptions import MarshalError, NotAReferenceError, UnmarshalError

T = TypeVar("T")

_BY_VALUE_TYPES = (str, bytes, int, float, complex, bool, tuple, frozenset)


@dataclass(slots=True)
class Body:
    """
    Marshaled request body.

    `length` is the exact number of bytes `content` produces, or None when it
    is not known up front (the transport then uses chunked encoding).
    """

    content: bytes | Iterable[bytes]
    length: int | None = None


@dataclass(slots=True)
class Ref(Generic[T]):
    """
    Settable box used as a decode destination.

    When `schema` is given, the JSON unmarshaler validates the payload against
    it (any type pydantic understands, e.g. a model class or `list[Item]`).
    """

    value: T | None = None
    schema: Any = None


Marshaler: TypeAlias = Callable[[Any], Body]
Unmarshaler: TypeAlias = Callable[[bytes, Any], None]


def bytes_to_body(data: bytes | bytearray | memoryview | None) -> Body:
    """Wrap a byte string as a `Body` of known length."""
    if data is None:
        raise MarshalError("bytes_to_body received None instead of bytes.")
    content = bytes(data)
    return Body(content=content, length=len(content))


def str_to_body(text: str) -> Body:
    """Encode `text` as UTF-8 and wrap it as a `Body` of known length."""
    return bytes_to_body(text.encode("utf-8"))


def _reject_by_value(destination: Any) -> None:
    if isinstance(destination, _BY_VALUE_TYPES):
        raise NotAReferenceError(
            "You must pass the destination by reference: wrap it in a Ref "
            f"(e.g. Ref[str]()) instead of passing a {type(destination).__name__} value."
        )


# =============================================================================
# Text
# =============================================================================


def text_marshaler(value: Any) -> Body:
    """Marshal `str` or bytes-like values as a plain text body."""
    if isinstance(value, str):
        return str_to_body(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes_to_body(value)
    raise MarshalError(
        f"Did not know how to use the body as text: got {type(value).__name__}."
    )


def text_unmarshaler(data: bytes, destination: Any) -> None:
    """
    Store the body as UTF-8 text in a `Ref`, or as raw bytes in a `bytearray`.

    Bodies that are not valid UTF-8 are refused for a `Ref`; decode into a
    `bytearray` to keep them byte for byte.
    """
    if isinstance(destination, Ref):
        if destination.value is not None and not isinstance(destination.value, str):
            raise UnmarshalError(
                "Text can only be unmarshaled into a Ref holding a str, "
                f"not {type(destination.value).__name__}."
            )
        try:
            destination.value = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise UnmarshalError(
                f"Response body is not valid UTF-8 text ({e}); use a bytearray destination "
                "for raw bytes."
            ) from e
        return
    if isinstance(destination, bytearray):
        destination[:] = data
        return
    _reject_by_value(destination)
    raise UnmarshalError(
        f"Did not know how to unmarshal the text coming back into {type(destination).__name__}."
    )


# =============================================================================
# JSON
# =============================================================================


def json_marshaler(value: Any) -> Body:
    """Marshal any value pydantic can serialize (models, dataclasses, plain data) as JSON."""
    try:
        return bytes_to_body(pydantic_core.to_json(value))
    except pydantic_core.PydanticSerializationError as e:
        raise MarshalError(f"Could not marshal {type(value).__name__} as JSON: {e}") from e


def _load_json(data: bytes) -> Any:
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise UnmarshalError(f"Response body is not valid JSON: {e}") from e


def json_unmarshaler(data: bytes, destination: Any) -> None:
    """
    Decode a JSON body into `destination` in place.

    - `Ref`: `value` is replaced (validated against `schema` if set)
    - `dict`: cleared and updated; the body must be a JSON object
    - `list`: contents replaced; the body must be a JSON array
    - pydantic model instance: validated against its class, fields assigned
    """
    _reject_by_value(destination)

    if isinstance(destination, Ref):
        if destination.schema is None:
            destination.value = _load_json(data)
            return
        try:
            destination.value = TypeAdapter(destination.schema).validate_json(data)
        except ValueError as e:
            raise UnmarshalError(f"Response body failed validation: {e}") from e
        return

    if isinstance(destination, BaseModel):
        model_cls = type(destination)
        try:
            parsed = model_cls.model_validate_json(data)
            for name in model_cls.model_fields:
                setattr(destination, name, getattr(parsed, name))
        except ValueError as e:
            raise UnmarshalError(
                f"Could not unmarshal JSON into {model_cls.__name__}: {e}"
            ) from e
        return

    if isinstance(destination, dict):
        decoded = _load_json(data)
        if not isinstance(decoded, dict):
            raise UnmarshalError("Expected a JSON object for a dict destination.")
        destination.clear()
        destination.update(decoded)
        return

    if isinstance(destination, list):
        decoded = _load_json(data)
        if not isinstance(decoded, list):
            raise UnmarshalError("Expected a JSON array for a list destination.")
        destination[:] = decoded
        return

    raise UnmarshalError(
        f"Did not know how to unmarshal JSON into {type(destination).__name__}."
    )


__all__ = [
    "Body",
    "Marshaler",
    "Ref",
    "Unmarshaler",
    "bytes_to_body",
    "json_marshaler",
    "json_unmarshaler",
    "str_to_body",
    "text_marshaler",
    "text_unmarshaler",
]
