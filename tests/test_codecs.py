from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone

import pytest
from pydantic import BaseModel, ConfigDict

from restwrap.codecs import (
    Body,
    Ref,
    bytes_to_body,
    json_marshaler,
    json_unmarshaler,
    str_to_body,
    text_marshaler,
    text_unmarshaler,
)
from restwrap.exceptions import MarshalError, NotAReferenceError, UnmarshalError


class Item(BaseModel):
    name: str
    count: int = 0


class FrozenItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str


@dataclass
class Point:
    x: int
    y: int


def _read(body: Body) -> bytes:
    if isinstance(body.content, bytes):
        return body.content
    return b"".join(body.content)


# =============================================================================
# Body helpers
# =============================================================================


def test_str_to_body_reports_utf8_length() -> None:
    body = str_to_body("héllo")
    assert body.content == "héllo".encode()
    assert body.length == 6


def test_bytes_to_body_rejects_none() -> None:
    with pytest.raises(MarshalError):
        bytes_to_body(None)


# =============================================================================
# Text codec
# =============================================================================


def test_text_round_trip() -> None:
    body = text_marshaler("hello")
    result: Ref[str] = Ref()

    text_unmarshaler(_read(body), result)

    assert result.value == "hello"
    assert body.length == 5


def test_text_marshaler_accepts_bytes() -> None:
    assert _read(text_marshaler(b"raw")) == b"raw"


@pytest.mark.parametrize("value", [42, {"a": 1}, ["x"], object()])
def test_text_marshaler_rejects_non_text(value: object) -> None:
    with pytest.raises(MarshalError, match="as text"):
        text_marshaler(value)


def test_text_unmarshaler_fills_bytearray() -> None:
    buf = bytearray(b"old contents")
    text_unmarshaler(b"new", buf)
    assert buf == bytearray(b"new")


def test_text_unmarshaler_refuses_invalid_utf8_text() -> None:
    ref: Ref[str] = Ref()
    with pytest.raises(UnmarshalError, match="bytearray"):
        text_unmarshaler(b"caf\xe9", ref)
    assert ref.value is None

    buf = bytearray()
    text_unmarshaler(b"caf\xe9", buf)
    assert buf == bytearray(b"caf\xe9")


def test_text_unmarshaler_rejects_ref_holding_non_string() -> None:
    with pytest.raises(UnmarshalError):
        text_unmarshaler(b"x", Ref(value=3))


def test_text_unmarshaler_rejects_unknown_destination() -> None:
    with pytest.raises(UnmarshalError, match="Did not know"):
        text_unmarshaler(b"x", {"not": "text"})


# =============================================================================
# JSON codec
# =============================================================================


def test_json_marshaler_handles_models_dataclasses_and_datetimes() -> None:
    assert json.loads(_read(json_marshaler(Item(name="a", count=2)))) == {"name": "a", "count": 2}
    assert json.loads(_read(json_marshaler(Point(1, 2)))) == {"x": 1, "y": 2}
    stamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert json.loads(_read(json_marshaler({"at": stamp}))) == {"at": "2024-01-02T03:04:05Z"}


def test_json_marshaler_rejects_unserializable() -> None:
    with pytest.raises(MarshalError):
        json_marshaler(object())


def test_json_unmarshaler_into_plain_ref() -> None:
    ref: Ref[dict] = Ref()
    json_unmarshaler(b'{"a": [1, 2]}', ref)
    assert ref.value == {"a": [1, 2]}


def test_json_unmarshaler_validates_against_ref_schema() -> None:
    ref: Ref[list[Item]] = Ref(schema=list[Item])
    json_unmarshaler(b'[{"name": "a"}, {"name": "b", "count": 3}]', ref)
    assert ref.value == [Item(name="a"), Item(name="b", count=3)]


def test_json_unmarshaler_schema_failure_is_unmarshal_error() -> None:
    with pytest.raises(UnmarshalError):
        json_unmarshaler(b'{"count": 1}', Ref(schema=Item))


def test_json_unmarshaler_updates_model_in_place() -> None:
    item = Item(name="before")
    json_unmarshaler(b'{"name": "after", "count": 7}', item)
    assert item.name == "after"
    assert item.count == 7


def test_json_unmarshaler_frozen_model_is_unmarshal_error() -> None:
    with pytest.raises(UnmarshalError):
        json_unmarshaler(b'{"name": "after"}', FrozenItem(name="before"))


def test_json_unmarshaler_replaces_dict_and_list_contents() -> None:
    mapping = {"stale": True}
    json_unmarshaler(b'{"fresh": 1}', mapping)
    assert mapping == {"fresh": 1}

    items = [1, 2, 3]
    json_unmarshaler(b'["a"]', items)
    assert items == ["a"]


def test_json_unmarshaler_shape_mismatch() -> None:
    with pytest.raises(UnmarshalError, match="JSON object"):
        json_unmarshaler(b"[1]", {})
    with pytest.raises(UnmarshalError, match="JSON array"):
        json_unmarshaler(b"{}", [])


def test_json_unmarshaler_invalid_json() -> None:
    with pytest.raises(UnmarshalError, match="not valid JSON"):
        json_unmarshaler(b"{nope", Ref())


# =============================================================================
# By-value destinations
# =============================================================================


@pytest.mark.parametrize("unmarshaler", [text_unmarshaler, json_unmarshaler])
@pytest.mark.parametrize("destination", ["", "text", b"bytes", 0, 1.5, True, (1,)])
def test_by_value_destination_must_be_passed_by_reference(
    unmarshaler, destination: object
) -> None:
    with pytest.raises(NotAReferenceError, match="by reference"):
        unmarshaler(b'"payload"', destination)
