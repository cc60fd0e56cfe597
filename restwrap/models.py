"""
Per-call request parameters.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias

HeaderSet: TypeAlias = Mapping[str, "str | Sequence[str]"]
QuerySet: TypeAlias = Mapping[str, "str | Sequence[str]"]

# Status code -> destination, a tuple of destinations, or None (skip).
DecodeMap: TypeAlias = Mapping[int, Any]


@dataclass(slots=True)
class RequestParams:
    """
    A single request made through `Client.request`.

    Attributes:
        path: Appended verbatim to the client's base URL path
        headers: Header overrides; a key here replaces the client default
        query: Query overrides; a key here replaces the client default
        body: Marshaled with the client's marshaler when not None
        decode: Status code to destination(s) the response body is decoded into
    """

    path: str = ""
    headers: HeaderSet | None = None
    query: QuerySet | None = None
    body: Any | None = None
    decode: DecodeMap | None = None


__all__ = ["DecodeMap", "HeaderSet", "QuerySet", "RequestParams"]
