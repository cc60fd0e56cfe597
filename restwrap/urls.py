"""
URL composition and header/query merging.

Header and query sets are plain dicts mapping a key to either one string value
or a list of values; other scalars (e.g. `2`) are sent as their `str()`.
Merging replaces the whole value list of a key; it never appends to it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeAlias
from urllib.parse import quote, urlsplit, urlunsplit

import httpx

from .exceptions import ConfigurationError

ValueSet: TypeAlias = dict[str, "str | list[str]"]

_SUPPORTED_SCHEMES = frozenset({"http", "https"})
# Characters left untouched when a composed path is re-quoted.
_PATH_SAFE = "/:@!$&'()*+,;=%-._~"


def normalize_base_url(url: str | httpx.URL | None) -> str:
    """
    Validate a base URL and drop its query component.

    Scheme, credentials, host, port, path and fragment are kept as given.
    Default query parameters belong in `Client.query`, never in the base URL.

    Raises:
        ConfigurationError: If `url` is None, has no host, or uses a scheme
            other than http/https.
    """
    if url is None:
        raise ConfigurationError("Please specify a non-None base URL.")
    parts = urlsplit(str(url))
    if parts.scheme.lower() not in _SUPPORTED_SCHEMES:
        raise ConfigurationError(
            f"Unsupported base URL scheme {parts.scheme!r}; expected http or https."
        )
    if not parts.netloc:
        raise ConfigurationError(f"Base URL {str(url)!r} has no host.")
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", parts.fragment))


def compose_url(base: str, path: str) -> str:
    """
    Append `path` to the path of `base` by plain string concatenation.

    No slash normalization and no `..` resolution happens; callers own slash
    placement. The only adjustment is a leading `/` when the concatenated path
    would otherwise be relative to the host. Any query on `base` is dropped.
    """
    parts = urlsplit(base)
    full_path = parts.path + path
    if parts.netloc and full_path and not full_path.startswith("/"):
        full_path = "/" + full_path
    full_path = quote(full_path, safe=_PATH_SAFE)
    return urlunsplit((parts.scheme, parts.netloc, full_path, "", parts.fragment))


def _as_list(value: object) -> list[str]:
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    if isinstance(value, (bytes, bytearray)):
        return [bytes(value).decode("latin-1")]
    return [str(value)]


def merge_headers(
    default: Mapping[str, Any] | None,
    override: Mapping[str, Any] | None,
) -> httpx.Headers:
    """
    Merge default headers with per-call overrides into a fresh `httpx.Headers`.

    Keys compare case-insensitively. The override's values replace the
    default's values for the same key.
    """
    merged: dict[str, tuple[str, list[str]]] = {}
    for current in (default, override):
        if not current:
            continue
        for name, value in current.items():
            merged[name.lower()] = (name, _as_list(value))
    return httpx.Headers([(name, v) for name, values in merged.values() for v in values])


def merge_query(
    default: Mapping[str, Any] | None,
    override: Mapping[str, Any] | None,
) -> dict[str, list[str]]:
    """Merge default query parameters with per-call overrides into a fresh dict."""
    merged: dict[str, list[str]] = {}
    for current in (default, override):
        if not current:
            continue
        for key, value in current.items():
            merged[key] = _as_list(value)
    return merged


def copy_values(values: Mapping[str, Any] | None) -> ValueSet | None:
    """Deep copy a header/query set; list values are copied, not shared."""
    if values is None:
        return None
    return {k: list(v) if isinstance(v, (list, tuple)) else v for k, v in values.items()}


__all__ = [
    "ValueSet",
    "compose_url",
    "copy_values",
    "merge_headers",
    "merge_query",
    "normalize_base_url",
]
