"""
Client configuration.

`ClientConfig` collects everything needed to build a `Client`. It can be read
from the environment (`RESTWRAP_*` variables), optionally after loading a
`.env` file.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import ConfigurationError
from .urls import ValueSet

ENV_BASE_URL = "RESTWRAP_BASE_URL"
ENV_TIMEOUT = "RESTWRAP_TIMEOUT"
ENV_LOG_REQUESTS = "RESTWRAP_LOG_REQUESTS"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def _maybe_load_dotenv(
    *,
    load_dotenv: bool,
    dotenv_path: str | os.PathLike[str] | None = None,
    override: bool = False,
) -> bool:
    """
    Load a `.env` file into the process environment when requested.

    Raises:
        ImportError: If loading is requested but python-dotenv is not installed.
    """
    if not load_dotenv:
        return False
    try:
        from dotenv import load_dotenv as _load_dotenv
    except ImportError as e:
        raise ImportError(
            "Optional .env support requires python-dotenv; install `restwrap[dotenv]`."
        ) from e
    path = Path(dotenv_path) if dotenv_path is not None else None
    return bool(_load_dotenv(dotenv_path=path, override=override))


def _parse_timeout(raw: str) -> float | None:
    text = raw.strip()
    if not text:
        return None
    try:
        timeout = float(text)
    except ValueError as e:
        raise ConfigurationError(f"{ENV_TIMEOUT} must be a number of seconds, got {raw!r}") from e
    if timeout <= 0:
        raise ConfigurationError(f"{ENV_TIMEOUT} must be positive, got {raw!r}")
    return timeout


def _parse_bool(name: str, raw: str) -> bool:
    text = raw.strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean (1/0, true/false), got {raw!r}")


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """
    Settings used by `Client.from_config`.

    Attributes:
        base_url: Base URL every request path is appended to
        timeout: Timeout in seconds for a dedicated transport; None uses the
            shared default transport
        log_requests: Emit DEBUG log records for each request and response
        headers: Default headers
        query: Default query parameters
    """

    base_url: str
    timeout: float | None = None
    log_requests: bool = False
    headers: ValueSet = field(default_factory=dict)
    query: ValueSet = field(default_factory=dict)

    @classmethod
    def from_env(
        cls,
        *,
        load_dotenv: bool = False,
        dotenv_path: str | os.PathLike[str] | None = None,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> ClientConfig:
        """
        Build a config from `RESTWRAP_*` environment variables.

        Args:
            load_dotenv: Load a `.env` file first (requires python-dotenv)
            dotenv_path: Path of the `.env` file (default: search from cwd)
            environ: Mapping to read instead of `os.environ`
            **overrides: Field values that win over the environment (None is ignored)

        Raises:
            ConfigurationError: If the base URL is missing or a value is malformed.
        """
        _maybe_load_dotenv(load_dotenv=load_dotenv, dotenv_path=dotenv_path)
        env = os.environ if environ is None else environ

        values: dict[str, Any] = {}
        base_url = env.get(ENV_BASE_URL, "").strip()
        if base_url:
            values["base_url"] = base_url
        if ENV_TIMEOUT in env:
            values["timeout"] = _parse_timeout(env[ENV_TIMEOUT])
        if ENV_LOG_REQUESTS in env:
            values["log_requests"] = _parse_bool(ENV_LOG_REQUESTS, env[ENV_LOG_REQUESTS])
        values.update({k: v for k, v in overrides.items() if v is not None})

        if not values.get("base_url"):
            raise ConfigurationError(f"Missing base URL: set {ENV_BASE_URL}.")
        return cls(**values)


__all__ = ["ClientConfig", "ENV_BASE_URL", "ENV_LOG_REQUESTS", "ENV_TIMEOUT"]
