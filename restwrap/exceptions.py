"""
Exception hierarchy for restwrap.

Every error raised by the client derives from `RestwrapError`. Errors that are
discovered after the server has answered carry that answer in `.response`, so
callers can still inspect status, headers and body.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class RestwrapError(Exception):
    """Base class for all restwrap errors."""

    def __init__(self, message: str, *, response: httpx.Response | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.response = response

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Configuration
# =============================================================================


class ConfigurationError(RestwrapError):
    """Missing or unsupported client configuration (e.g. a None base URL)."""


# =============================================================================
# Dispatch
# =============================================================================


class TransportError(RestwrapError):
    """The transport failed to produce a response (network, DNS, TLS, timeout)."""


class MutatorError(RestwrapError):
    """A request or response mutator raised."""


class RequestMutatorError(MutatorError):
    """A request mutator raised; the request was never sent."""


class ResponseMutatorError(MutatorError):
    """A response mutator raised; `.response` holds the received response."""


# =============================================================================
# Body codecs
# =============================================================================


class MarshalError(RestwrapError):
    """The request body could not be marshaled; no request was sent."""


class UnmarshalError(RestwrapError):
    """The response body could not be decoded into its destination."""


class NotAReferenceError(UnmarshalError):
    """The destination was passed by value and cannot be written into."""


__all__ = [
    "ConfigurationError",
    "MarshalError",
    "MutatorError",
    "NotAReferenceError",
    "RequestMutatorError",
    "ResponseMutatorError",
    "RestwrapError",
    "TransportError",
    "UnmarshalError",
]
