"""
Request/response mutator pipeline.

Request mutators run after the body is marshaled and the request is fully
built, before the transport sends it. Response mutators run after the transport
returns, before the body is decoded. Both run strictly in registration order
and stop at the first one that raises.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import httpx

from .exceptions import RequestMutatorError, ResponseMutatorError


class RequestMutator(Protocol):
    def __call__(self, request: httpx.Request) -> None: ...


class ResponseMutator(Protocol):
    def __call__(self, response: httpx.Response) -> None: ...


def _describe(mutator: object) -> str:
    return getattr(mutator, "__qualname__", None) or type(mutator).__name__


def run_request_mutators(mutators: Sequence[RequestMutator], request: httpx.Request) -> None:
    for mutator in mutators:
        try:
            mutator(request)
        except Exception as e:
            raise RequestMutatorError(f"Request mutator {_describe(mutator)} failed: {e}") from e


def run_response_mutators(mutators: Sequence[ResponseMutator], response: httpx.Response) -> None:
    for mutator in mutators:
        try:
            mutator(response)
        except Exception as e:
            raise ResponseMutatorError(
                f"Response mutator {_describe(mutator)} failed: {e}", response=response
            ) from e


def json_content_type_mutator(request: httpx.Request) -> None:
    """Mark the request body as JSON."""
    request.headers["Content-Type"] = "application/json"


def json_accept_mutator(request: httpx.Request) -> None:
    """Ask the server for a JSON response."""
    request.headers["Accept"] = "application/json"


__all__ = [
    "RequestMutator",
    "ResponseMutator",
    "json_accept_mutator",
    "json_content_type_mutator",
    "run_request_mutators",
    "run_response_mutators",
]
