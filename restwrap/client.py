"""
The restwrap client.

`Client` keeps a base URL, default headers and query parameters, request and
response mutators and a body codec, and dispatches the standard HTTP verbs
through a transport (an `httpx.Client` by default).
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from typing import Any, Protocol
from urllib.parse import urlsplit, urlunsplit

import httpx

from .codecs import (
    Marshaler,
    Unmarshaler,
    json_marshaler,
    json_unmarshaler,
    text_marshaler,
    text_unmarshaler,
)
from .config import ClientConfig
from .exceptions import MarshalError, RestwrapError, TransportError, UnmarshalError
from .models import DecodeMap, HeaderSet, QuerySet, RequestParams
from .pipeline import (
    RequestMutator,
    ResponseMutator,
    json_accept_mutator,
    json_content_type_mutator,
    run_request_mutators,
    run_response_mutators,
)
from .urls import (
    ValueSet,
    compose_url,
    copy_values,
    merge_headers,
    merge_query,
    normalize_base_url,
)

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Anything that can send a built request and return its response."""

    def send(self, request: httpx.Request) -> httpx.Response: ...


_default_transport: httpx.Client | None = None
_default_transport_lock = threading.Lock()


def default_transport() -> httpx.Client:
    """Return the process-wide `httpx.Client` shared by clients with no transport set."""
    global _default_transport
    with _default_transport_lock:
        if _default_transport is None:
            _default_transport = httpx.Client()
        return _default_transport


def _url_for_log(url: httpx.URL) -> str:
    """Keep scheme/host/path; drop credentials, query and fragment."""
    parts = urlsplit(str(url))
    host = parts.netloc.rpartition("@")[2]
    return urlunsplit((parts.scheme, host, parts.path, "", ""))


def _content_length(response: httpx.Response) -> int | None:
    raw = response.headers.get("content-length")
    if raw is None:
        return None
    try:
        length = int(raw)
    except ValueError:
        return None
    return length if length >= 0 else None


class Client:
    """
    HTTP client with defaults, mutators and status-keyed response decoding.

    Example:
        ```python
        from restwrap import Client, Ref, setup_for_json

        client = setup_for_json(Client("https://api.example.com/v1"))
        client.headers["Authorization"] = "Bearer ..."

        user: Ref[dict] = Ref()
        problem: Ref[dict] = Ref()
        response = client.get("/users/42", decode={200: user, 404: problem})
        ```

    Errors are raised as `RestwrapError` subclasses. When the server has already
    answered (response mutator or decode failures) the exception's `response`
    attribute holds the response.

    Configuration (headers, query, mutators, codecs, base URL) is not locked.
    Treat a client as read-only once it is shared between threads; use
    `clone()` and customize the clone instead. Clones share the transport.
    """

    def __init__(
        self,
        base_url: str | httpx.URL,
        *,
        transport: Transport | None = None,
        log_requests: bool = False,
    ):
        """
        Args:
            base_url: Base URL request paths are appended to; any query is dropped
            transport: Object with a `send(request)` method; defaults to a
                shared `httpx.Client`
            log_requests: Log each request and response at DEBUG level

        Raises:
            ConfigurationError: If `base_url` is None or not an http(s) URL.
        """
        self._base_url = normalize_base_url(base_url)
        self._headers: ValueSet | None = None
        self._query: ValueSet | None = None
        self._request_mutators: list[RequestMutator] = []
        self._response_mutators: list[ResponseMutator] = []
        self._transport = transport
        self._marshaler: Marshaler | None = None
        self._unmarshaler: Unmarshaler | None = None
        self.log_requests = log_requests
        self._owned_transport: httpx.Client | None = None

    @classmethod
    def from_config(cls, config: ClientConfig, *, transport: Transport | None = None) -> Client:
        """
        Build a client from a `ClientConfig`.

        A dedicated `httpx.Client` is created when the config sets a timeout
        and no transport is passed; `close()` releases it.
        """
        owned: httpx.Client | None = None
        if transport is None and config.timeout is not None:
            owned = transport = httpx.Client(timeout=config.timeout)
        client = cls(config.base_url, transport=transport, log_requests=config.log_requests)
        client._owned_transport = owned
        client.headers = copy_values(config.headers)
        client.query = copy_values(config.query)
        return client

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_url={self._base_url!r})"

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport created by `from_config`; shared or injected transports stay open."""
        if self._owned_transport is not None:
            self._owned_transport.close()
            self._owned_transport = None

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def base_url(self) -> str:
        """Base URL (never carries a query component)."""
        return self._base_url

    @base_url.setter
    def base_url(self, value: str | httpx.URL) -> None:
        self._base_url = normalize_base_url(value)

    def set_base_url(self, url: str | httpx.URL) -> Client:
        """
        Replace the base URL, dropping any query component.

        Raises:
            ConfigurationError: If `url` is None or not an http(s) URL; the
                previous base URL is kept.
        """
        self.base_url = url
        return self

    @property
    def headers(self) -> ValueSet:
        """Default headers sent with every request; a list value sends the header repeatedly."""
        if self._headers is None:
            self._headers = {}
        return self._headers

    @headers.setter
    def headers(self, value: ValueSet | None) -> None:
        self._headers = value

    @property
    def query(self) -> ValueSet:
        """Default query parameters sent with every request."""
        if self._query is None:
            self._query = {}
        return self._query

    @query.setter
    def query(self, value: ValueSet | None) -> None:
        self._query = value

    @property
    def marshaler(self) -> Marshaler:
        """Request body marshaler (default: text)."""
        return self._marshaler or text_marshaler

    @marshaler.setter
    def marshaler(self, value: Marshaler | None) -> None:
        self._marshaler = value

    @property
    def unmarshaler(self) -> Unmarshaler:
        """Response body unmarshaler (default: text)."""
        return self._unmarshaler or text_unmarshaler

    @unmarshaler.setter
    def unmarshaler(self, value: Unmarshaler | None) -> None:
        self._unmarshaler = value

    @property
    def transport(self) -> Transport:
        if self._transport is None:
            self._transport = default_transport()
        return self._transport

    @transport.setter
    def transport(self, value: Transport | None) -> None:
        self._transport = value

    @property
    def request_mutators(self) -> list[RequestMutator]:
        return list(self._request_mutators)

    @property
    def response_mutators(self) -> list[ResponseMutator]:
        return list(self._response_mutators)

    def add_request_mutators(self, *mutators: RequestMutator) -> Client:
        """Append request mutators; they run after marshaling, in the order added."""
        self._request_mutators.extend(mutators)
        return self

    def add_response_mutators(self, *mutators: ResponseMutator) -> Client:
        """Append response mutators; they run before decoding, in the order added."""
        self._response_mutators.extend(mutators)
        return self

    def set_request_mutators(self, *mutators: RequestMutator) -> Client:
        """Replace all request mutators."""
        self._request_mutators = list(mutators)
        return self

    def set_response_mutators(self, *mutators: ResponseMutator) -> Client:
        """Replace all response mutators."""
        self._response_mutators = list(mutators)
        return self

    def clone(self) -> Client:
        """
        Copy this client's configuration.

        Headers, query, mutator lists and the base URL are copied and can be
        changed independently of the original. The transport is shared.
        """
        cloned = type(self)(
            self._base_url, transport=self._transport, log_requests=self.log_requests
        )
        cloned._headers = copy_values(self._headers)
        cloned._query = copy_values(self._query)
        cloned._request_mutators = list(self._request_mutators)
        cloned._response_mutators = list(self._response_mutators)
        cloned._marshaler = self._marshaler
        cloned._unmarshaler = self._unmarshaler
        return cloned

    # =========================================================================
    # Verbs
    # =========================================================================

    def get(
        self,
        path: str | RequestParams = "",
        *,
        headers: HeaderSet | None = None,
        query: QuerySet | None = None,
        decode: DecodeMap | None = None,
    ) -> httpx.Response:
        """GET `base_url + path`. Never sends a body."""
        params = _params(path, headers=headers, query=query, decode=decode)
        return self.request("GET", dataclasses.replace(params, body=None))

    def post(
        self,
        path: str | RequestParams = "",
        *,
        headers: HeaderSet | None = None,
        query: QuerySet | None = None,
        body: Any | None = None,
        decode: DecodeMap | None = None,
    ) -> httpx.Response:
        """POST `body` (marshaled with `marshaler`) to `base_url + path`."""
        params = _params(path, headers=headers, query=query, body=body, decode=decode)
        return self.request("POST", params)

    def put(
        self,
        path: str | RequestParams = "",
        *,
        headers: HeaderSet | None = None,
        query: QuerySet | None = None,
        body: Any | None = None,
        decode: DecodeMap | None = None,
    ) -> httpx.Response:
        params = _params(path, headers=headers, query=query, body=body, decode=decode)
        return self.request("PUT", params)

    def patch(
        self,
        path: str | RequestParams = "",
        *,
        headers: HeaderSet | None = None,
        query: QuerySet | None = None,
        body: Any | None = None,
        decode: DecodeMap | None = None,
    ) -> httpx.Response:
        params = _params(path, headers=headers, query=query, body=body, decode=decode)
        return self.request("PATCH", params)

    def head(
        self,
        path: str | RequestParams = "",
        *,
        headers: HeaderSet | None = None,
        query: QuerySet | None = None,
    ) -> httpx.Response:
        """HEAD `base_url + path`. Any body or decode map is ignored."""
        params = _params(path, headers=headers, query=query)
        return self.request("HEAD", dataclasses.replace(params, body=None, decode=None))

    def options(
        self,
        path: str | RequestParams = "",
        *,
        headers: HeaderSet | None = None,
        query: QuerySet | None = None,
        body: Any | None = None,
        decode: DecodeMap | None = None,
    ) -> httpx.Response:
        params = _params(path, headers=headers, query=query, body=body, decode=decode)
        return self.request("OPTIONS", params)

    def delete(
        self,
        path: str | RequestParams = "",
        *,
        headers: HeaderSet | None = None,
        query: QuerySet | None = None,
        decode: DecodeMap | None = None,
    ) -> httpx.Response:
        """DELETE `base_url + path`. Never sends a body."""
        params = _params(path, headers=headers, query=query, decode=decode)
        return self.request("DELETE", dataclasses.replace(params, body=None))

    # =========================================================================
    # Dispatch
    # =========================================================================

    def request(self, method: str, params: RequestParams) -> httpx.Response:
        """
        Build, mutate, send and decode a single request.

        Returns:
            The transport's response.

        Raises:
            MarshalError: The body is not supported by the marshaler.
            RequestMutatorError: A request mutator raised; nothing was sent.
            TransportError: The transport failed; there is no response.
            ResponseMutatorError: A response mutator raised; see `.response`.
            UnmarshalError: Decoding the body failed; see `.response`.
        """
        method = method.upper()
        request = self._build_request(method, params)
        # HEAD responses carry no body.
        decode = None if method == "HEAD" else params.decode
        return self._send(request, decode)

    def _build_request(self, method: str, params: RequestParams) -> httpx.Request:
        url = compose_url(self._base_url, params.path)
        headers = merge_headers(self._headers, params.headers)
        query = merge_query(self._query, params.query)

        content: Any = None
        if params.body is not None:
            marshaler = self.marshaler
            try:
                body = marshaler(params.body)
            except RestwrapError:
                raise
            except Exception as e:
                raise MarshalError(f"Could not marshal request body: {e}") from e
            if body.length is not None:
                headers["Content-Length"] = str(body.length)
            content = body.content

        return httpx.Request(method, url, headers=headers, params=query or None, content=content)

    def _send(self, request: httpx.Request, decode: DecodeMap | None) -> httpx.Response:
        run_request_mutators(tuple(self._request_mutators), request)

        if self.log_requests:
            logger.debug("%s %s", request.method, _url_for_log(request.url))
        started = time.monotonic()
        try:
            response = self.transport.send(request)
        except httpx.RequestError as e:
            raise TransportError(
                f"{request.method} {_url_for_log(request.url)} failed: {e}"
            ) from e
        if self.log_requests:
            logger.debug(
                "%s %s -> %s (%.3fs)",
                request.method,
                _url_for_log(request.url),
                response.status_code,
                time.monotonic() - started,
            )

        run_response_mutators(tuple(self._response_mutators), response)

        if decode is not None:
            self._decode(response, decode)
        return response

    def _decode(self, response: httpx.Response, decode: DecodeMap) -> None:
        # A definite zero-length body has nothing to decode; unknown length may.
        if _content_length(response) == 0:
            return
        destinations = decode.get(response.status_code)
        if destinations is None:
            return
        if not isinstance(destinations, tuple):
            destinations = (destinations,)

        try:
            data = response.read()
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise UnmarshalError(
                f"Could not read response body: {e}", response=response
            ) from e

        unmarshaler = self.unmarshaler
        for destination in destinations:
            if destination is None:
                continue
            try:
                unmarshaler(data, destination)
            except UnmarshalError as e:
                e.response = response
                raise
            except Exception as e:
                raise UnmarshalError(
                    f"Could not unmarshal response body: {e}", response=response
                ) from e


def _params(
    path: str | RequestParams,
    *,
    headers: HeaderSet | None = None,
    query: QuerySet | None = None,
    body: Any | None = None,
    decode: DecodeMap | None = None,
) -> RequestParams:
    if isinstance(path, RequestParams):
        if any(v is not None for v in (headers, query, body, decode)):
            raise TypeError(
                "Pass either a RequestParams or path/keyword arguments, not both."
            )
        return path
    return RequestParams(path=path, headers=headers, query=query, body=body, decode=decode)


def setup_for_json(client: Client) -> Client:
    """
    Configure `client` for JSON APIs.

    Installs the JSON marshaler/unmarshaler and appends request mutators that
    set `Content-Type: application/json` and `Accept: application/json`.
    """
    client.marshaler = json_marshaler
    client.unmarshaler = json_unmarshaler
    client.add_request_mutators(json_content_type_mutator, json_accept_mutator)
    return client


__all__ = ["Client", "Transport", "default_transport", "setup_for_json"]
