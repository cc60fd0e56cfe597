from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from restwrap import Client

Handler = Callable[[httpx.Request], httpx.Response]


class CountingTransport:
    """Transport double that records every request it is asked to send."""

    def __init__(self, handler: Handler | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._handler = handler

    @property
    def calls(self) -> int:
        return len(self.requests)

    def send(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._handler is not None:
            return self._handler(request)
        return httpx.Response(200, request=request)


@pytest.fixture
def make_client() -> Callable[..., Client]:
    created: list[httpx.Client] = []

    def _make(handler: Handler, base_url: str = "http://testserver", **kwargs: object) -> Client:
        transport = httpx.Client(transport=httpx.MockTransport(handler))
        created.append(transport)
        return Client(base_url, transport=transport, **kwargs)  # type: ignore[arg-type]

    yield _make  # type: ignore[misc]

    for transport in created:
        transport.close()
