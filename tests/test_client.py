"""Tests for the Client configuration surface and clone()."""

from __future__ import annotations

import httpx
import pytest

from restwrap import (
    Client,
    ClientConfig,
    ConfigurationError,
    default_transport,
    json_accept_mutator,
    json_content_type_mutator,
    json_marshaler,
    json_unmarshaler,
    setup_for_json,
    text_marshaler,
    text_unmarshaler,
)

from .conftest import CountingTransport


def _noop(_: object) -> None:
    return None


def test_constructor_requires_base_url() -> None:
    with pytest.raises(ConfigurationError):
        Client(None)  # type: ignore[arg-type]


def test_constructor_keeps_base_url() -> None:
    client = Client("http://example.com/api")
    assert client.base_url == "http://example.com/api"
    assert repr(client) == "Client(base_url='http://example.com/api')"


def test_base_url_setter_strips_query() -> None:
    client = Client("http://example.com")
    client.base_url = "http://other.example/v2?token=abc"
    assert client.base_url == "http://other.example/v2"


def test_set_base_url_strips_query_and_chains() -> None:
    client = Client("http://example.com")
    assert client.set_base_url("http://other.example/?q=1") is client
    assert client.base_url == "http://other.example/"


def test_set_base_url_rejects_none_and_keeps_previous() -> None:
    client = Client("http://example.com/v1")
    with pytest.raises(ConfigurationError):
        client.set_base_url(None)  # type: ignore[arg-type]
    assert client.base_url == "http://example.com/v1"


def test_constructor_strips_query() -> None:
    assert Client("http://example.com/x?y=1").base_url == "http://example.com/x"


def test_base_url_setter_rejects_none_and_keeps_previous() -> None:
    client = Client("http://example.com")
    with pytest.raises(ConfigurationError):
        client.base_url = None  # type: ignore[assignment]
    assert client.base_url == "http://example.com"


def test_headers_and_query_auto_initialize() -> None:
    client = Client("http://example.com")
    assert client.headers == {}
    client.headers["X-Test"] = "1"
    assert client.headers == {"X-Test": "1"}

    client.headers = None
    assert client.headers == {}

    assert client.query == {}
    client.query["q"] = ["a", "b"]
    assert client.query is client.query


def test_codecs_default_to_text() -> None:
    client = Client("http://example.com")
    assert client.marshaler is text_marshaler
    assert client.unmarshaler is text_unmarshaler

    client.marshaler = json_marshaler
    client.unmarshaler = json_unmarshaler
    assert client.marshaler is json_marshaler

    client.marshaler = None
    assert client.marshaler is text_marshaler


def test_transport_defaults_to_shared_instance() -> None:
    first = Client("http://one.example")
    second = Client("http://two.example")
    assert first.transport is default_transport()
    assert first.transport is second.transport


def test_mutator_lists_append_replace_and_copy() -> None:
    client = Client("http://example.com")

    def first(_: httpx.Request) -> None: ...
    def second(_: httpx.Request) -> None: ...

    assert client.add_request_mutators(first).add_request_mutators(second) is client
    assert client.request_mutators == [first, second]

    client.request_mutators.append(_noop)
    assert client.request_mutators == [first, second]

    client.set_request_mutators(second)
    assert client.request_mutators == [second]

    client.add_response_mutators(_noop, _noop)
    assert len(client.response_mutators) == 2
    client.set_response_mutators()
    assert client.response_mutators == []


def test_setup_for_json_installs_codecs_and_mutators() -> None:
    client = setup_for_json(Client("http://example.com"))
    assert client.marshaler is json_marshaler
    assert client.unmarshaler is json_unmarshaler
    assert client.request_mutators == [json_content_type_mutator, json_accept_mutator]


# =============================================================================
# Clone
# =============================================================================


def test_clone_is_independent_but_shares_transport() -> None:
    transport = CountingTransport()
    original = Client("http://original.example/base", transport=transport)
    original.headers["X-Which"] = "original"
    original.headers["X-Multi"] = ["a", "b"]
    original.query["query"] = "original"
    original.add_request_mutators(_noop)

    clone = original.clone()
    clone.base_url = "http://clone.example"
    clone.headers["X-Which"] = "clone"
    clone.headers["X-Multi"].append("c")  # type: ignore[union-attr]
    clone.query["query"] = "clone"
    clone.add_request_mutators(_noop)
    clone.add_response_mutators(_noop)

    assert original.base_url == "http://original.example/base"
    assert original.headers == {"X-Which": "original", "X-Multi": ["a", "b"]}
    assert original.query == {"query": "original"}
    assert len(original.request_mutators) == 1
    assert original.response_mutators == []

    original.headers["X-Original-Only"] = "1"
    assert "X-Original-Only" not in clone.headers

    assert clone.transport is original.transport


def test_clone_routes_through_same_transport() -> None:
    transport = CountingTransport()
    original = Client("http://original.example", transport=transport)
    original.headers["X-Which"] = "original"
    original.query["query"] = "original"

    clone = original.clone()
    clone.base_url = "http://clone.example"
    clone.headers["X-Which"] = "clone"
    clone.query["query"] = "clone"

    original.get("")
    clone.get("")

    assert transport.calls == 2
    sent_original, sent_clone = transport.requests
    assert sent_original.url.host == "original.example"
    assert sent_original.headers["X-Which"] == "original"
    assert sent_original.url.params["query"] == "original"
    assert sent_clone.url.host == "clone.example"
    assert sent_clone.headers["X-Which"] == "clone"
    assert sent_clone.url.params["query"] == "clone"


def test_clone_keeps_codecs() -> None:
    clone = setup_for_json(Client("http://example.com")).clone()
    assert clone.marshaler is json_marshaler
    assert clone.unmarshaler is json_unmarshaler


# =============================================================================
# from_config
# =============================================================================


def test_from_config_copies_defaults() -> None:
    config = ClientConfig(
        base_url="http://example.com/api",
        headers={"X-Team": ["core"]},
        query={"v": "2"},
    )
    transport = CountingTransport()
    client = Client.from_config(config, transport=transport)

    client.headers["X-Team"].append("extra")  # type: ignore[union-attr]

    assert config.headers == {"X-Team": ["core"]}
    assert client.query == {"v": "2"}
    assert client.transport is transport


def test_from_config_timeout_builds_dedicated_transport() -> None:
    client = Client.from_config(ClientConfig(base_url="http://example.com", timeout=2.5))
    transport = client.transport
    try:
        assert isinstance(transport, httpx.Client)
        assert transport is not default_transport()
        assert transport.timeout.connect == 2.5
    finally:
        transport.close()  # type: ignore[union-attr]


def test_close_releases_dedicated_transport_only() -> None:
    with Client.from_config(ClientConfig(base_url="http://example.com", timeout=2.5)) as client:
        dedicated = client.transport
        clone = client.clone()
    assert isinstance(dedicated, httpx.Client)
    assert dedicated.is_closed

    clone.close()
    shared = Client("http://example.com")
    shared.close()
    assert not default_transport().is_closed


def test_close_leaves_injected_transport_open() -> None:
    injected = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    try:
        client = Client.from_config(
            ClientConfig(base_url="http://example.com", timeout=1.0), transport=injected
        )
        client.close()
        assert not injected.is_closed
    finally:
        injected.close()
