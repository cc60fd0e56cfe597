"""
restwrap: a thin HTTP client with defaults, mutators and status-keyed decoding.

Example:
    ```python
    from restwrap import Client, Ref

    client = Client("https://example.com/api")
    client.headers["X-Team"] = "core"

    greeting: Ref[str] = Ref()
    client.get("/hello", decode={200: greeting})
    print(greeting.value)
    ```
"""

from __future__ import annotations

from .client import Client, Transport, default_transport, setup_for_json
from .codecs import (
    Body,
    Marshaler,
    Ref,
    Unmarshaler,
    bytes_to_body,
    json_marshaler,
    json_unmarshaler,
    str_to_body,
    text_marshaler,
    text_unmarshaler,
)
from .config import ClientConfig
from .exceptions import (
    ConfigurationError,
    MarshalError,
    MutatorError,
    NotAReferenceError,
    RequestMutatorError,
    ResponseMutatorError,
    RestwrapError,
    TransportError,
    UnmarshalError,
)
from .models import DecodeMap, RequestParams
from .pipeline import (
    RequestMutator,
    ResponseMutator,
    json_accept_mutator,
    json_content_type_mutator,
)

__version__ = "0.3.0"

__all__ = [
    "Body",
    "Client",
    "ClientConfig",
    "ConfigurationError",
    "DecodeMap",
    "MarshalError",
    "Marshaler",
    "MutatorError",
    "NotAReferenceError",
    "Ref",
    "RequestMutator",
    "RequestMutatorError",
    "RequestParams",
    "ResponseMutator",
    "ResponseMutatorError",
    "RestwrapError",
    "Transport",
    "TransportError",
    "UnmarshalError",
    "Unmarshaler",
    "__version__",
    "bytes_to_body",
    "default_transport",
    "json_accept_mutator",
    "json_content_type_mutator",
    "json_marshaler",
    "json_unmarshaler",
    "setup_for_json",
    "str_to_body",
    "text_marshaler",
    "text_unmarshaler",
]
