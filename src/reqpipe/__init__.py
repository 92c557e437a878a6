r"""reqpipe - HTTP request pipeline with retry, gzip recovery and
structured diagnostics.

This package provides HTTP clients built on top of the httpx library.
Every call applies an ordered chain of request options, sends the
request, rejects the status codes outside ``[200, 300)``, transparently
decompresses gzip bodies and emits one diagnostic record per attempt.
An optional retrier repeats the whole pipeline according to a backoff
schedule.

Key Features:
    - Plain-text, JSON and XML clients, sync and async
    - Request options to set headers, content types, query parameters
      and per-call context values
    - Retry with explicit backoff schedules and pluggable classifiers
    - Gzip bodies decoded even when the request did not ask for them
    - Structured diagnostic records (method, url, proc_time, cookies,
      and optionally the request and response bodies)

Example:
    ```pycon
    >>> from reqpipe import ClientConfig, HttpClient, set_query
    >>> config = ClientConfig(timeout=5.0).with_retry([0.1, 0.2])
    >>> with HttpClient(config) as client:  # doctest: +SKIP
    ...     text = client.get("https://api.example.com/data", options=[set_query({"page": "1"})])
    ...
    >>> with HttpClient(config).json() as client:  # doctest: +SKIP
    ...     item = client.post("https://api.example.com/items", {"a": 1}, dict)
    ...

    ```
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_TIMEOUT",
    "AsyncHttpClient",
    "AsyncJSONClient",
    "AsyncXMLClient",
    "ClientConfig",
    "HTTPError",
    "HttpClient",
    "HttpClientError",
    "JSONClient",
    "MarshalError",
    "RequestCancelledError",
    "RequestContext",
    "RequestOption",
    "RequestOptionError",
    "ResponseDecodeError",
    "Retrier",
    "UnmarshalError",
    "XMLClient",
    "__version__",
    "set_context_value",
    "set_header",
    "set_query",
    "set_timeout",
    "set_type_form",
    "set_type_json",
    "set_type_xml",
]

from importlib.metadata import PackageNotFoundError, version

from reqpipe.client import HttpClient
from reqpipe.client_async import AsyncHttpClient
from reqpipe.content import AsyncJSONClient, AsyncXMLClient, JSONClient, XMLClient
from reqpipe.context import RequestContext
from reqpipe.core.config import DEFAULT_TIMEOUT, ClientConfig
from reqpipe.exceptions import (
    HTTPError,
    HttpClientError,
    MarshalError,
    RequestCancelledError,
    RequestOptionError,
    ResponseDecodeError,
    UnmarshalError,
)
from reqpipe.options import (
    RequestOption,
    set_context_value,
    set_header,
    set_query,
    set_timeout,
    set_type_form,
    set_type_json,
    set_type_xml,
)
from reqpipe.retry import Retrier

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
