r"""Shared test helpers for the HTTP client tests.

The responses are built with an explicit ``httpx.ByteStream`` so the
body stays unread until the pipeline reads it, like the responses of a
real network transport.
"""

from __future__ import annotations

__all__ = [
    "HTTP_METHODS",
    "TEST_LOGGER_NAME",
    "TEST_URL",
    "RecordingTransport",
    "diagnostic_records",
    "make_response",
]

import gzip
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable, Mapping, Sequence

    import pytest

TEST_URL = "http://api.example.com/data"
TEST_LOGGER_NAME = "tests.reqpipe"

HTTP_METHODS = ("OPTIONS", "HEAD", "GET", "POST", "PATCH", "PUT", "DELETE")


def make_response(
    status_code: int = 200,
    body: bytes | str = b"",
    headers: Mapping[str, str] | Sequence[tuple[str, str]] | None = None,
    *,
    gzipped: bool = False,
) -> httpx.Response:
    """Create a response with an unread body.

    Args:
        status_code: The HTTP status code.
        body: The response body.
        headers: Optional response headers.
        gzipped: If ``True``, the body is gzip compressed and
            ``Content-Encoding: gzip`` is added.

    Returns:
        The response.
    """
    data = body.encode("utf-8") if isinstance(body, str) else body
    headers = httpx.Headers(headers)
    if gzipped:
        data = gzip.compress(data)
        headers["Content-Encoding"] = "gzip"
    return httpx.Response(status_code, headers=headers, stream=httpx.ByteStream(data))


class RecordingTransport(httpx.MockTransport):
    """Mock transport recording the requests it receives.

    Args:
        handler: The function building the response of a request.
    """

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @classmethod
    def sequence(
        cls, *factories: Callable[[], httpx.Response] | Exception
    ) -> RecordingTransport:
        """Create a transport answering with the given response
        factories in order.

        An exception in the sequence is raised instead of answering.
        The last item is repeated once the sequence is exhausted.
        """
        items = list(factories)

        def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
            item = items.pop(0) if len(items) > 1 else items[0]
            if isinstance(item, Exception):
                raise item
            return item()

        return cls(handler)

    @property
    def count(self) -> int:
        return len(self.requests)


def diagnostic_records(
    caplog: pytest.LogCaptureFixture, name: str = TEST_LOGGER_NAME
) -> list[logging.LogRecord]:
    """Return the records captured for the logger ``name``."""
    return [record for record in caplog.records if record.name == name]
