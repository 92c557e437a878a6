r"""Define the exceptions raised by the HTTP client.

Transport failures are not wrapped: the ``httpx.RequestError`` raised by
the transport (``httpx.ConnectError``, ``httpx.TimeoutException``, ...)
reaches the caller unchanged.
"""

from __future__ import annotations

__all__ = [
    "HTTPError",
    "HttpClientError",
    "MarshalError",
    "RequestCancelledError",
    "RequestOptionError",
    "ResponseDecodeError",
    "UnmarshalError",
]

from typing import Any


class HttpClientError(Exception):
    r"""Base class of all the errors raised by ``reqpipe``."""


class HTTPError(HttpClientError):
    r"""Raised when the response status code is not in ``[200, 300)``.

    Args:
        status_code: The numeric HTTP status code.
        status_text: The status line text, for example
            ``"503 Service Unavailable"``.

    Example:
        ```pycon
        >>> from reqpipe.exceptions import HTTPError
        >>> error = HTTPError(503, "503 Service Unavailable")
        >>> error.status_code
        503
        >>> str(error)
        'HTTP Error: 503, 503 Service Unavailable'

        ```
    """

    def __init__(self, status_code: int, status_text: str) -> None:
        super().__init__(f"HTTP Error: {status_code}, {status_text}")
        self._status_code = status_code
        self._status_text = status_text

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def status_text(self) -> str:
        return self._status_text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HTTPError):
            return NotImplemented
        return (self.status_code, self.status_text) == (other.status_code, other.status_text)

    def __hash__(self) -> int:
        return hash((self.status_code, self.status_text))

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(status_code={self._status_code}, status_text={self._status_text!r})"

    def __reduce__(self) -> tuple[Any, ...]:
        return (self.__class__, (self._status_code, self._status_text))


class RequestOptionError(HttpClientError):
    r"""Raised by a request option that rejects the request before it
    is sent."""


class ResponseDecodeError(HttpClientError):
    r"""Raised when the response body cannot be read or
    decompressed."""


class RequestCancelledError(HttpClientError):
    r"""Raised when the request context is cancelled."""


class MarshalError(HttpClientError):
    r"""Raised when a request body cannot be serialized."""


class UnmarshalError(HttpClientError):
    r"""Raised when a response body cannot be deserialized into the
    requested type."""
