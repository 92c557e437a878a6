r"""Configuration dataclass and defaults for the HTTP clients.

The configuration is built once, before the client is created, and is
then shared read-only by all the requests sent by the client.
"""

from __future__ import annotations

__all__ = ["DEFAULT_TIMEOUT", "ClientConfig"]

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

import httpx

from reqpipe.core.encoding import ACCEPT_ENCODING
from reqpipe.core.validation import validate_timeout
from reqpipe.retry import Retrier

if TYPE_CHECKING:
    from collections.abc import Sequence
    from http.cookiejar import CookieJar

    from reqpipe.options import RequestOption
    from reqpipe.retry import RetryClassifier


# Default timeout in seconds for HTTP requests, used when the
# configuration does not set one
DEFAULT_TIMEOUT = 15.0


@dataclass(frozen=True)
class ClientConfig:
    """Configuration of a ``HttpClient`` or ``AsyncHttpClient``.

    Args:
        timeout: Maximum seconds to wait for the server response.
            ``None`` means ``DEFAULT_TIMEOUT``. Must be > 0.
        follow_redirects: Whether to follow 3xx redirections. If
            ``False``, the 3xx response is returned as is (and rejected
            by the status code check).
        transport: Optional httpx transport used to send the requests.
            If ``None``, the default httpx transport is used.
        cookies: Optional cookie store. A ``http.cookiejar.CookieJar``
            is shared with the httpx client, so the cookies set by the
            responses are visible to the caller. A ``httpx.Cookies`` is
            copied.
        debug_traffic: Whether the diagnostic records include the
            request and response bodies.
        request_options: The request options applied before the
            options of each call.
        retrier: Optional retrier. If ``None``, each call sends
            exactly one request.

    Example:
        ```pycon
        >>> from reqpipe.core.config import ClientConfig
        >>> config = ClientConfig()
        >>> config.timeout
        15.0
        >>> config = config.with_retry([0.1, 0.2])
        >>> config.retrier.max_retries
        2
        >>> config.merge(debug_traffic=False).debug_traffic
        False

        ```
    """

    timeout: float | None = DEFAULT_TIMEOUT
    follow_redirects: bool = True
    transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None
    cookies: CookieJar | httpx.Cookies | None = None
    debug_traffic: bool = True
    request_options: Sequence[RequestOption] = field(default_factory=tuple)
    retrier: Retrier | None = None

    def __post_init__(self) -> None:
        if self.timeout is None:
            object.__setattr__(self, "timeout", DEFAULT_TIMEOUT)
        validate_timeout(self.timeout)
        object.__setattr__(self, "request_options", tuple(self.request_options))

    def merge(self, **overrides: Any) -> ClientConfig:
        """Create a new config with specified parameters overridden.

        Only non-None override values are applied. The original config
        is unchanged.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new ClientConfig instance with overrides applied.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)

    def with_retry(
        self,
        backoff: Sequence[float],
        classifier: RetryClassifier | None = None,
        jitter_factor: float = 0.0,
    ) -> ClientConfig:
        """Create a new config that retries the requests.

        Args:
            backoff: The delays in seconds to wait before each retry.
            classifier: Optional retry classifier. If ``None``, every
                error is retried.
            jitter_factor: Factor for adding random jitter to the delays.

        Returns:
            A new ClientConfig instance with a retrier.
        """
        return replace(
            self,
            retrier=Retrier(backoff=backoff, classifier=classifier, jitter_factor=jitter_factor),
        )

    def client_kwargs(self) -> dict[str, Any]:
        """Return the keyword arguments to create the httpx client.

        Returns:
            The keyword arguments for ``httpx.Client`` or
            ``httpx.AsyncClient``.
        """
        kwargs: dict[str, Any] = {
            "timeout": self.timeout,
            "follow_redirects": self.follow_redirects,
            "headers": {"Accept-Encoding": ACCEPT_ENCODING},
        }
        if self.transport is not None:
            kwargs["transport"] = self.transport
        if self.cookies is not None:
            kwargs["cookies"] = self.cookies
        return kwargs
