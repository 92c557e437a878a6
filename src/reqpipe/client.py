r"""Synchronous HTTP client returning the response bodies as text.

This module provides the ``HttpClient`` class. Every call goes through
the request pipeline: request options, dispatch, status code check,
body decompression and one diagnostic record per attempt. If the
configuration has a retrier, the whole pipeline is repeated according
to its backoff schedule.
"""

from __future__ import annotations

__all__ = ["HttpClient"]

import logging
from functools import partial
from typing import TYPE_CHECKING

import httpx

from reqpipe.core.config import ClientConfig
from reqpipe.core.pipeline import download_file, execute_request

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path
    from types import TracebackType
    from typing import Self

    from reqpipe.content import JSONClient, XMLClient
    from reqpipe.context import RequestContext
    from reqpipe.core.pipeline import DownloadResult
    from reqpipe.options import RequestOption


class HttpClient:
    r"""Synchronous HTTP client with optional automatic retry.

    Two usage patterns are supported:

    **The client owns the httpx client**: the ``httpx.Client`` is built
    from the configuration (timeout, transport, cookies, redirect
    policy) and closed by ``close()`` or when the ``with`` block exits.

    .. code-block:: python

        from reqpipe import ClientConfig, HttpClient

        config = ClientConfig(timeout=5.0).with_retry([0.5, 1.0, 2.0])
        with HttpClient(config) as client:
            text = client.get("https://api.example.com/data")

    **External httpx client**: an ``httpx.Client`` is passed with
    ``client=``. The timeout, transport, cookie and redirect settings of
    the configuration are then ignored, and the httpx client is never
    closed by ``HttpClient``.

    Args:
        config: Optional ClientConfig instance. If ``None``, a default
            ClientConfig is used.
        client: Optional httpx.Client instance to use for the requests.
        logger: Optional logger receiving the diagnostic records. If
            ``None``, the ``reqpipe.client`` logger is used.

    Example:
        ```pycon
        >>> import httpx
        >>> from reqpipe import ClientConfig, HttpClient
        >>> transport = httpx.MockTransport(lambda request: httpx.Response(200, stream=httpx.ByteStream(b"pong")))
        >>> with HttpClient(ClientConfig(transport=transport)) as client:
        ...     client.get("http://example.com/ping")
        ...
        'pong'

        ```
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        client: httpx.Client | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config: ClientConfig = config or ClientConfig()
        self._owns_client = client is None
        self._client: httpx.Client = client or httpx.Client(**self._config.client_kwargs())
        self._logger: logging.Logger = logger or logging.getLogger(__name__)

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(config={self._config!r})"

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def http_client(self) -> httpx.Client:
        return self._client

    def close(self) -> None:
        r"""Close the underlying httpx client if this client created
        it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def json(self) -> JSONClient:
        r"""Return a JSON client sending its requests through this
        client."""
        from reqpipe.content import JSONClient

        return JSONClient(self)

    def xml(self) -> XMLClient:
        r"""Return a XML client sending its requests through this
        client."""
        from reqpipe.content import XMLClient

        return XMLClient(self)

    def do(
        self,
        method: str,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send a request with a custom method.

        Without retrier, exactly one request is sent. With a retrier,
        the request is rebuilt and the request options are applied again
        for every attempt.

        Args:
            method: The HTTP method.
            url: The request URL.
            body: The request body.
            options: The request options of this call, applied after the
                default request options of the configuration.
            context: Optional request context.

        Returns:
            The response body as text.

        Raises:
            HTTPError: if the response status code is not in
                ``[200, 300)``.
            ResponseDecodeError: if the body cannot be read or
                decompressed.
            httpx.RequestError: if the transport fails.

        Example:
            ```pycon
            >>> from reqpipe import HttpClient
            >>> with HttpClient() as client:  # doctest: +SKIP
            ...     text = client.do("PURGE", "https://cache.example.com/item")
            ...

            ```
        """
        attempt = partial(
            execute_request,
            self._client,
            self._config,
            self._logger,
            method,
            url,
            body,
            options,
            context,
        )
        if self._config.retrier is None:
            return attempt()
        return self._config.retrier.run(attempt, context=context)

    def options(
        self,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send an OPTIONS request. See ``do()``."""
        return self.do("OPTIONS", url, body, options=options, context=context)

    def head(
        self,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send a HEAD request. See ``do()``."""
        return self.do("HEAD", url, body, options=options, context=context)

    def get(
        self,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send a GET request. See ``do()``."""
        return self.do("GET", url, body, options=options, context=context)

    def post(
        self,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send a POST request. See ``do()``."""
        return self.do("POST", url, body, options=options, context=context)

    def patch(
        self,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send a PATCH request. See ``do()``."""
        return self.do("PATCH", url, body, options=options, context=context)

    def put(
        self,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send a PUT request. See ``do()``."""
        return self.do("PUT", url, body, options=options, context=context)

    def delete(
        self,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send a DELETE request. See ``do()``."""
        return self.do("DELETE", url, body, options=options, context=context)

    def download_file(
        self,
        url: str,
        out_file: str | Path,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> DownloadResult:
        r"""Download the body of a GET request to ``out_file``.

        The download is never retried.

        Args:
            url: The request URL.
            out_file: The path of the file to write.
            options: The request options of this call.
            context: Optional request context.

        Returns:
            The path and size of the written file.
        """
        return download_file(
            self._client, self._config, self._logger, url, out_file, options, context
        )
