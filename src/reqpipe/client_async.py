r"""Asynchronous HTTP client returning the response bodies as text.

This module provides the ``AsyncHttpClient`` class, the asynchronous
counterpart of ``HttpClient``. The requests are sent with an
``httpx.AsyncClient`` and the waits between retries use
``asyncio.sleep``.
"""

from __future__ import annotations

__all__ = ["AsyncHttpClient"]

import logging
from functools import partial
from typing import TYPE_CHECKING

import httpx

from reqpipe.core.config import ClientConfig
from reqpipe.core.pipeline import download_file_async, execute_request_async

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path
    from types import TracebackType
    from typing import Self

    from reqpipe.content import AsyncJSONClient, AsyncXMLClient
    from reqpipe.context import RequestContext
    from reqpipe.core.pipeline import DownloadResult
    from reqpipe.options import RequestOption


class AsyncHttpClient:
    r"""Asynchronous HTTP client with optional automatic retry.

    The lifecycle rules are the same as ``HttpClient``: the
    ``httpx.AsyncClient`` built from the configuration is closed by
    ``aclose()`` or when the ``async with`` block exits, while an
    ``httpx.AsyncClient`` passed with ``client=`` is never closed.

    A call is cancelled by cancelling the task awaiting it.

    Args:
        config: Optional ClientConfig instance. If ``None``, a default
            ClientConfig is used.
        client: Optional httpx.AsyncClient instance to use for the
            requests.
        logger: Optional logger receiving the diagnostic records. If
            ``None``, the ``reqpipe.client_async`` logger is used.

    Example:
        ```pycon
        >>> from reqpipe import AsyncHttpClient, ClientConfig
        >>> async with AsyncHttpClient(ClientConfig().with_retry([1.0])) as client:  # doctest: +SKIP
        ...     text = await client.get("https://api.example.com/data")
        ...

        ```
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config: ClientConfig = config or ClientConfig()
        self._owns_client = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(
            **self._config.client_kwargs()
        )
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
    def http_client(self) -> httpx.AsyncClient:
        return self._client

    async def aclose(self) -> None:
        r"""Close the underlying httpx client if this client created
        it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def json(self) -> AsyncJSONClient:
        r"""Return a JSON client sending its requests through this
        client."""
        from reqpipe.content import AsyncJSONClient

        return AsyncJSONClient(self)

    def xml(self) -> AsyncXMLClient:
        r"""Return a XML client sending its requests through this
        client."""
        from reqpipe.content import AsyncXMLClient

        return AsyncXMLClient(self)

    async def do(
        self,
        method: str,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send a request with a custom method.

        See ``HttpClient.do()``.
        """
        attempt = partial(
            execute_request_async,
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
            return await attempt()
        return await self._config.retrier.run_async(attempt)

    async def options(
        self,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send an OPTIONS request. See ``do()``."""
        return await self.do("OPTIONS", url, body, options=options, context=context)

    async def head(
        self,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send a HEAD request. See ``do()``."""
        return await self.do("HEAD", url, body, options=options, context=context)

    async def get(
        self,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send a GET request. See ``do()``."""
        return await self.do("GET", url, body, options=options, context=context)

    async def post(
        self,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send a POST request. See ``do()``."""
        return await self.do("POST", url, body, options=options, context=context)

    async def patch(
        self,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send a PATCH request. See ``do()``."""
        return await self.do("PATCH", url, body, options=options, context=context)

    async def put(
        self,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send a PUT request. See ``do()``."""
        return await self.do("PUT", url, body, options=options, context=context)

    async def delete(
        self,
        url: str,
        body: str | bytes = "",
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> str:
        r"""Send a DELETE request. See ``do()``."""
        return await self.do("DELETE", url, body, options=options, context=context)

    async def download_file(
        self,
        url: str,
        out_file: str | Path,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> DownloadResult:
        r"""Download the body of a GET request to ``out_file``.

        See ``HttpClient.download_file()``.
        """
        return await download_file_async(
            self._client, self._config, self._logger, url, out_file, options, context
        )
