r"""Base classes of the content clients.

A content client serializes the request body with its codec, sends it
through a ``HttpClient`` (or ``AsyncHttpClient``) and deserializes the
response body. It has no transport state of its own: the timeout,
retries, default options and diagnostics all come from the wrapped
client.
"""

from __future__ import annotations

__all__ = ["BaseAsyncContentClient", "BaseContentClient", "decode_result", "encode_body"]

import logging
from typing import TYPE_CHECKING, Any, ClassVar

from reqpipe.client import HttpClient
from reqpipe.client_async import AsyncHttpClient
from reqpipe.exceptions import MarshalError, UnmarshalError
from reqpipe.options import set_header
from reqpipe.utils.structured_logging import log_structured

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import Self

    from reqpipe.codecs import Codec
    from reqpipe.context import RequestContext
    from reqpipe.core.config import ClientConfig
    from reqpipe.options import RequestOption


def encode_body(codec: Codec, body: Any, logger: logging.Logger) -> bytes:
    r"""Encode a request body.

    Strings are encoded in UTF-8, bytes are passed through unchanged,
    ``None`` is an empty body and any other value is serialized with
    the codec.

    Args:
        codec: The codec serializing the typed values.
        body: The request body.
        logger: The logger receiving the serialization errors.

    Returns:
        The encoded body.

    Raises:
        MarshalError: if the body cannot be serialized.
    """
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    try:
        return codec.marshal(body)
    except MarshalError as exc:
        log_structured(logger, logging.ERROR, "marshal request body", error=str(exc))
        raise


def decode_result(codec: Codec, text: str, result_type: Any, logger: logging.Logger) -> Any:
    r"""Decode a response body into ``result_type``.

    Args:
        codec: The codec deserializing the body.
        text: The response body.
        result_type: The type of the result. If ``None``, the body is
            not decoded.
        logger: The logger receiving the deserialization errors.

    Returns:
        The decoded value, or ``None`` if ``result_type`` is ``None`` or
        the body is empty.

    Raises:
        UnmarshalError: if the body cannot be deserialized.
    """
    if result_type is None or not text:
        return None
    try:
        return codec.unmarshal(text, result_type)
    except UnmarshalError as exc:
        log_structured(logger, logging.ERROR, "unmarshal response body", error=str(exc))
        raise


class BaseContentClient:
    r"""Base class of the synchronous content clients.

    Child classes set the ``codec`` class attribute.

    Args:
        client: Optional HttpClient sending the requests. If ``None``,
            a HttpClient with the default configuration is created.
    """

    codec: ClassVar[Codec]

    def __init__(self, client: HttpClient | None = None) -> None:
        self._client: HttpClient = client if client is not None else HttpClient()

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(client={self._client!r})"

    @classmethod
    def from_config(
        cls, config: ClientConfig | None = None, *, logger: logging.Logger | None = None
    ) -> Self:
        r"""Create a content client over a new HttpClient.

        Args:
            config: Optional client configuration.
            logger: Optional logger receiving the diagnostic records.

        Returns:
            The content client.
        """
        return cls(HttpClient(config, logger=logger))

    @property
    def client(self) -> HttpClient:
        return self._client

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def do(
        self,
        method: str,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send a request with a custom method.

        The ``Content-Type`` option of the codec is applied before the
        call options, so a call option can override it.

        Args:
            method: The HTTP method.
            url: The request URL.
            body: The request body: ``str``, ``bytes``, ``None`` or a
                value serialized by the codec.
            result_type: Optional type of the result, for example a
                dataclass.
            options: The request options of this call.
            context: Optional request context.

        Returns:
            The response body decoded into ``result_type``, or ``None``
            if ``result_type`` is ``None`` or the body is empty.

        Raises:
            MarshalError: if the body cannot be serialized. No request
                is sent.
            UnmarshalError: if the response body cannot be deserialized.
            HTTPError: if the response status code is not in
                ``[200, 300)``.
        """
        data = encode_body(self.codec, body, self._client.logger)
        text = self._client.do(
            method,
            url,
            data,
            options=(set_header("Content-Type", self.codec.content_type), *options),
            context=context,
        )
        return decode_result(self.codec, text, result_type, self._client.logger)

    def options(
        self,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send an OPTIONS request. See ``do()``."""
        return self.do("OPTIONS", url, body, result_type, options=options, context=context)

    def head(
        self,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send a HEAD request. See ``do()``."""
        return self.do("HEAD", url, body, result_type, options=options, context=context)

    def get(
        self,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send a GET request. See ``do()``."""
        return self.do("GET", url, body, result_type, options=options, context=context)

    def post(
        self,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send a POST request. See ``do()``."""
        return self.do("POST", url, body, result_type, options=options, context=context)

    def patch(
        self,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send a PATCH request. See ``do()``."""
        return self.do("PATCH", url, body, result_type, options=options, context=context)

    def put(
        self,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send a PUT request. See ``do()``."""
        return self.do("PUT", url, body, result_type, options=options, context=context)

    def delete(
        self,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send a DELETE request. See ``do()``."""
        return self.do("DELETE", url, body, result_type, options=options, context=context)


class BaseAsyncContentClient:
    r"""Base class of the asynchronous content clients.

    Child classes set the ``codec`` class attribute.

    Args:
        client: Optional AsyncHttpClient sending the requests. If
            ``None``, an AsyncHttpClient with the default configuration
            is created.
    """

    codec: ClassVar[Codec]

    def __init__(self, client: AsyncHttpClient | None = None) -> None:
        self._client: AsyncHttpClient = client if client is not None else AsyncHttpClient()

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(client={self._client!r})"

    @classmethod
    def from_config(
        cls, config: ClientConfig | None = None, *, logger: logging.Logger | None = None
    ) -> Self:
        r"""Create a content client over a new AsyncHttpClient.

        Args:
            config: Optional client configuration.
            logger: Optional logger receiving the diagnostic records.

        Returns:
            The content client.
        """
        return cls(AsyncHttpClient(config, logger=logger))

    @property
    def client(self) -> AsyncHttpClient:
        return self._client

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def do(
        self,
        method: str,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send a request with a custom method.

        See ``BaseContentClient.do()``.
        """
        data = encode_body(self.codec, body, self._client.logger)
        text = await self._client.do(
            method,
            url,
            data,
            options=(set_header("Content-Type", self.codec.content_type), *options),
            context=context,
        )
        return decode_result(self.codec, text, result_type, self._client.logger)

    async def options(
        self,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send an OPTIONS request. See ``do()``."""
        return await self.do("OPTIONS", url, body, result_type, options=options, context=context)

    async def head(
        self,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send a HEAD request. See ``do()``."""
        return await self.do("HEAD", url, body, result_type, options=options, context=context)

    async def get(
        self,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send a GET request. See ``do()``."""
        return await self.do("GET", url, body, result_type, options=options, context=context)

    async def post(
        self,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send a POST request. See ``do()``."""
        return await self.do("POST", url, body, result_type, options=options, context=context)

    async def patch(
        self,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send a PATCH request. See ``do()``."""
        return await self.do("PATCH", url, body, result_type, options=options, context=context)

    async def put(
        self,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send a PUT request. See ``do()``."""
        return await self.do("PUT", url, body, result_type, options=options, context=context)

    async def delete(
        self,
        url: str,
        body: Any = None,
        result_type: Any = None,
        *,
        options: Sequence[RequestOption] = (),
        context: RequestContext | None = None,
    ) -> Any:
        r"""Send a DELETE request. See ``do()``."""
        return await self.do("DELETE", url, body, result_type, options=options, context=context)
