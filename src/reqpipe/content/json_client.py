r"""JSON clients."""

from __future__ import annotations

__all__ = ["AsyncJSONClient", "JSONClient"]

from reqpipe.codecs import JSONCodec
from reqpipe.content.base import BaseAsyncContentClient, BaseContentClient


class JSONClient(BaseContentClient):
    r"""Synchronous client talking in JSON.

    Request bodies are sent with
    ``Content-Type: application/json; charset=UTF-8``.

    Example:
        ```pycon
        >>> from dataclasses import dataclass
        >>> import httpx
        >>> from reqpipe import ClientConfig, JSONClient
        >>> @dataclass
        ... class Item:
        ...     a: int
        ...
        >>> echo = httpx.MockTransport(lambda request: httpx.Response(200, stream=httpx.ByteStream(request.content)))
        >>> with JSONClient.from_config(ClientConfig(transport=echo)) as client:
        ...     client.post("http://example.com/echo", Item(a=1), Item)
        ...
        Item(a=1)

        ```
    """

    codec = JSONCodec()


class AsyncJSONClient(BaseAsyncContentClient):
    r"""Asynchronous client talking in JSON.

    See ``JSONClient``.
    """

    codec = JSONCodec()
