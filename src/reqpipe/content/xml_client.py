r"""XML clients."""

from __future__ import annotations

__all__ = ["AsyncXMLClient", "XMLClient"]

from reqpipe.codecs import XMLCodec
from reqpipe.content.base import BaseAsyncContentClient, BaseContentClient


class XMLClient(BaseContentClient):
    r"""Synchronous client talking in XML.

    Request bodies are sent with
    ``Content-Type: application/xml; charset=UTF-8``. See ``XMLCodec``
    for the mapping between values and XML documents.
    """

    codec = XMLCodec()


class AsyncXMLClient(BaseAsyncContentClient):
    r"""Asynchronous client talking in XML.

    See ``XMLClient``.
    """

    codec = XMLCodec()
