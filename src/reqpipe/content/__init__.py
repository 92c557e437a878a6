r"""Content clients converting typed values to and from JSON or XML
bodies."""

from __future__ import annotations

__all__ = [
    "AsyncJSONClient",
    "AsyncXMLClient",
    "BaseAsyncContentClient",
    "BaseContentClient",
    "JSONClient",
    "XMLClient",
]

from reqpipe.content.base import BaseAsyncContentClient, BaseContentClient
from reqpipe.content.json_client import AsyncJSONClient, JSONClient
from reqpipe.content.xml_client import AsyncXMLClient, XMLClient
