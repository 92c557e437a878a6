r"""Codecs converting typed values to and from request and response
bodies."""

from __future__ import annotations

__all__ = ["Codec", "JSONCodec", "XMLCodec", "type_adapter"]

from reqpipe.codecs.base import Codec, type_adapter
from reqpipe.codecs.json_codec import JSONCodec
from reqpipe.codecs.xml_codec import XMLCodec
