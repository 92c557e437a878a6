r"""Response body decoders selected from the ``Content-Encoding``
header.

The body is read as raw bytes from the transport, so the decoding done
here is the only one applied. Only ``gzip`` is recognized, and only when
the header is exactly ``gzip``; any other value leaves the body
unchanged.
"""

from __future__ import annotations

__all__ = ["ACCEPT_ENCODING", "GzipDecoder", "IdentityDecoder", "decode_text", "get_decoder"]

import codecs
import zlib
from typing import TYPE_CHECKING

from reqpipe.exceptions import ResponseDecodeError

if TYPE_CHECKING:
    import httpx

# Accept-Encoding header advertising the only content coding decoded here
ACCEPT_ENCODING = "gzip"

# wbits value to decode a gzip header and trailer
GZIP_WBITS = 16 + zlib.MAX_WBITS


class IdentityDecoder:
    r"""Pass the body through unchanged."""

    def decode(self, data: bytes) -> bytes:
        return data

    def flush(self) -> bytes:
        return b""


class GzipDecoder:
    r"""Incrementally decompress a gzip body.

    Concatenated gzip members are decoded one after the other.

    Example:
        ```pycon
        >>> import gzip
        >>> from reqpipe.core.encoding import GzipDecoder
        >>> data = gzip.compress(b"hello")
        >>> decoder = GzipDecoder()
        >>> decoder.decode(data[:5]) + decoder.decode(data[5:]) + decoder.flush()
        b'hello'

        ```
    """

    def __init__(self) -> None:
        self._decompressor = zlib.decompressobj(GZIP_WBITS)

    def decode(self, data: bytes) -> bytes:
        r"""Decompress a chunk of the body.

        Raises:
            ResponseDecodeError: if the data is not valid gzip data.
        """
        chunks = []
        while data:
            if self._decompressor.eof:
                self._decompressor = zlib.decompressobj(GZIP_WBITS)
            try:
                chunks.append(self._decompressor.decompress(data))
            except zlib.error as exc:
                msg = f"invalid gzip data: {exc}"
                raise ResponseDecodeError(msg) from exc
            data = self._decompressor.unused_data if self._decompressor.eof else b""
        return b"".join(chunks)

    def flush(self) -> bytes:
        r"""Return the remaining decompressed data.

        Raises:
            ResponseDecodeError: if the gzip stream is truncated.
        """
        tail = self._decompressor.flush()
        if not self._decompressor.eof:
            msg = "unexpected end of gzip stream"
            raise ResponseDecodeError(msg)
        return tail


def get_decoder(response: httpx.Response) -> IdentityDecoder | GzipDecoder:
    r"""Return the decoder for the response body.

    Some servers send a gzip body even when the request did not ask for
    it, so the decision only depends on the response header.
    """
    if response.headers.get("Content-Encoding") == "gzip":
        return GzipDecoder()
    return IdentityDecoder()


def decode_text(data: bytes, charset: str | None) -> str:
    r"""Decode the body bytes to text with the response charset, or
    UTF-8.

    Undecodable bytes are replaced.
    """
    encoding = "utf-8"
    if charset:
        try:
            encoding = codecs.lookup(charset).name
        except LookupError:
            pass
    return data.decode(encoding, errors="replace")
