from __future__ import annotations

import gzip

import pytest

from reqpipe.core.encoding import GzipDecoder, IdentityDecoder, decode_text, get_decoder
from reqpipe.exceptions import ResponseDecodeError
from tests.helpers import make_response

#################################
#     Tests for get_decoder     #
#################################


def test_get_decoder_gzip() -> None:
    response = make_response(200, b"x", {"Content-Encoding": "gzip"})
    assert isinstance(get_decoder(response), GzipDecoder)


@pytest.mark.parametrize("encoding", ["GZIP", "gzip, br", "x-gzip", "deflate"])
def test_get_decoder_not_exact_gzip(encoding: str) -> None:
    """Test that only an exact gzip value selects the gzip decoder."""
    response = make_response(200, b"x", {"Content-Encoding": encoding})
    assert isinstance(get_decoder(response), IdentityDecoder)


def test_get_decoder_no_header() -> None:
    assert isinstance(get_decoder(make_response(200, b"x")), IdentityDecoder)


#################################
#     Tests for GzipDecoder     #
#################################


def test_gzip_decoder_single_chunk() -> None:
    decoder = GzipDecoder()
    assert decoder.decode(gzip.compress(b"hello world")) + decoder.flush() == b"hello world"


def test_gzip_decoder_byte_by_byte() -> None:
    """Test that the body can be decompressed one byte at a time."""
    data = gzip.compress(b"hello world" * 100)
    decoder = GzipDecoder()
    out = b"".join(decoder.decode(data[i : i + 1]) for i in range(len(data)))
    assert out + decoder.flush() == b"hello world" * 100


def test_gzip_decoder_multiple_members() -> None:
    """Test that concatenated gzip members are all decoded."""
    data = gzip.compress(b"hello ") + gzip.compress(b"world")
    decoder = GzipDecoder()
    assert decoder.decode(data) + decoder.flush() == b"hello world"


def test_gzip_decoder_members_split_on_boundary() -> None:
    first = gzip.compress(b"hello ")
    second = gzip.compress(b"world")
    decoder = GzipDecoder()
    assert decoder.decode(first) + decoder.decode(second) + decoder.flush() == b"hello world"


def test_gzip_decoder_invalid_data() -> None:
    with pytest.raises(ResponseDecodeError, match=r"invalid gzip data"):
        GzipDecoder().decode(b"not gzip at all")


def test_gzip_decoder_truncated() -> None:
    """Test that a truncated gzip stream is an error."""
    data = gzip.compress(b"hello world")
    decoder = GzipDecoder()
    decoder.decode(data[:-4])
    with pytest.raises(ResponseDecodeError, match=r"unexpected end of gzip stream"):
        decoder.flush()


def test_gzip_decoder_empty_body() -> None:
    decoder = GzipDecoder()
    assert decoder.decode(b"") == b""
    with pytest.raises(ResponseDecodeError):
        decoder.flush()


def test_identity_decoder() -> None:
    decoder = IdentityDecoder()
    assert decoder.decode(b"abc") == b"abc"
    assert decoder.flush() == b""


#################################
#     Tests for decode_text     #
#################################


def test_decode_text_default_utf8() -> None:
    assert decode_text("héllo".encode(), None) == "héllo"


def test_decode_text_charset() -> None:
    assert decode_text("héllo".encode("latin-1"), "ISO-8859-1") == "héllo"


def test_decode_text_unknown_charset() -> None:
    """Test that an unknown charset falls back to UTF-8."""
    assert decode_text(b"hello", "no-such-charset") == "hello"


def test_decode_text_invalid_bytes() -> None:
    assert decode_text(b"ok\xff", "utf-8") == "ok�"
