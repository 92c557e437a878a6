r"""Integration tests against a loopback HTTP server.

The server runs in a background thread, so these tests go through the
default httpx transport and read the bodies from a real socket.
"""

from __future__ import annotations

import gzip
import json
import threading
import zlib
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import TYPE_CHECKING, ClassVar
from urllib.parse import parse_qsl, urlsplit

import httpx
import pytest

from reqpipe import ClientConfig, HttpClient, JSONClient, set_header, set_query
from reqpipe.exceptions import HTTPError

if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


class LoopbackHandler(BaseHTTPRequestHandler):
    """Request handler answering according to the request path.

    * ``/echo``: 200 with the request body;
    * ``/gzip``: 200 with a gzip body, whatever ``Accept-Encoding``;
    * ``/status/<code>``: the given status code;
    * ``/query``: 200 with the query parameters as JSON;
    * ``/cookies``: 200 setting two cookies;
    * ``/flaky``: 503 for the first two requests, then 200;
    * ``/negotiate``: 200 compressed with deflate when the request
      accepts it, else with gzip when accepted, else uncompressed.
    """

    protocol_version = "HTTP/1.1"
    flaky_calls: ClassVar[list[int]] = []

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        pass

    def _send(self, status: int, body: bytes, headers: dict[str, str] | None = None) -> None:
        self.send_response(status)
        for key, value in (headers or {}).items():
            self.send_header(key, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    def _send_negotiated(self, body: bytes) -> None:
        accepted = {
            coding.split(";")[0].strip()
            for coding in self.headers.get("Accept-Encoding", "").split(",")
        }
        if "deflate" in accepted:
            self._send(200, zlib.compress(body), {"Content-Encoding": "deflate"})
        elif "gzip" in accepted:
            self._send(200, gzip.compress(body), {"Content-Encoding": "gzip"})
        else:
            self._send(200, body)

    def _handle(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        url = urlsplit(self.path)
        if url.path == "/echo":
            self._send(200, body)
        elif url.path == "/gzip":
            self._send(200, gzip.compress(b"compressed payload"), {"Content-Encoding": "gzip"})
        elif url.path.startswith("/status/"):
            self._send(int(url.path.rsplit("/", 1)[1]), b"status body")
        elif url.path == "/query":
            self._send(200, json.dumps(parse_qsl(url.query)).encode())
        elif url.path == "/cookies":
            self.send_response(200)
            self.send_header("Set-Cookie", "a=1; Path=/")
            self.send_header("Set-Cookie", "b=2; Path=/")
            self.send_header("Content-Length", "0")
            self.end_headers()
        elif url.path == "/negotiate":
            self._send_negotiated(b"hello world")
        elif url.path == "/flaky":
            self.flaky_calls.append(1)
            if len(self.flaky_calls) <= 2:
                self._send(503, b"busy")
            else:
                self._send(200, b"recovered")
        else:
            self._send(404, b"not found")

    do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = do_OPTIONS = do_HEAD = _handle


@pytest.fixture(scope="module")
def base_url() -> Generator[str, None, None]:
    server = ThreadingHTTPServer(("127.0.0.1", 0), LoopbackHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture(autouse=True)
def _no_proxy(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def client() -> Generator[HttpClient, None, None]:
    with HttpClient(ClientConfig(timeout=5.0)) as client:
        yield client


##########################################
#     Tests against a loopback server    #
##########################################


def test_loopback_echo(client: HttpClient, base_url: str) -> None:
    assert client.post(f"{base_url}/echo", "hello") == "hello"


def test_loopback_gzip_without_accept_encoding(client: HttpClient, base_url: str) -> None:
    text = client.get(f"{base_url}/gzip", options=[set_header("Accept-Encoding", "identity")])
    assert text == "compressed payload"


@pytest.mark.parametrize("status_code", [200, 201, 202])
def test_loopback_2xx(client: HttpClient, base_url: str, status_code: int) -> None:
    client.get(f"{base_url}/status/{status_code}")


@pytest.mark.parametrize(
    ("status_code", "status_text"), [(404, "404 Not Found"), (503, "503 Service Unavailable")]
)
def test_loopback_bad_status(
    client: HttpClient, base_url: str, status_code: int, status_text: str
) -> None:
    with pytest.raises(HTTPError) as exc_info:
        client.get(f"{base_url}/status/{status_code}")
    assert exc_info.value == HTTPError(status_code, status_text)


def test_loopback_query_merge(client: HttpClient, base_url: str) -> None:
    text = client.get(f"{base_url}/query?x=0", options=[set_query({"x": ["1", "2"]})])
    assert json.loads(text) == [["x", "0"], ["x", "1"], ["x", "2"]]


def test_loopback_cookies(client: HttpClient, base_url: str) -> None:
    client.get(f"{base_url}/cookies")
    assert dict(client.http_client.cookies) == {"a": "1", "b": "2"}


def test_loopback_retry(base_url: str) -> None:
    LoopbackHandler.flaky_calls.clear()
    config = ClientConfig(timeout=5.0).with_retry([0.01, 0.01])
    with HttpClient(config) as client:
        assert client.get(f"{base_url}/flaky") == "recovered"
    assert len(LoopbackHandler.flaky_calls) == 3


def test_loopback_json_round_trip(base_url: str) -> None:
    with JSONClient.from_config(ClientConfig(timeout=5.0)) as client:
        assert client.post(f"{base_url}/echo", {"a": 1}, dict) == {"a": 1}


def test_loopback_download(client: HttpClient, base_url: str, tmp_path: Path) -> None:
    out_file = tmp_path / "payload.txt"
    result = client.download_file(f"{base_url}/gzip", out_file)
    assert out_file.read_bytes() == b"compressed payload"
    assert result.size == len(b"compressed payload")


def test_loopback_connection_refused() -> None:
    """Test that a transport error reaches the caller unwrapped."""
    with HttpClient(ClientConfig(timeout=2.0)) as client, pytest.raises(httpx.ConnectError):
        client.get("http://127.0.0.1:1/unreachable")


def test_loopback_default_client_negotiates_decodable_encoding(base_url: str) -> None:
    """Test that a server choosing among the advertised encodings never
    returns one the client cannot decode."""
    with HttpClient() as client:
        assert client.get(f"{base_url}/negotiate") == "hello world"


def test_loopback_borrowed_client_negotiates_decodable_encoding(base_url: str) -> None:
    with httpx.Client() as http_client:
        client = HttpClient(client=http_client)
        assert client.get(f"{base_url}/negotiate") == "hello world"
