r"""Request pipeline shared by the sync and async clients.

One call of ``execute_request`` (or ``execute_request_async``) is one
physical attempt:

1. build a fresh request from the method, URL and body, advertising
   ``Accept-Encoding: gzip`` only;
2. apply the default request options, then the call options;
3. send the request, measuring the elapsed time from just before the
   dispatch;
4. reject the status codes outside ``[200, 300)`` with a ``HTTPError``
   before reading the body;
5. read the raw body, decompressing it if ``Content-Encoding`` is
   ``gzip``, and decode it to text.

Each attempt emits exactly one diagnostic record, at ERROR level for a
failure or at DEBUG level for a success.
"""

from __future__ import annotations

__all__ = [
    "DownloadResult",
    "download_file",
    "download_file_async",
    "execute_request",
    "format_cookies",
    "execute_request_async",
]

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx

from reqpipe.context import RequestContext
from reqpipe.core.encoding import ACCEPT_ENCODING, decode_text, get_decoder
from reqpipe.exceptions import HTTPError, ResponseDecodeError
from reqpipe.options import apply_options
from reqpipe.utils.structured_logging import log_structured

if TYPE_CHECKING:
    from collections.abc import Sequence

    from reqpipe.core.config import ClientConfig
    from reqpipe.options import RequestOption


@dataclass(frozen=True)
class _Attempt:
    request: httpx.Request
    context: RequestContext
    fields: dict[str, Any]


@dataclass(frozen=True)
class DownloadResult:
    r"""Result of a file download.

    Attributes:
        path: The path of the written file.
        size: The number of bytes written.
    """

    path: Path
    size: int


def _status_text(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


def format_cookies(response: httpx.Response) -> str:
    r"""Return the cookies set by the response as
    ``name=value|name=value``.

    Every ``Set-Cookie`` header is listed in the order received,
    whatever its domain or path attributes. Headers without a cookie
    name are skipped.
    """
    pairs = []
    for header in response.headers.get_list("set-cookie"):
        name, sep, value = header.split(";", 1)[0].partition("=")
        if sep and name.strip():
            pairs.append(f"{name.strip()}={value.strip()}")
    return "|".join(pairs)


def _log_error(
    logger: logging.Logger, message: str, error: BaseException, begin: float, fields: dict[str, Any]
) -> None:
    log_structured(
        logger,
        logging.ERROR,
        message,
        error=str(error),
        error_type=type(error).__name__,
        proc_time=time.perf_counter() - begin,
        **fields,
    )


def _prepare(
    client: httpx.Client | httpx.AsyncClient,
    config: ClientConfig,
    logger: logging.Logger,
    method: str,
    url: str,
    body: str | bytes,
    options: Sequence[RequestOption],
    context: RequestContext | None,
) -> _Attempt:
    content = body.encode("utf-8") if isinstance(body, str) else body
    request = client.build_request(
        method, url, content=content or None, headers={"Accept-Encoding": ACCEPT_ENCODING}
    )
    context = context if context is not None else RequestContext.background()
    begin = time.perf_counter()
    try:
        context = apply_options(context, request, (*config.request_options, *options))
    except Exception as exc:
        _log_error(logger, "apply request option", exc, begin, {"method": method, "url": url})
        raise
    if context.timeout is not None:
        request.extensions["timeout"] = httpx.Timeout(context.timeout).as_dict()

    fields: dict[str, Any] = {"method": method, "url": str(request.url)}
    if config.debug_traffic:
        fields["body"] = body if isinstance(body, str) else body.decode("utf-8", errors="replace")
    return _Attempt(request=request, context=context, fields=fields)


def _check_status(
    response: httpx.Response, logger: logging.Logger, begin: float, fields: dict[str, Any]
) -> None:
    if 200 <= response.status_code < 300:
        return
    error = HTTPError(response.status_code, _status_text(response))
    _log_error(logger, "bad http status code", error, begin, {**fields, "status_code": response.status_code})
    raise error


def _log_success(
    logger: logging.Logger,
    response: httpx.Response,
    result: str,
    begin: float,
    fields: dict[str, Any],
    debug_traffic: bool,
) -> None:
    extra: dict[str, Any] = {
        **fields,
        "set_cookies": format_cookies(response),
        "proc_time": time.perf_counter() - begin,
    }
    if debug_traffic:
        extra["result"] = result
    log_structured(logger, logging.DEBUG, "request success", **extra)


def execute_request(
    client: httpx.Client,
    config: ClientConfig,
    logger: logging.Logger,
    method: str,
    url: str,
    body: str | bytes = "",
    options: Sequence[RequestOption] = (),
    context: RequestContext | None = None,
) -> str:
    r"""Send one request and return the decoded response body.

    Args:
        client: The httpx client used to send the request.
        config: The client configuration.
        logger: The logger receiving the diagnostic record.
        method: The HTTP method.
        url: The request URL.
        body: The request body.
        options: The call request options, applied after the default
            request options of the configuration.
        context: Optional request context.

    Returns:
        The response body as text.

    Raises:
        HTTPError: if the response status code is not in ``[200, 300)``.
        ResponseDecodeError: if the body cannot be read or decompressed.
        RequestCancelledError: if the context is cancelled.
        httpx.RequestError: if the transport fails.
        Exception: any exception raised by a request option.
    """
    attempt = _prepare(client, config, logger, method, url, body, options, context)
    fields = attempt.fields

    begin = time.perf_counter()
    try:
        attempt.context.check()
        response = client.send(attempt.request, stream=True)
    except Exception as exc:
        _log_error(logger, "do http request", exc, begin, fields)
        raise

    try:
        _check_status(response, logger, begin, fields)
        decoder = get_decoder(response)
        try:
            data = b"".join(decoder.decode(chunk) for chunk in response.iter_raw())
            data += decoder.flush()
        except (httpx.HTTPError, httpx.StreamError) as exc:
            error = ResponseDecodeError(f"read response body: {exc}")
            _log_error(logger, "read response body", error, begin, fields)
            raise error from exc
        except ResponseDecodeError as exc:
            _log_error(logger, "read response body", exc, begin, fields)
            raise
    finally:
        response.close()

    result = decode_text(data, response.charset_encoding)
    _log_success(logger, response, result, begin, fields, config.debug_traffic)
    return result


async def execute_request_async(
    client: httpx.AsyncClient,
    config: ClientConfig,
    logger: logging.Logger,
    method: str,
    url: str,
    body: str | bytes = "",
    options: Sequence[RequestOption] = (),
    context: RequestContext | None = None,
) -> str:
    r"""Send one request and return the decoded response body
    (asynchronous).

    See ``execute_request`` for the arguments and the raised errors.
    """
    attempt = _prepare(client, config, logger, method, url, body, options, context)
    fields = attempt.fields

    begin = time.perf_counter()
    try:
        attempt.context.check()
        response = await client.send(attempt.request, stream=True)
    except Exception as exc:
        _log_error(logger, "do http request", exc, begin, fields)
        raise

    try:
        _check_status(response, logger, begin, fields)
        decoder = get_decoder(response)
        chunks = []
        try:
            async for chunk in response.aiter_raw():
                chunks.append(decoder.decode(chunk))
            chunks.append(decoder.flush())
        except (httpx.HTTPError, httpx.StreamError) as exc:
            error = ResponseDecodeError(f"read response body: {exc}")
            _log_error(logger, "read response body", error, begin, fields)
            raise error from exc
        except ResponseDecodeError as exc:
            _log_error(logger, "read response body", exc, begin, fields)
            raise
    finally:
        await response.aclose()

    result = decode_text(b"".join(chunks), response.charset_encoding)
    _log_success(logger, response, result, begin, fields, config.debug_traffic)
    return result


def _prepare_download(
    client: httpx.Client | httpx.AsyncClient,
    config: ClientConfig,
    logger: logging.Logger,
    url: str,
    out_file: str | Path,
    options: Sequence[RequestOption],
    context: RequestContext | None,
) -> _Attempt:
    request = client.build_request("GET", url)
    context = context if context is not None else RequestContext.background()
    begin = time.perf_counter()
    try:
        context = apply_options(context, request, (*config.request_options, *options))
    except Exception as exc:
        _log_error(logger, "apply request option", exc, begin, {"method": "GET", "url": url})
        raise
    if context.timeout is not None:
        request.extensions["timeout"] = httpx.Timeout(context.timeout).as_dict()
    fields = {"method": "GET", "url": str(request.url), "out_file": str(out_file)}
    return _Attempt(request=request, context=context, fields=fields)


def download_file(
    client: httpx.Client,
    config: ClientConfig,
    logger: logging.Logger,
    url: str,
    out_file: str | Path,
    options: Sequence[RequestOption] = (),
    context: RequestContext | None = None,
) -> DownloadResult:
    r"""Download the response body of a GET request to a file.

    The body is copied as decoded by the transport. The download is
    never retried.

    Args:
        client: The httpx client used to send the request.
        config: The client configuration.
        logger: The logger receiving the diagnostic record.
        url: The request URL.
        out_file: The path of the file to write.
        options: The call request options.
        context: Optional request context.

    Returns:
        The path and size of the written file.

    Raises:
        HTTPError: if the response status code is not in ``[200, 300)``.
        OSError: if the file cannot be written.
        httpx.HTTPError: if the transport fails.
    """
    attempt = _prepare_download(client, config, logger, url, out_file, options, context)
    fields = attempt.fields
    path = Path(out_file)

    begin = time.perf_counter()
    try:
        attempt.context.check()
        response = client.send(attempt.request, stream=True)
    except Exception as exc:
        _log_error(logger, "do http request", exc, begin, fields)
        raise

    try:
        _check_status(response, logger, begin, fields)
        try:
            file = path.open("wb")
        except OSError as exc:
            _log_error(logger, "create download file", exc, begin, fields)
            raise
        written = 0
        with file:
            try:
                for chunk in response.iter_bytes():
                    written += file.write(chunk)
            except (OSError, httpx.HTTPError, httpx.StreamError) as exc:
                _log_error(logger, "copy response data to download file", exc, begin, fields)
                raise
    finally:
        response.close()

    log_structured(
        logger,
        logging.DEBUG,
        "request success",
        file_size=written,
        proc_time=time.perf_counter() - begin,
        **fields,
    )
    return DownloadResult(path=path, size=written)


async def download_file_async(
    client: httpx.AsyncClient,
    config: ClientConfig,
    logger: logging.Logger,
    url: str,
    out_file: str | Path,
    options: Sequence[RequestOption] = (),
    context: RequestContext | None = None,
) -> DownloadResult:
    r"""Download the response body of a GET request to a file
    (asynchronous).

    The file is opened and written in worker threads so the event loop
    is not blocked by the disk. See ``download_file`` for the arguments
    and the raised errors.
    """
    attempt = _prepare_download(client, config, logger, url, out_file, options, context)
    fields = attempt.fields
    path = Path(out_file)

    begin = time.perf_counter()
    try:
        attempt.context.check()
        response = await client.send(attempt.request, stream=True)
    except Exception as exc:
        _log_error(logger, "do http request", exc, begin, fields)
        raise

    try:
        _check_status(response, logger, begin, fields)
        try:
            file = await asyncio.to_thread(path.open, "wb")
        except OSError as exc:
            _log_error(logger, "create download file", exc, begin, fields)
            raise
        written = 0
        try:
            async for chunk in response.aiter_bytes():
                written += await asyncio.to_thread(file.write, chunk)
        except (OSError, httpx.HTTPError, httpx.StreamError) as exc:
            _log_error(logger, "copy response data to download file", exc, begin, fields)
            raise
        finally:
            await asyncio.to_thread(file.close)
    finally:
        await response.aclose()

    log_structured(
        logger,
        logging.DEBUG,
        "request success",
        file_size=written,
        proc_time=time.perf_counter() - begin,
        **fields,
    )
    return DownloadResult(path=path, size=written)
