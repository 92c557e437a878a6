r"""Implement the request options used to customize a request before it
is sent.

A request option is a callable ``option(context, request) -> context``
that mutates the ``httpx.Request`` in place and returns the context to
pass to the next option. An option rejects the request by raising an
exception, which stops the option chain before the request is sent.

Example:
    ```pycon
    >>> import httpx
    >>> from reqpipe.context import RequestContext
    >>> from reqpipe.options import apply_options, set_header, set_query
    >>> request = httpx.Request("GET", "http://h/path?x=0")
    >>> ctx = apply_options(
    ...     RequestContext.background(),
    ...     request,
    ...     [set_header("X-Token", "abc"), set_query({"x": ["1", "2"]})],
    ... )
    >>> str(request.url)
    'http://h/path?x=0&x=1&x=2'
    >>> request.headers["X-Token"]
    'abc'

    ```
"""

from __future__ import annotations

__all__ = [
    "RequestOption",
    "apply_options",
    "set_context_value",
    "set_header",
    "set_query",
    "set_timeout",
    "set_type_form",
    "set_type_json",
    "set_type_xml",
]

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, TypeAlias

import httpx

from reqpipe.context import RequestContext
from reqpipe.exceptions import RequestOptionError

RequestOption: TypeAlias = Callable[[RequestContext, httpx.Request], RequestContext]

CONTENT_TYPE_JSON = "application/json; charset=UTF-8"
CONTENT_TYPE_XML = "application/xml; charset=UTF-8"
CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"


def apply_options(
    context: RequestContext, request: httpx.Request, options: Iterable[RequestOption]
) -> RequestContext:
    r"""Apply the request options in order.

    Args:
        context: The initial request context.
        request: The request to customize.
        options: The request options to apply.

    Returns:
        The context returned by the last option.

    Raises:
        Exception: The first exception raised by an option. The
            remaining options are not applied.
    """
    for option in options:
        context = option(context, request)
    return context


def set_header(key: str, value: str) -> RequestOption:
    r"""Return an option that sets the request header ``key``.

    An existing header with the same name is replaced.

    Args:
        key: The header name.
        value: The header value.

    Returns:
        The request option.
    """

    def option(context: RequestContext, request: httpx.Request) -> RequestContext:
        if any(c in key or c in value for c in ("\r", "\n")):
            msg = f"invalid header {key!r}: value must not contain CR or LF"
            raise RequestOptionError(msg)
        request.headers[key] = value
        return context

    return option


def set_type_xml() -> RequestOption:
    r"""Return an option that sets ``Content-Type`` to
    ``application/xml``."""
    return set_header("Content-Type", CONTENT_TYPE_XML)


def set_type_json() -> RequestOption:
    r"""Return an option that sets ``Content-Type`` to
    ``application/json``."""
    return set_header("Content-Type", CONTENT_TYPE_JSON)


def set_type_form() -> RequestOption:
    r"""Return an option that sets ``Content-Type`` to
    ``application/x-www-form-urlencoded``."""
    return set_header("Content-Type", CONTENT_TYPE_FORM)


def set_query(values: Mapping[str, str | Sequence[str]]) -> RequestOption:
    r"""Return an option that adds query parameters to the request URL.

    The merge is additive: the parameters already present in the URL
    are kept in place and the new values are appended after them.

    Args:
        values: The query parameters to add. A string value adds one
            parameter, a sequence of strings adds one parameter per
            item.

    Returns:
        The request option.

    Example:
        ```pycon
        >>> import httpx
        >>> from reqpipe.context import RequestContext
        >>> from reqpipe.options import set_query
        >>> request = httpx.Request("GET", "http://h/path?x=0")
        >>> _ = set_query({"x": ["1", "2"], "y": "a"})(RequestContext(), request)
        >>> request.url.query
        b'x=0&x=1&x=2&y=a'

        ```
    """
    pairs: list[tuple[str, str]] = []
    for key, value in values.items():
        if isinstance(value, str):
            pairs.append((key, value))
        else:
            pairs.extend((key, item) for item in value)

    def option(context: RequestContext, request: httpx.Request) -> RequestContext:
        params = request.url.params
        for key, value in pairs:
            params = params.add(key, value)
        request.url = request.url.copy_with(params=params)
        return context

    return option


def set_timeout(timeout: float) -> RequestOption:
    r"""Return an option that overrides the client timeout for this
    request.

    Args:
        timeout: The timeout in seconds. Must be > 0.

    Returns:
        The request option.
    """

    def option(context: RequestContext, request: httpx.Request) -> RequestContext:  # noqa: ARG001
        return context.with_timeout(timeout)

    return option


def set_context_value(key: str, value: Any) -> RequestOption:
    r"""Return an option that attaches a value to the request context.

    Args:
        key: The context key.
        value: The value to attach.

    Returns:
        The request option.
    """

    def option(context: RequestContext, request: httpx.Request) -> RequestContext:  # noqa: ARG001
        return context.with_value(key, value)

    return option
