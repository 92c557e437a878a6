r"""Implement the request context propagated through the request
options.

A ``RequestContext`` is an immutable carrier of per-call values, an
optional per-call timeout, and an optional cancellation flag. Request
options receive the current context and return the context used by the
next option, so an option can attach data (for example tracing
identifiers) without mutating shared state.
"""

from __future__ import annotations

__all__ = ["RequestContext"]

import threading
import time
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from reqpipe.exceptions import RequestCancelledError

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True)
class RequestContext:
    r"""Immutable context of a single logical request.

    Args:
        values: The values attached to the context.
        timeout: Optional timeout in seconds overriding the client
            timeout for the requests sent with this context.
        cancel_event: Optional event used to signal cancellation.

    Example:
        ```pycon
        >>> from reqpipe.context import RequestContext
        >>> ctx = RequestContext.background().with_value("trace_id", "abc")
        >>> ctx.value("trace_id")
        'abc'
        >>> ctx.with_timeout(2.0).timeout
        2.0
        >>> ctx.cancelled
        False

        ```
    """

    values: Mapping[str, Any] = field(default_factory=dict)
    timeout: float | None = None
    cancel_event: threading.Event | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))
        if self.timeout is not None and self.timeout <= 0:
            msg = f"timeout must be > 0, got {self.timeout}"
            raise ValueError(msg)

    @classmethod
    def background(cls) -> RequestContext:
        r"""Return an empty context, never cancelled and without
        timeout."""
        return cls()

    def value(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def with_value(self, key: str, value: Any) -> RequestContext:
        r"""Return a copy of the context with ``key`` set to
        ``value``."""
        return replace(self, values={**self.values, key: value})

    def with_timeout(self, timeout: float) -> RequestContext:
        r"""Return a copy of the context with a per-call timeout."""
        return replace(self, timeout=timeout)

    def with_cancel(self) -> RequestContext:
        r"""Return a copy of the context that can be cancelled with
        ``cancel()``.

        The copy gets its own event, so cancelling it does not cancel
        the parent context.
        """
        return replace(self, cancel_event=threading.Event())

    def cancel(self) -> None:
        r"""Cancel the context.

        Raises:
            RuntimeError: if the context was not created with
                ``with_cancel()``.
        """
        if self.cancel_event is None:
            msg = "context is not cancellable, use with_cancel() to create a cancellable context"
            raise RuntimeError(msg)
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def check(self) -> None:
        r"""Raise ``RequestCancelledError`` if the context is
        cancelled."""
        if self.cancelled:
            msg = "request context cancelled"
            raise RequestCancelledError(msg)

    def wait(self, seconds: float) -> None:
        r"""Block for ``seconds``, or until the context is cancelled.

        Args:
            seconds: The number of seconds to wait.

        Raises:
            RequestCancelledError: if the context is cancelled before or
                during the wait.
        """
        self.check()
        if self.cancel_event is None:
            time.sleep(seconds)
            return
        if self.cancel_event.wait(seconds):
            msg = "request context cancelled"
            raise RequestCancelledError(msg)
