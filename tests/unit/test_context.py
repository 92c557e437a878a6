r"""Unit tests for RequestContext."""

from __future__ import annotations

import threading
from unittest.mock import Mock

import pytest

from reqpipe.context import RequestContext
from reqpipe.exceptions import RequestCancelledError

####################################
#     Tests for RequestContext     #
####################################


def test_background_is_empty() -> None:
    """Test that the background context has no value, timeout or
    cancellation."""
    ctx = RequestContext.background()
    assert dict(ctx.values) == {}
    assert ctx.timeout is None
    assert ctx.cancel_event is None
    assert not ctx.cancelled


def test_with_value() -> None:
    """Test that with_value returns a new context with the value."""
    ctx = RequestContext.background()
    child = ctx.with_value("trace_id", "abc")
    assert child.value("trace_id") == "abc"
    assert ctx.value("trace_id") is None


def test_value_default() -> None:
    """Test that value returns the default for a missing key."""
    assert RequestContext().value("missing", 42) == 42


def test_values_are_read_only() -> None:
    """Test that the context values cannot be mutated."""
    ctx = RequestContext(values={"a": 1})
    with pytest.raises(TypeError):
        ctx.values["b"] = 2  # type: ignore[index]


def test_values_are_copied() -> None:
    """Test that mutating the source mapping does not change the
    context."""
    values = {"a": 1}
    ctx = RequestContext(values=values)
    values["a"] = 2
    assert ctx.value("a") == 1


def test_with_timeout() -> None:
    """Test that with_timeout sets the timeout."""
    assert RequestContext().with_timeout(2.5).timeout == 2.5


@pytest.mark.parametrize("timeout", [0, -1.0])
def test_invalid_timeout(timeout: float) -> None:
    """Test that a timeout <= 0 is rejected."""
    with pytest.raises(ValueError, match=r"timeout must be > 0"):
        RequestContext(timeout=timeout)


def test_cancel() -> None:
    """Test that a cancellable context can be cancelled."""
    ctx = RequestContext().with_cancel()
    assert not ctx.cancelled
    ctx.cancel()
    assert ctx.cancelled


def test_cancel_not_cancellable() -> None:
    """Test that cancelling a context without event raises an error."""
    with pytest.raises(RuntimeError, match=r"context is not cancellable"):
        RequestContext().cancel()


def test_cancel_keeps_parent() -> None:
    """Test that cancelling a child context does not cancel the
    parent."""
    parent = RequestContext().with_cancel()
    child = parent.with_cancel()
    child.cancel()
    assert child.cancelled
    assert not parent.cancelled


def test_with_value_shares_cancellation() -> None:
    """Test that a context derived with with_value shares the
    cancellation of its parent."""
    parent = RequestContext().with_cancel()
    child = parent.with_value("a", 1)
    parent.cancel()
    assert child.cancelled


def test_check() -> None:
    """Test that check raises only if the context is cancelled."""
    ctx = RequestContext().with_cancel()
    ctx.check()
    ctx.cancel()
    with pytest.raises(RequestCancelledError, match=r"request context cancelled"):
        ctx.check()


def test_wait_without_event(mock_sleep: Mock) -> None:
    """Test that wait sleeps when the context is not cancellable."""
    RequestContext().wait(1.5)
    mock_sleep.assert_called_once_with(1.5)


def test_wait_with_event_not_cancelled() -> None:
    """Test that wait returns after the delay when not cancelled."""
    RequestContext().with_cancel().wait(0.01)


def test_wait_already_cancelled(mock_sleep: Mock) -> None:
    """Test that wait raises immediately if the context is already
    cancelled."""
    ctx = RequestContext().with_cancel()
    ctx.cancel()
    with pytest.raises(RequestCancelledError):
        ctx.wait(10.0)
    mock_sleep.assert_not_called()


def test_wait_cancelled_during_wait() -> None:
    """Test that cancelling the context interrupts the wait."""
    ctx = RequestContext().with_cancel()
    timer = threading.Timer(0.05, ctx.cancel)
    timer.start()
    try:
        with pytest.raises(RequestCancelledError):
            ctx.wait(30.0)
    finally:
        timer.cancel()
