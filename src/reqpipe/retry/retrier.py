r"""Implement the retry loop.

The ``Retrier`` repeatedly calls a function until its outcome is
classified as a success or a failure, or until the backoff schedule is
exhausted. Each attempt returns its own result or raises its own error,
so the loop never shares state between attempts.
"""

from __future__ import annotations

__all__ = ["Retrier"]

import asyncio
import logging
import random
import time
from typing import TYPE_CHECKING, TypeVar

from reqpipe.retry.backoff import validate_backoff
from reqpipe.retry.classifier import DEFAULT_RETRY_CLASSIFIER, Action

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from reqpipe.context import RequestContext
    from reqpipe.retry.classifier import RetryClassifier

T = TypeVar("T")

logger: logging.Logger = logging.getLogger(__name__)


class Retrier:
    r"""Retry a function according to a backoff schedule and a
    classifier.

    Given a backoff schedule of length N, the function is called at most
    N + 1 times: the initial attempt plus one retry per delay.

    Args:
        backoff: The delays in seconds to wait before each retry.
        classifier: The classifier of the attempt outcomes. If ``None``,
            ``DEFAULT_RETRY_CLASSIFIER`` is used, which retries on any
            error.
        jitter_factor: Factor for adding random jitter to the delays.
            The jitter ``random.uniform(0, jitter_factor) * delay`` is
            added to each delay. Must be >= 0.

    Example:
        ```pycon
        >>> from reqpipe.retry import Retrier
        >>> calls = []
        >>> def flaky():
        ...     calls.append(1)
        ...     if len(calls) < 3:
        ...         raise ConnectionError("boom")
        ...     return "ok"
        ...
        >>> Retrier([0.0, 0.0, 0.0]).run(flaky)
        'ok'
        >>> len(calls)
        3

        ```
    """

    def __init__(
        self,
        backoff: Sequence[float],
        classifier: RetryClassifier | None = None,
        jitter_factor: float = 0.0,
    ) -> None:
        validate_backoff(backoff)
        if jitter_factor < 0:
            msg = f"jitter_factor must be >= 0, got {jitter_factor}"
            raise ValueError(msg)
        self.backoff: tuple[float, ...] = tuple(backoff)
        self.classifier: RetryClassifier = (
            classifier if classifier is not None else DEFAULT_RETRY_CLASSIFIER
        )
        self.jitter_factor = jitter_factor

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(backoff={self.backoff}, "
            f"classifier={self.classifier!r}, jitter_factor={self.jitter_factor})"
        )

    @property
    def max_retries(self) -> int:
        return len(self.backoff)

    def calculate_sleep_time(self, retry: int) -> float:
        r"""Return the delay before the retry with index ``retry``
        (0-indexed), including jitter."""
        delay = self.backoff[retry]
        if self.jitter_factor > 0:
            delay += random.uniform(0, self.jitter_factor) * delay  # noqa: S311
        return delay

    def _next_action(self, error: Exception | None, retry: int) -> Action:
        action = self.classifier.classify(error)
        if action is Action.RETRY and retry >= self.max_retries:
            logger.debug(f"Backoff schedule exhausted after {retry + 1} attempts")
            return Action.FAIL
        return action

    def run(self, func: Callable[[], T], context: RequestContext | None = None) -> T:
        r"""Call ``func`` until it succeeds or the retries are
        exhausted.

        Args:
            func: The function to call. It takes no argument and either
                returns a result or raises an exception.
            context: Optional request context. If provided, the waits
                between attempts are interrupted when the context is
                cancelled.

        Returns:
            The result of the last attempt.

        Raises:
            Exception: The error of the last attempt if the outcome is
                classified as a failure or the retries are exhausted.
            RequestCancelledError: if the context is cancelled during a
                wait.
        """
        retry = 0
        while True:
            result: T | None = None
            error: Exception | None = None
            try:
                result = func()
            except Exception as exc:  # noqa: BLE001
                error = exc

            action = self._next_action(error, retry)
            if action is not Action.RETRY:
                if error is not None:
                    raise error
                return result  # type: ignore[return-value]

            sleep_time = self.calculate_sleep_time(retry)
            retry += 1
            logger.debug(
                f"Attempt {retry}/{self.max_retries + 1} failed with "
                f"{type(error).__name__}: {error}, retrying in {sleep_time:.2f}s"
            )
            if context is not None:
                context.wait(sleep_time)
            else:
                time.sleep(sleep_time)

    async def run_async(self, func: Callable[[], Awaitable[T]]) -> T:
        r"""Await ``func()`` until it succeeds or the retries are
        exhausted.

        The waits use ``asyncio.sleep``, so cancelling the task running
        this coroutine interrupts them.

        Args:
            func: The coroutine function to call. It takes no argument.

        Returns:
            The result of the last attempt.

        Raises:
            Exception: The error of the last attempt if the outcome is
                classified as a failure or the retries are exhausted.
        """
        retry = 0
        while True:
            result: T | None = None
            error: Exception | None = None
            try:
                result = await func()
            except Exception as exc:  # noqa: BLE001
                error = exc

            action = self._next_action(error, retry)
            if action is not Action.RETRY:
                if error is not None:
                    raise error
                return result  # type: ignore[return-value]

            sleep_time = self.calculate_sleep_time(retry)
            retry += 1
            logger.debug(
                f"Attempt {retry}/{self.max_retries + 1} failed with "
                f"{type(error).__name__}: {error}, retrying in {sleep_time:.2f}s"
            )
            await asyncio.sleep(sleep_time)
