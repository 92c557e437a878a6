r"""Implement helpers to build backoff schedules.

A backoff schedule is the ordered sequence of delays, in seconds, waited
before each retry. Its length is the maximum number of retries.
"""

from __future__ import annotations

__all__ = [
    "constant_backoff",
    "exponential_backoff",
    "limited_exponential_backoff",
    "validate_backoff",
]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


def validate_backoff(backoff: Sequence[float]) -> None:
    r"""Validate a backoff schedule.

    Args:
        backoff: The delays in seconds.

    Raises:
        ValueError: if a delay is negative.

    Example:
        ```pycon
        >>> from reqpipe.retry.backoff import validate_backoff
        >>> validate_backoff([0.1, 0.2])
        >>> validate_backoff([-1.0])  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValueError: backoff delays must be >= 0, got -1.0

        ```
    """
    for delay in backoff:
        if delay < 0:
            msg = f"backoff delays must be >= 0, got {delay}"
            raise ValueError(msg)


def _validate_count(n: int) -> None:
    if n < 0:
        msg = f"n must be >= 0, got {n}"
        raise ValueError(msg)


def constant_backoff(n: int, delay: float) -> tuple[float, ...]:
    r"""Return a schedule of ``n`` retries waiting ``delay`` seconds
    each.

    Example:
        ```pycon
        >>> from reqpipe.retry.backoff import constant_backoff
        >>> constant_backoff(3, 0.5)
        (0.5, 0.5, 0.5)

        ```
    """
    _validate_count(n)
    if delay < 0:
        msg = f"delay must be >= 0, got {delay}"
        raise ValueError(msg)
    return tuple(delay for _ in range(n))


def exponential_backoff(n: int, initial: float) -> tuple[float, ...]:
    r"""Return a schedule of ``n`` retries doubling the delay each
    time.

    Example:
        ```pycon
        >>> from reqpipe.retry.backoff import exponential_backoff
        >>> exponential_backoff(4, 0.1)
        (0.1, 0.2, 0.4, 0.8)

        ```
    """
    _validate_count(n)
    if initial < 0:
        msg = f"initial must be >= 0, got {initial}"
        raise ValueError(msg)
    return tuple(initial * (2**i) for i in range(n))


def limited_exponential_backoff(n: int, initial: float, limit: float) -> tuple[float, ...]:
    r"""Return an exponential schedule where each delay is capped at
    ``limit`` seconds.

    Example:
        ```pycon
        >>> from reqpipe.retry.backoff import limited_exponential_backoff
        >>> limited_exponential_backoff(5, 1.0, 5.0)
        (1.0, 2.0, 4.0, 5.0, 5.0)

        ```
    """
    if limit < 0:
        msg = f"limit must be >= 0, got {limit}"
        raise ValueError(msg)
    return tuple(min(delay, limit) for delay in exponential_backoff(n, initial))
