r"""Implement the retry classifiers.

A retry classifier maps the outcome of one attempt to an ``Action``.
The outcome is ``None`` when the attempt succeeded, otherwise it is the
exception raised by the attempt.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_RETRY_CLASSIFIER",
    "Action",
    "BlacklistClassifier",
    "DefaultClassifier",
    "RetryClassifier",
    "WhitelistClassifier",
]

import enum
from abc import ABC, abstractmethod


class Action(enum.Enum):
    r"""Define what the retry loop does after an attempt."""

    SUCCEED = "succeed"
    RETRY = "retry"
    FAIL = "fail"


class RetryClassifier(ABC):
    r"""Define the base class to classify the outcome of an attempt."""

    @abstractmethod
    def classify(self, error: Exception | None) -> Action:
        r"""Classify the outcome of an attempt.

        Args:
            error: The exception raised by the attempt, or ``None`` if
                the attempt succeeded.

        Returns:
            The action the retry loop must take.
        """


class DefaultClassifier(RetryClassifier):
    r"""Retry on any error.

    The classifier does not look at the error kind: a ``HTTPError``
    with a permanent status code such as 404 is retried exactly like a
    connection error. Use ``WhitelistClassifier``,
    ``BlacklistClassifier`` or a custom classifier to treat errors
    differently.

    Example:
        ```pycon
        >>> from reqpipe.exceptions import HTTPError
        >>> from reqpipe.retry import Action, DefaultClassifier
        >>> classifier = DefaultClassifier()
        >>> classifier.classify(None)
        <Action.SUCCEED: 'succeed'>
        >>> classifier.classify(HTTPError(404, "404 Not Found"))
        <Action.RETRY: 'retry'>

        ```
    """

    def classify(self, error: Exception | None) -> Action:
        if error is None:
            return Action.SUCCEED
        return Action.RETRY

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}()"


class WhitelistClassifier(RetryClassifier):
    r"""Retry only on the listed error types.

    Args:
        *error_types: The exception types that trigger a retry. Any
            other error fails the call immediately.

    Example:
        ```pycon
        >>> import httpx
        >>> from reqpipe.retry import WhitelistClassifier
        >>> classifier = WhitelistClassifier(httpx.TransportError)
        >>> classifier.classify(httpx.ConnectError("refused"))
        <Action.RETRY: 'retry'>
        >>> classifier.classify(ValueError("bad"))
        <Action.FAIL: 'fail'>

        ```
    """

    def __init__(self, *error_types: type[BaseException]) -> None:
        self.error_types = error_types

    def classify(self, error: Exception | None) -> Action:
        if error is None:
            return Action.SUCCEED
        if isinstance(error, self.error_types):
            return Action.RETRY
        return Action.FAIL

    def __repr__(self) -> str:
        names = ", ".join(t.__qualname__ for t in self.error_types)
        return f"{self.__class__.__qualname__}({names})"


class BlacklistClassifier(RetryClassifier):
    r"""Retry on any error except the listed error types.

    Args:
        *error_types: The exception types that fail the call
            immediately. Any other error triggers a retry.
    """

    def __init__(self, *error_types: type[BaseException]) -> None:
        self.error_types = error_types

    def classify(self, error: Exception | None) -> Action:
        if error is None:
            return Action.SUCCEED
        if isinstance(error, self.error_types):
            return Action.FAIL
        return Action.RETRY

    def __repr__(self) -> str:
        names = ", ".join(t.__qualname__ for t in self.error_types)
        return f"{self.__class__.__qualname__}({names})"


DEFAULT_RETRY_CLASSIFIER = DefaultClassifier()
