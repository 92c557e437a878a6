r"""Retry package: classifiers, backoff schedules and the retry loop.

Public API:
    - Action: What the retry loop does after an attempt
    - RetryClassifier: Base class of the outcome classifiers
    - DefaultClassifier: Retry on any error
    - WhitelistClassifier / BlacklistClassifier: Retry by error type
    - Retrier: The retry loop
    - constant_backoff / exponential_backoff /
      limited_exponential_backoff: Backoff schedule builders
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_RETRY_CLASSIFIER",
    "Action",
    "BlacklistClassifier",
    "DefaultClassifier",
    "Retrier",
    "RetryClassifier",
    "WhitelistClassifier",
    "constant_backoff",
    "exponential_backoff",
    "limited_exponential_backoff",
]

from reqpipe.retry.backoff import (
    constant_backoff,
    exponential_backoff,
    limited_exponential_backoff,
)
from reqpipe.retry.classifier import (
    DEFAULT_RETRY_CLASSIFIER,
    Action,
    BlacklistClassifier,
    DefaultClassifier,
    RetryClassifier,
    WhitelistClassifier,
)
from reqpipe.retry.retrier import Retrier
