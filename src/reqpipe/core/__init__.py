r"""Core logic shared by the sync and async clients: configuration,
validation and the request pipeline."""

from __future__ import annotations

__all__ = [
    "DEFAULT_TIMEOUT",
    "ClientConfig",
    "DownloadResult",
    "download_file",
    "download_file_async",
    "execute_request",
    "execute_request_async",
    "validate_timeout",
]

from reqpipe.core.config import DEFAULT_TIMEOUT, ClientConfig
from reqpipe.core.pipeline import (
    DownloadResult,
    download_file,
    download_file_async,
    execute_request,
    execute_request_async,
)
from reqpipe.core.validation import validate_timeout
