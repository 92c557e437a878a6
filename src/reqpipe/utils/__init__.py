r"""Utility functions for the HTTP clients."""

from __future__ import annotations

__all__ = ["DIAGNOSTIC_FIELDS", "StructuredFormatter", "log_structured"]

from reqpipe.utils.structured_logging import DIAGNOSTIC_FIELDS, StructuredFormatter, log_structured
