r"""Structured logging of the diagnostic records.

Every request attempt emits one diagnostic record through
``log_structured``. The record fields (``method``, ``url``,
``status_code``, ``proc_time``, ``error``, ``set_cookies``, ...) are
attached to the ``logging.LogRecord`` as attributes, so any handler can
read them. ``StructuredFormatter`` renders a record as one JSON line:

```python
import logging
from reqpipe.utils.structured_logging import StructuredFormatter

handler = logging.StreamHandler()
handler.setFormatter(StructuredFormatter())

logger = logging.getLogger("reqpipe")
logger.addHandler(handler)
logger.setLevel(logging.DEBUG)
```
"""

from __future__ import annotations

__all__ = ["DIAGNOSTIC_FIELDS", "StructuredFormatter", "log_structured"]

import datetime
import json
import logging
from typing import Any

# Fields of the diagnostic records, in rendering order
DIAGNOSTIC_FIELDS = (
    "method",
    "url",
    "status_code",
    "proc_time",
    "error",
    "error_type",
    "set_cookies",
    "out_file",
    "file_size",
    "body",
    "result",
)


class StructuredFormatter(logging.Formatter):
    """Render the diagnostic records as JSON lines.

    The JSON object starts with ``time`` (ISO 8601, UTC, milliseconds),
    ``level``, ``logger`` and ``message``, followed by the diagnostic
    fields present on the record in the order of ``DIAGNOSTIC_FIELDS``.
    The fields given with ``extra`` that are not diagnostic fields are
    ignored. Values that are not JSON serializable are rendered with
    ``str()``.

    Example:
        ```pycon
        >>> import logging
        >>> from io import StringIO
        >>> from reqpipe.utils.structured_logging import StructuredFormatter, log_structured
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter())
        >>> logger = logging.getLogger("formatter_example")
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.DEBUG)
        >>> log_structured(logger, logging.DEBUG, "request success", method="GET")
        >>> '"message": "request success", "method": "GET"' in stream.getvalue()
        True

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.datetime.fromtimestamp(record.created, tz=datetime.timezone.utc)
        data: dict[str, Any] = {
            "time": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data.update(
            (name, getattr(record, name)) for name in DIAGNOSTIC_FIELDS if hasattr(record, name)
        )
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def log_structured(logger: logging.Logger, level: int, message: str, **fields: Any) -> None:
    """Log a diagnostic record.

    Args:
        logger: The logger receiving the record.
        level: The log level, ``logging.ERROR`` for a failed attempt and
            ``logging.DEBUG`` for a successful one.
        message: The record message, naming the pipeline step.
        **fields: The diagnostic fields, set as attributes of the
            record.
    """
    if logger.isEnabledFor(level):
        logger.log(level, message, extra=fields)
