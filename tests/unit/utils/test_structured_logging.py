from __future__ import annotations

import json
import logging
from io import StringIO
from typing import TYPE_CHECKING

import pytest

from reqpipe import ClientConfig, HttpClient
from reqpipe.utils.structured_logging import (
    DIAGNOSTIC_FIELDS,
    StructuredFormatter,
    log_structured,
)
from tests.helpers import TEST_URL, RecordingTransport, make_response

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def json_logger() -> Generator[tuple[logging.Logger, StringIO], None, None]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    logger = logging.getLogger("tests.structured")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield logger, stream
    finally:
        logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


def read_json_lines(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


#########################################
#     Tests for StructuredFormatter     #
#########################################


def test_structured_formatter_standard_fields(
    json_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = json_logger
    logger.info("hello")
    (data,) = read_json_lines(stream)
    assert data == {
        "time": data["time"],
        "level": "INFO",
        "logger": "tests.structured",
        "message": "hello",
    }
    assert data["time"].endswith("+00:00")


def test_structured_formatter_field_order(json_logger: tuple[logging.Logger, StringIO]) -> None:
    """Test that the diagnostic fields follow the standard fields in a
    fixed order, whatever the order of the logging call."""
    logger, stream = json_logger
    log_structured(logger, logging.DEBUG, "request success", proc_time=0.5, url=TEST_URL, method="GET")
    assert list(json.loads(stream.getvalue())) == [
        "time",
        "level",
        "logger",
        "message",
        "method",
        "url",
        "proc_time",
    ]


def test_structured_formatter_ignores_other_extra(
    json_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = json_logger
    logger.info("hello", extra={"unrelated": 1, "method": "GET"})
    (data,) = read_json_lines(stream)
    assert "unrelated" not in data
    assert data["method"] == "GET"


def test_structured_formatter_non_serializable_field(
    json_logger: tuple[logging.Logger, StringIO],
) -> None:
    """Test that the values that are not JSON serializable are rendered
    as strings."""
    logger, stream = json_logger
    logger.info("hello", extra={"error": ValueError("bad")})
    (data,) = read_json_lines(stream)
    assert data["error"] == "bad"


def test_structured_formatter_exception(json_logger: tuple[logging.Logger, StringIO]) -> None:
    logger, stream = json_logger
    try:
        msg = "boom"
        raise RuntimeError(msg)
    except RuntimeError:
        logger.exception("failed")
    (data,) = read_json_lines(stream)
    assert "RuntimeError: boom" in data["exception"]


def test_diagnostic_fields_unique() -> None:
    assert len(set(DIAGNOSTIC_FIELDS)) == len(DIAGNOSTIC_FIELDS)


####################################
#     Tests for log_structured     #
####################################


def test_log_structured_fields(json_logger: tuple[logging.Logger, StringIO]) -> None:
    logger, stream = json_logger
    log_structured(logger, logging.ERROR, "do http request", method="GET", proc_time=0.25)
    (data,) = read_json_lines(stream)
    assert data["level"] == "ERROR"
    assert data["message"] == "do http request"
    assert data["method"] == "GET"
    assert data["proc_time"] == 0.25


def test_log_structured_record_attributes(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tests.structured.attributes")
    with caplog.at_level(logging.DEBUG, logger=logger.name):
        log_structured(logger, logging.DEBUG, "request success", set_cookies="a=1")
    (record,) = caplog.records
    assert record.set_cookies == "a=1"


def test_log_structured_level_filtered(json_logger: tuple[logging.Logger, StringIO]) -> None:
    logger, stream = json_logger
    logger.setLevel(logging.INFO)
    log_structured(logger, logging.DEBUG, "request success", method="GET")
    assert stream.getvalue() == ""


def test_client_records_as_json(json_logger: tuple[logging.Logger, StringIO]) -> None:
    """Test the JSON rendering of the record of a client request."""
    logger, stream = json_logger
    transport = RecordingTransport(
        lambda request: make_response(200, "pong", {"Set-Cookie": "sid=1; Path=/"})
    )
    with HttpClient(ClientConfig(transport=transport), logger=logger) as client:
        client.post(TEST_URL, "ping")
    (data,) = read_json_lines(stream)
    assert data["message"] == "request success"
    assert data["method"] == "POST"
    assert data["url"] == TEST_URL
    assert data["body"] == "ping"
    assert data["result"] == "pong"
    assert data["set_cookies"] == "sid=1"
    assert isinstance(data["proc_time"], float)
