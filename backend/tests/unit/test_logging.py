"""Unit tests for structured logging and request id correlation"""

import json
import logging
import uuid

from docshelf.observability.logging_config import JSONFormatter, RequestIDFilter
from docshelf.observability.request_id import generate_request_id, get_request_id, set_request_id


def make_record(message="hello", **extra):
    record = logging.LogRecord(
        name="docshelf.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
        func="test_func",
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test JSON log formatting"""

    def test_basic_fields(self):
        set_request_id("req-123")
        record = make_record()
        RequestIDFilter().filter(record)

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["message"] == "hello"
        assert data["request_id"] == "req-123"
        assert data["function"] == "test_func"
        assert data["timestamp"].endswith("Z")

    def test_extra_fields_serialized(self):
        document_id = uuid.uuid4()
        record = make_record(document_id=document_id, duration_ms=12.5)

        data = json.loads(JSONFormatter().format(record))

        assert data["document_id"] == str(document_id)
        assert data["duration_ms"] == 12.5
        assert "user_id" not in data

    def test_exception_info(self):
        try:
            raise ValueError("broken")
        except ValueError:
            import sys
            record = make_record()
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert data["error"] == "broken"
        assert "ValueError" in data["traceback"]


class TestRequestId:
    def test_generate_is_uuid(self):
        assert uuid.UUID(generate_request_id())

    def test_set_and_get(self):
        set_request_id("abc")
        assert get_request_id() == "abc"
