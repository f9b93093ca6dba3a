import json
import logging

from shared.core.logging_config import SecurityFilter, StructuredFormatter, set_request_context


def make_record(msg, **extra):
    record = logging.LogRecord("sello", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_codes_are_redacted_but_order_ids_kept():
    record = make_record("Verification code 482913 sent for SO-123456")
    SecurityFilter().filter(record)
    assert record.getMessage() == "Verification code ****** sent for SO-123456"


def test_sensitive_extra_fields_are_redacted():
    record = make_record("login", extra_fields={"token": "abc", "path": "/api/users/me"})
    SecurityFilter().filter(record)
    assert record.extra_fields == {"token": "***REDACTED***", "path": "/api/users/me"}


def test_formatter_emits_trace_context():
    set_request_context(request_id="req-1", order_id="SO-100000")
    payload = json.loads(StructuredFormatter().format(make_record("Order created")))
    assert payload["message"] == "Order created"
    assert payload["trace"]["request_id"] == "req-1"
    assert payload["trace"]["order_id"] == "SO-100000"
