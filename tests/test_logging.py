# tests/test_logging.py
import logging

from crypto_dashboard.logging_setup import ExtraFieldsFilter, RequestIdFilter, request_id_var


def _record(**extra):
    record = logging.makeLogRecord({"name": "crypto_dashboard.feeds", "msg": "FEED_FALLBACK"})
    record.__dict__.update(extra)
    return record

def test_extra_fields_rendered_as_pairs():
    record = _record(feed="prices", error="timeout")
    ExtraFieldsFilter().filter(record)
    assert record.fields == " feed=prices error=timeout"

def test_plain_record_has_empty_fields():
    record = _record()
    ExtraFieldsFilter().filter(record)
    assert record.fields == ""

def test_request_id_is_not_repeated_as_a_field():
    token = request_id_var.set("abc123")
    try:
        record = _record(feed="news")
        RequestIdFilter().filter(record)
        ExtraFieldsFilter().filter(record)
    finally:
        request_id_var.reset(token)
    assert record.request_id == "abc123"
    assert record.fields == " feed=news"
