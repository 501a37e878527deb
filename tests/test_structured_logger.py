import json
import logging

from ops.structured_logger import JsonFormatter
from utils.request_context import bind_request_id, reset_request_id


def _record(**extra):
    rec = logging.LogRecord("primoboost.test", logging.WARNING, __file__, 1, "settings_cache_invalid", None, None)
    for k, v in extra.items():
        setattr(rec, k, v)
    return rec


def test_payload_carries_request_id_and_extra():
    token = bind_request_id("rid-123")
    try:
        line = JsonFormatter().format(_record(extra={"errors": 2}))
    finally:
        reset_request_id(token)
    payload = json.loads(line)
    assert payload["severity"] == "WARNING"
    assert payload["message"] == "settings_cache_invalid"
    assert payload["request_id"] == "rid-123"
    assert payload["errors"] == 2


def test_non_json_values_are_stringified():
    payload = json.loads(JsonFormatter().format(_record(extra={"path": object()})))
    assert payload["path"].startswith("<object")


def test_payload_cannot_overwrite_event_name():
    payload = json.loads(JsonFormatter().format(_record(extra={"message": "gateway unreachable", "severity": "x"})))
    assert payload["message"] == "settings_cache_invalid"
    assert payload["severity"] == "WARNING"
    assert payload["extra_message"] == "gateway unreachable"
