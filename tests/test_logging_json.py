# tests/test_logging_json.py
from __future__ import annotations

import json
import logging

from unicensus.logging_config import JsonFormatter
from unicensus.middleware.request_id import request_id_ctx


def _record(**extra) -> logging.LogRecord:
    rec = logging.makeLogRecord({"name": "unicensus.test", "levelname": "INFO", "msg": "ticket_status status=%s", "args": ("Closed",)})
    for k, v in extra.items():
        setattr(rec, k, v)
    return rec


def test_extras_and_request_id_are_emitted():
    token = request_id_ctx.set("req-42")
    try:
        line = JsonFormatter().format(_record(ticket_id="t1", pending=2))
    finally:
        request_id_ctx.reset(token)

    payload = json.loads(line)
    assert payload["message"] == "ticket_status status=Closed"
    assert payload["request_id"] == "req-42"
    assert payload["ticket_id"] == "t1"
    assert payload["pending"] == 2
    assert "args" not in payload and "msg" not in payload


def test_no_request_id_outside_requests():
    payload = json.loads(JsonFormatter().format(_record()))
    assert "request_id" not in payload
