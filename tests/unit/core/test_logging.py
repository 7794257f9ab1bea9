"""Unit tests for structured JSON logging."""

from __future__ import annotations

import json
import logging

from pacer.core.logging import JSONFormatter, get_logger, log_timing


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "pacer.test", logging.INFO, __file__, 1, "Report built", None, None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_json_with_extra_fields() -> None:
    line = JSONFormatter().format(_record(client_id="c-1", duration_ms=12.5))

    payload = json.loads(line)

    assert payload["message"] == "Report built"
    assert payload["level"] == "INFO"
    assert payload["client_id"] == "c-1"
    assert payload["duration_ms"] == 12.5
    assert "goal_id" not in payload


def test_unknown_extra_fields_are_not_emitted() -> None:
    payload = json.loads(JSONFormatter().format(_record(secret="x")))

    assert "secret" not in payload


def test_get_logger_is_namespaced_and_idempotent() -> None:
    first = get_logger("unit")
    second = get_logger("unit")

    assert first is second
    assert first.name == "pacer.unit"
    assert len(first.handlers) == 1


def test_none_extra_fields_are_dropped() -> None:
    payload = json.loads(JSONFormatter().format(_record(client_id=None)))

    assert "client_id" not in payload


def test_log_timing_records_endpoint_and_duration(caplog) -> None:
    logger = get_logger("timing")

    with caplog.at_level(logging.INFO, logger="pacer.timing"):
        with log_timing(logger, "report", client_id="c-1"):
            pass

    record = caplog.records[-1]
    assert record.endpoint == "report"
    assert record.client_id == "c-1"
    assert record.duration_ms >= 0
