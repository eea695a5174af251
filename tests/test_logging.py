"""Tests for structured logging helpers."""

import json
import logging

from seekcheck.observability.logging import _JsonFormatter, configure_logging, get_logger, log_event


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("seekcheck.test", logging.ERROR, __file__, 1, "sequence_failed", None, None)
    record.sequence = "test-video-start"
    payload = json.loads(_JsonFormatter().format(record))
    assert payload["level"] == "ERROR"
    assert payload["message"] == "sequence_failed"
    assert payload["sequence"] == "test-video-start"


def test_log_event_attaches_event_name():
    logger = get_logger("seekcheck.test")
    handler = _ListHandler()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        log_event(logger, "configuration_finished", configuration="test-video", ok=True)
    finally:
        logger.removeHandler(handler)
    record = handler.records[0]
    assert record.event == "configuration_finished"
    assert record.configuration == "test-video"


def test_configure_logging_is_idempotent():
    first = configure_logging("INFO")
    second = configure_logging("DEBUG")
    assert first is second
    json_handlers = [h for h in second.handlers if isinstance(h.formatter, _JsonFormatter)]
    assert len(json_handlers) == 1
    assert second.level == logging.DEBUG
    configure_logging("WARNING")
