"""Tests for the logging setup."""

import io
import json
import logging

import pytest
import structlog

from apaddicto.config import Settings
from apaddicto.middleware.logging import QUIET_LOGGERS, build_handler, setup_logging


@pytest.fixture
def captured():
    """A JSON handler writing to a buffer, attached to a non-propagating logger."""
    stream = io.StringIO()
    handler = build_handler(Settings(log_format="json"))
    handler.setStream(stream)
    logger = logging.getLogger("apaddicto.tests.logging")
    logger.addHandler(handler)
    logger.propagate = False
    logger.setLevel(logging.INFO)
    yield logger, stream
    logger.removeHandler(handler)
    logger.propagate = True
    structlog.contextvars.clear_contextvars()


def lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class TestSetupLogging:
    def test_stdlib_records_are_rendered_by_structlog(self, captured):
        logger, stream = captured
        structlog.contextvars.bind_contextvars(request_id="req-1")

        logger.info("Streak for %s is now %d", "u1", 3)

        [record] = lines(stream)
        assert record["event"] == "Streak for u1 is now 3"
        assert record["level"] == "info"
        assert record["request_id"] == "req-1"
        assert record["logger"] == "apaddicto.tests.logging"
        assert "_record" not in record

    def test_structlog_events_share_the_handler(self, captured):
        _, stream = captured
        setup_logging(Settings())

        structlog.stdlib.get_logger("apaddicto.tests.logging").info("strategies_saved", count=2)

        [record] = lines(stream)
        assert record["event"] == "strategies_saved"
        assert record["count"] == 2
        assert "timestamp" in record

    def test_french_text_is_not_escaped(self, captured):
        logger, stream = captured
        logger.warning("Compte désactivé")
        assert "Compte désactivé" in stream.getvalue()

    def test_noisy_libraries_are_quieted(self):
        setup_logging(Settings())
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_repeated_setup_keeps_one_handler(self):
        setup_logging(Settings())
        setup_logging(Settings())
        ours = [
            h for h in logging.getLogger().handlers if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
        ]
        assert len(ours) == 1
