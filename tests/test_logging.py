"""Tests for structured logging."""

import json
import logging

from aiscript.core.logging import configure_logging, get_logger


class TestStructuredLogger:
    """Test context handling and handler setup."""

    def test_bound_context_on_record(self, caplog):
        """Test bound and per-call fields end up on the log record."""
        logger = get_logger("aiscript.test").bind(component="UserCard")
        with caplog.at_level(logging.INFO, logger="aiscript"):
            logger.info("Created UserCard.tsx", path="out/UserCard.tsx")

        record = caplog.records[-1]
        assert record.component == "UserCard"
        assert record.path == "out/UserCard.tsx"

    def test_bind_does_not_change_parent(self):
        parent = get_logger("aiscript.test")
        parent.bind(component="A")
        assert parent.context == {}

    def test_phase_failure_logged_as_error(self, caplog):
        with caplog.at_level(logging.INFO, logger="aiscript"):
            get_logger("aiscript.test").log_phase("generate", "failed", duration_ms=1.5)

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.phase == "generate"
        assert record.duration_ms == 1.5

    def test_json_log_file(self, tmp_path):
        """Test JSON output written to a log file."""
        log_file = tmp_path / "logs" / "run.log"
        configure_logging(level="info", json_output=True, log_file=str(log_file))

        get_logger("aiscript.test").bind(component="Chart").info("Created Chart.jsx")
        for handler in logging.getLogger("aiscript").handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["message"] == "Created Chart.jsx"
        assert entry["component"] == "Chart"
        assert entry["levelname"] == "INFO"
