"""Tests for logging helpers and the audit trail."""

from __future__ import annotations

import json
import logging

import pytest

from coursemedia.core.logging import AuditLogger, OperationLog, log_context, setup_logging


class TestSetupLogging:
    """Tests for setup_logging levels."""

    def test_quiet_wins(self) -> None:
        setup_logging(quiet=True, verbose=True)
        assert logging.getLogger("coursemedia").level == logging.ERROR

    def test_verbose(self) -> None:
        setup_logging(verbose=True)
        assert logging.getLogger("coursemedia").level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING


class TestOperationLog:
    """Tests for timed operation log lines."""

    def test_success_lines(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("coursemedia.test.op")
        with caplog.at_level(logging.INFO, logger="coursemedia.test.op"):
            with log_context("upload", logger, session="s1") as op:
                op.note(video_id=7)

        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == "Starting upload (session=s1)"
        assert messages[1].startswith("upload finished in ")
        assert messages[1].endswith("(session=s1, video_id=7)")

    def test_failure_logged_and_propagated(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("coursemedia.test.op")
        with caplog.at_level(logging.INFO, logger="coursemedia.test.op"):
            with pytest.raises(RuntimeError):
                with OperationLog("upload", logger, session="s1"):
                    raise RuntimeError("disk gone")

        last = caplog.records[-1]
        assert last.levelno == logging.ERROR
        assert "disk gone" in last.getMessage()

    def test_elapsed_before_start(self) -> None:
        assert OperationLog("noop").elapsed == 0.0


class TestAuditLogger:
    """Tests for audit entries."""

    def test_record_success(self, caplog: pytest.LogCaptureFixture) -> None:
        audit = AuditLogger(logging.getLogger("coursemedia.test.audit"))
        with caplog.at_level(logging.INFO, logger="coursemedia.test.audit"):
            entry = audit.record("upload.completed", course_id=3, video_id=None)

        assert entry["event"] == "upload.completed"
        assert entry["success"] is True
        assert "video_id" not in entry
        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert json.loads(record.getMessage().removeprefix("AUDIT ")) == entry

    def test_record_failure_is_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        audit = AuditLogger(logging.getLogger("coursemedia.test.audit"))
        with caplog.at_level(logging.INFO, logger="coursemedia.test.audit"):
            audit.record("upload.failed", success=False, error="boom")

        assert caplog.records[-1].levelno == logging.WARNING
