"""Logging setup, timed operation scopes and the media audit trail."""

from __future__ import annotations

import json
import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Generator, Optional

# =============================================================================
# Constants
# =============================================================================

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
AUDIT_LOGGER_NAME = "coursemedia.audit"

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


# =============================================================================
# Logger Setup
# =============================================================================


def setup_logging(
    level: int = logging.WARNING,
    *,
    quiet: bool = False,
    verbose: bool = False,
) -> None:
    """Configure stderr logging for the CLI.

    ``--quiet`` keeps errors only; ``--verbose`` shows per-chunk debug lines.
    Request logging from the HTTP stack stays at WARNING either way.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT, stream=sys.stderr)
    logging.getLogger("coursemedia").setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# =============================================================================
# Timed Operations
# =============================================================================


class OperationLog:
    """Start/finish log lines for one long-running operation.

    Fields passed at creation are repeated on both lines; fields added with
    `note` appear on the finish line only.
    """

    def __init__(
        self,
        operation: str,
        logger: Optional[logging.Logger] = None,
        **fields: Any,
    ) -> None:
        self.operation = operation
        self.logger = logger or get_logger(__name__)
        self.fields = fields
        self.outcome: dict[str, Any] = {}
        self.started_at: Optional[float] = None

    @property
    def elapsed(self) -> float:
        if self.started_at is None:
            return 0.0
        return time.monotonic() - self.started_at

    def note(self, **fields: Any) -> None:
        self.outcome.update(fields)

    def _describe(self, fields: dict[str, Any]) -> str:
        return ", ".join(f"{k}={v}" for k, v in fields.items())

    def __enter__(self) -> OperationLog:
        self.started_at = time.monotonic()
        self.logger.info("Starting %s (%s)", self.operation, self._describe(self.fields))
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        fields = {**self.fields, **self.outcome}
        if exc_type is None:
            self.logger.info(
                "%s finished in %.2fs (%s)", self.operation, self.elapsed, self._describe(fields)
            )
        else:
            self.logger.error(
                "%s stopped after %.2fs: %s (%s)",
                self.operation,
                self.elapsed,
                exc_val,
                self._describe(fields),
            )


@contextmanager
def log_context(
    operation: str,
    logger: Optional[logging.Logger] = None,
    **fields: Any,
) -> Generator[OperationLog, None, None]:
    """Log the start, duration and outcome of ``operation``.

    Example:
        with log_context("upload", logger, session=sid) as op:
            ...
            op.note(video_id=record.id)
    """
    with OperationLog(operation, logger, **fields) as op:
        yield op


# =============================================================================
# Audit Trail
# =============================================================================


class AuditLogger:
    """One JSON line per upload outcome on the ``coursemedia.audit`` logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def record(self, event: str, *, success: bool = True, **fields: Any) -> dict[str, Any]:
        """Write an audit entry.

        Args:
            event: Dotted event name, e.g. ``upload.completed``.
            success: Failed events are logged at WARNING.
            **fields: Entry fields; ``None`` values are dropped.

        Returns:
            The entry as written.
        """
        entry: dict[str, Any] = {
            "event": event,
            "at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "success": success,
        }
        entry.update({k: v for k, v in fields.items() if v is not None})
        level = logging.INFO if success else logging.WARNING
        self.logger.log(level, "AUDIT %s", json.dumps(entry, sort_keys=True, default=str))
        return entry


def get_audit_logger() -> AuditLogger:
    return AuditLogger()
