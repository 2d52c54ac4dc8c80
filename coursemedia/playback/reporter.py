"""Fire-and-forget progress reporter."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future
from typing import Any, Optional, Protocol

from coursemedia.core.exceptions import PlaybackPersistFailure
from coursemedia.models.playback import ProgressReport

logger = logging.getLogger(__name__)


class ProgressSink(Protocol):
    """Anything that persists a progress report (e.g. `ProgressService`)."""

    def update(self, video_id: int | str, report: ProgressReport) -> Any: ...


class ProgressReporter:
    """Adapts tracker reports to a progress service without ever raising.

    With an executor, each report is sent in the background and the caller
    returns immediately. Failures are logged as `PlaybackPersistFailure`;
    the next report carries the full state and supersedes the lost one.

    Sends are serialized. The ``log_id`` returned by the first successful
    write is attached to every later report that lacks one, so all writes
    of a viewing land on the same view-log row.
    """

    def __init__(
        self,
        service: ProgressSink,
        executor: Optional[Executor] = None,
        *,
        log_id: Optional[int | str] = None,
    ) -> None:
        self.service = service
        self.executor = executor
        self.log_id = log_id
        self._lock = threading.Lock()
        self._send_lock = threading.Lock()
        self.sent = 0
        self.failures = 0
        self.last_failure: Optional[PlaybackPersistFailure] = None

    def __call__(self, report: ProgressReport) -> Optional[Future[bool]]:
        if self.executor is not None:
            return self.executor.submit(self._send, report)
        self._send(report)
        return None

    def _send(self, report: ProgressReport) -> bool:
        with self._send_lock:
            if report.log_id is None and self.log_id is not None:
                report = report.model_copy(update={"log_id": self.log_id})
            try:
                result = self.service.update(report.video_id, report)
            except Exception as e:
                failure = PlaybackPersistFailure(report.video_id, str(e) or type(e).__name__)
                with self._lock:
                    self.failures += 1
                    self.last_failure = failure
                logger.warning("%s (reason=%s)", failure.message, report.reason)
                return False
            if isinstance(result, dict) and result.get("log_id") is not None:
                if self.log_id is None:
                    logger.debug("Video %s writes to view log %s", report.video_id, result["log_id"])
                self.log_id = result["log_id"]
        with self._lock:
            self.sent += 1
        return True
