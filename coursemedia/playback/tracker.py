"""Playback progress tracking.

`PlaybackProgressTracker` turns a media element's time updates into a
viewer's progress state and decides when that state is written out.

Write policy:
    - During continuous play, one periodic report per ``report_interval``,
      emitted through a `Debouncer`.
    - A forced write, bypassing the debounce wait, on pause, seek, end of
      media, page hide, close, and on the transition to ``completed``.
    - No writes at all in review mode (the video was completed before, or
      the completion write of this session has been sent).

Every report carries the full current state, so a later report supersedes
an earlier one that was lost.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional

from coursemedia.models.playback import (
    PlaybackProgressState,
    PlaybackStatus,
    ProgressReport,
    ViewSession,
)
from coursemedia.playback.debounce import Debouncer

logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_THRESHOLD = 90
DEFAULT_REPORT_INTERVAL = 15.0
DEFAULT_DEBOUNCE_WAIT = 1.0

Reporter = Callable[[ProgressReport], Any]


def progress_percent(position: float, duration: float) -> int:
    """Watched percentage, rounded half up and clamped to ``[0, 100]``.

    Returns 0 while the duration is unknown.
    """
    if duration <= 0:
        return 0
    percent = math.floor(position * 100 / duration + 0.5)
    return max(0, min(100, percent))


class PlaybackProgressTracker:
    """Tracks one viewer's progress on one video.

    The tracker is single-threaded and tick-driven: the owner feeds it time
    updates and player events in order. Time is read from ``clock`` so tests
    can drive it deterministically.

    Args:
        video_id: Video being watched.
        reporter: Called with a `ProgressReport` for every write. Errors
            raised by the reporter are logged and ignored.
        duration: Media duration in seconds, if already known.
        resume_position: Last persisted position; playback resumes here.
        total_watched: Previously accumulated watch time in seconds.
        is_completed: The viewer completed this video in an earlier session.
        completion_threshold: Percent at which the video counts as completed.
        report_interval: Seconds between periodic reports during play.
        debounce_wait: Quiet period before a periodic report is emitted.
        clock: Monotonic time source in seconds.
        on_complete: Called once with the state when the video becomes
            completed in this session.
        viewer: Who is watching; copied into every report.
        wall_clock: Source of the ``start_time`` stamped at first play.
    """

    def __init__(
        self,
        video_id: int | str,
        reporter: Optional[Reporter] = None,
        *,
        duration: float = 0.0,
        resume_position: float = 0.0,
        total_watched: float = 0.0,
        is_completed: bool = False,
        completion_threshold: int = DEFAULT_COMPLETION_THRESHOLD,
        report_interval: float = DEFAULT_REPORT_INTERVAL,
        debounce_wait: float = DEFAULT_DEBOUNCE_WAIT,
        clock: Callable[[], float] = time.monotonic,
        on_complete: Optional[Callable[[PlaybackProgressState], Any]] = None,
        viewer: Optional[ViewSession] = None,
        wall_clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.video_id = video_id
        self.viewer = viewer
        self.wall_clock = wall_clock
        self.started_at: Optional[datetime] = None
        self.reporter = reporter
        self.completion_threshold = completion_threshold
        self.report_interval = report_interval
        self.clock = clock
        self.on_complete = on_complete
        self._debouncer = Debouncer(self._send, debounce_wait, clock=clock)

        self._state = PlaybackProgressState(
            duration=max(0.0, duration),
            total_watched_seconds=max(0.0, total_watched),
        )
        if is_completed:
            self._state.has_completed_once = True
            self._state.status = PlaybackStatus.COMPLETED
        if resume_position > 0:
            self._state.current_position = resume_position
            self._state.max_watched_position = resume_position
            if not is_completed:
                self._state.status = PlaybackStatus.IN_PROGRESS
        self._state.progress_percent = progress_percent(
            self._state.current_position, self._state.duration
        )

        self._playing = False
        self._last_tick_at: Optional[float] = None
        self._last_report_at: Optional[float] = None
        self._closed = False

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> PlaybackProgressState:
        """A copy of the current state."""
        return replace(self._state)

    @property
    def review_mode(self) -> bool:
        """True once the video has been completed; writes and seek limits stop."""
        return self._state.has_completed_once

    @property
    def is_playing(self) -> bool:
        return self._playing

    def set_duration(self, seconds: float) -> None:
        """Record the media duration once the player knows it."""
        self._state.duration = max(0.0, seconds)
        self._state.progress_percent = progress_percent(
            self._state.current_position, self._state.duration
        )

    # =========================================================================
    # Events
    # =========================================================================

    def tick(self, position: float, *, playing: bool = True) -> None:
        """Process one time update from the media element."""
        if self._closed:
            return
        self._debouncer.poll()
        now = self.clock()
        if playing:
            self._accumulate(now)
            self._last_tick_at = now
            if not self._playing:
                self._start_interval(now)
            self._playing = True
        else:
            self._playing = False
            self._last_tick_at = None

        completed_now = self._observe(position)
        if completed_now:
            return

        if self._playing and not self.review_mode:
            assert self._last_report_at is not None
            if now - self._last_report_at >= self.report_interval:
                self._last_report_at = now
                self._debouncer.call(self._build_report("periodic"))

    def play(self) -> None:
        """Playback started or resumed."""
        if self._closed:
            return
        if self._playing:
            return
        now = self.clock()
        self._playing = True
        self._last_tick_at = now
        self._start_interval(now)

    def pause(self, position: Optional[float] = None) -> None:
        """Playback paused. Forces a write."""
        if self._closed:
            return
        self._accumulate(self.clock())
        self._playing = False
        self._last_tick_at = None
        if position is not None and self._observe(position):
            return
        self._force("pause")

    def seek(self, position: float) -> None:
        """An allowed seek was applied to the media element. Forces a write."""
        if self._closed:
            return
        if self._playing:
            now = self.clock()
            self._accumulate(now)
            self._last_tick_at = now
        if self._observe(position):
            return
        self._force("seek")

    def end(self, position: Optional[float] = None) -> None:
        """Playback reached the end of the media. Forces a write."""
        if self._closed:
            return
        self._accumulate(self.clock())
        self._playing = False
        self._last_tick_at = None
        if position is None:
            position = self._state.duration or self._state.current_position
        if self._observe(position):
            return
        self._force("end")

    def page_hidden(self) -> None:
        """The page lost visibility. Forces a write."""
        if self._closed:
            return
        if self._playing:
            now = self.clock()
            self._accumulate(now)
            self._last_tick_at = now
        self._force("hidden")

    def close(self) -> None:
        """The player is going away. Forces a final write and stops tracking."""
        if self._closed:
            return
        if self._playing:
            self._accumulate(self.clock())
        self._playing = False
        self._last_tick_at = None
        self._force("unmount")
        self._closed = True

    def flush(self, reason: str = "manual") -> None:
        """Write the current state now."""
        if self._closed:
            return
        self._force(reason)

    # =========================================================================
    # Internals
    # =========================================================================

    def _start_interval(self, now: float) -> None:
        self._last_report_at = now
        if self.started_at is None:
            self.started_at = self.wall_clock()

    def _accumulate(self, now: float) -> None:
        """Add wall-clock time since the previous tick while playing."""
        if self._playing and self._last_tick_at is not None and now > self._last_tick_at:
            self._state.total_watched_seconds += now - self._last_tick_at

    def _observe(self, position: float) -> bool:
        """Apply a position. Returns True if this completed the video."""
        state = self._state
        state.current_position = max(0.0, position)
        if not state.has_completed_once:
            state.max_watched_position = max(state.max_watched_position, state.current_position)
        state.progress_percent = progress_percent(state.current_position, state.duration)

        if state.status == PlaybackStatus.NOT_STARTED and state.progress_percent > 0:
            state.status = PlaybackStatus.IN_PROGRESS
            logger.debug("Video %s started", self.video_id)

        if not state.has_completed_once and state.progress_percent >= self.completion_threshold:
            state.status = PlaybackStatus.COMPLETED
            logger.info(
                "Video %s completed at %d%%", self.video_id, state.progress_percent
            )
            # The completion write is the last one; review mode starts after it
            self._force("complete")
            state.has_completed_once = True
            if self.on_complete is not None:
                self.on_complete(self.state)
            return True
        return False

    def _build_report(self, reason: str) -> ProgressReport:
        state = self._state
        viewer = self.viewer
        return ProgressReport(
            video_id=self.video_id,
            user_id=viewer.user_id if viewer else None,
            course_id=viewer.course_id if viewer else None,
            session_id=viewer.session_id if viewer else None,
            log_id=viewer.log_id if viewer else None,
            position=state.current_position,
            total_watched=state.total_watched_seconds,
            progress_percent=state.progress_percent,
            is_complete=state.status == PlaybackStatus.COMPLETED,
            status=state.status,
            video_duration=state.duration or None,
            reason=reason,
            start_time=self.started_at,
        )

    def _force(self, reason: str) -> None:
        """Replace any pending report with the current state and send it now."""
        if self.review_mode:
            self._debouncer.cancel()
            return
        self._debouncer.call(self._build_report(reason))
        self._debouncer.flush()
        self._last_report_at = self.clock()

    def _send(self, report: ProgressReport) -> None:
        if self.reporter is None:
            return
        try:
            self.reporter(report)
        except Exception as e:
            logger.warning("Progress report for video %s failed: %s", self.video_id, e)
