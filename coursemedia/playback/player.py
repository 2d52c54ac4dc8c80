"""Player controller wiring a media element to the tracker and seek guard."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Optional

from coursemedia.core.config import PlaybackSettings
from coursemedia.models.playback import ViewSession
from coursemedia.playback.guard import (
    DEFAULT_REWIND_SECONDS,
    SeekDecision,
    SkipGuard,
    rewind_target,
)
from coursemedia.playback.media import MediaHandle, Unsubscribe
from coursemedia.playback.tracker import PlaybackProgressTracker, Reporter

logger = logging.getLogger(__name__)

# Natural drift between time updates; jumps larger than this past the
# watched range are treated as skips
DEFAULT_SKIP_TOLERANCE = 1.0


class PlayerController:
    """Handles player events for one video.

    Seeks requested through `request_seek` are checked against the guard
    before they reach the media element. Jumps that bypass it (a native
    scrub bar, keyboard shortcuts) are caught on the next time update and
    snapped back to the furthest watched position.
    """

    def __init__(
        self,
        media: MediaHandle,
        tracker: PlaybackProgressTracker,
        guard: Optional[SkipGuard] = None,
        *,
        skip_tolerance: float = DEFAULT_SKIP_TOLERANCE,
        rewind_seconds: float = DEFAULT_REWIND_SECONDS,
    ) -> None:
        self.media = media
        self.tracker = tracker
        self.guard = guard or SkipGuard()
        self.skip_tolerance = skip_tolerance
        self.rewind_seconds = rewind_seconds
        self._unsubscribe: Optional[Unsubscribe] = None

    @classmethod
    def create(
        cls,
        media: MediaHandle,
        video_id: int | str,
        reporter: Optional[Reporter] = None,
        settings: Optional[PlaybackSettings] = None,
        *,
        resume_position: float = 0.0,
        total_watched: float = 0.0,
        is_completed: bool = False,
        viewer: Optional[ViewSession] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> "PlayerController":
        """Build a controller, tracker and guard from playback settings."""
        settings = settings or PlaybackSettings()
        tracker = PlaybackProgressTracker(
            video_id,
            reporter,
            resume_position=resume_position,
            total_watched=total_watched,
            is_completed=is_completed,
            completion_threshold=settings.completion_threshold,
            report_interval=settings.report_interval,
            debounce_wait=settings.debounce_wait,
            clock=clock,
            viewer=viewer,
        )
        guard = SkipGuard(skip_prevention_disabled=not settings.skip_prevention)
        return cls(media, tracker, guard)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def attach(self) -> None:
        """Start listening to time updates."""
        if self._unsubscribe is None:
            self._unsubscribe = self.media.on_tick(self.on_time_update)

    def close(self) -> None:
        """Stop listening and write the final state."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.tracker.close()

    # =========================================================================
    # Media Events
    # =========================================================================

    def on_loaded_metadata(self) -> None:
        """Duration is known; jump to the resume position unless in review mode."""
        duration = self.media.get_duration()
        self.tracker.set_duration(duration)
        position = self.tracker.state.current_position
        if not self.tracker.review_mode and 0 < position < duration:
            self.media.set_current_time(position)
            logger.debug("Resuming video %s at %.1fs", self.tracker.video_id, position)

    def on_time_update(self, position: Optional[float] = None) -> None:
        if position is None:
            position = self.media.get_current_time()
        state = self.tracker.state
        if (
            self.guard.is_gated(state)
            and position > state.max_watched_position + self.skip_tolerance
        ):
            logger.info(
                "Skip to %.1fs blocked; returning to %.1fs",
                position,
                state.max_watched_position,
            )
            position = state.max_watched_position
            self.media.set_current_time(position)
        self.tracker.tick(position, playing=not self.media.is_paused())

    def on_play(self) -> None:
        self.tracker.play()

    def on_pause(self) -> None:
        self.tracker.pause(self.media.get_current_time())

    def on_ended(self) -> None:
        position = self.media.get_current_time()
        state = self.tracker.state
        if (
            self.guard.is_gated(state)
            and position > state.max_watched_position + self.skip_tolerance
        ):
            # Reached the end by skipping; treat as a pause at the watched edge
            self.media.set_current_time(state.max_watched_position)
            self.tracker.pause(state.max_watched_position)
            return
        self.tracker.end(position)

    def on_visibility_change(self, hidden: bool) -> None:
        if hidden:
            self.tracker.page_hidden()

    # =========================================================================
    # User Controls
    # =========================================================================

    def request_seek(self, target: float) -> SeekDecision:
        """Apply a seek if the guard allows it.

        A denied seek leaves the media element where it is.
        """
        decision = self.guard.check(target, self.tracker.state)
        if decision.allowed:
            self.media.set_current_time(decision.target)
            self.tracker.seek(decision.target)
        else:
            logger.debug("Seek to %.1fs denied", target)
        return decision

    def rewind(self) -> float:
        """Jump back ``rewind_seconds``; always allowed."""
        target = rewind_target(self.media.get_current_time(), self.rewind_seconds)
        self.media.set_current_time(target)
        self.tracker.seek(target)
        return target
