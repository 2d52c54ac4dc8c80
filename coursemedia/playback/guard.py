"""Seek policy for skip prevention."""

from __future__ import annotations

from dataclasses import dataclass

from coursemedia.models.playback import PlaybackProgressState

DEFAULT_REWIND_SECONDS = 5.0

SEEK_DENIED_MESSAGE = (
    "Skipping ahead is disabled until you have watched this video to the end. "
    "You can rewind to any point you have already watched."
)


@dataclass(frozen=True)
class SeekDecision:
    """Outcome of a seek request.

    ``target`` is where the player should be after the request: the
    requested time when allowed, the furthest watched position otherwise.
    """

    allowed: bool
    target: float
    message: str = ""


class SkipGuard:
    """Decides whether a viewer may seek to a given time."""

    def __init__(self, skip_prevention_disabled: bool = False) -> None:
        self.skip_prevention_disabled = skip_prevention_disabled

    def can_seek(self, target: float, state: PlaybackProgressState) -> bool:
        """Allowed in review mode, when disabled, or within the watched range."""
        return (
            state.has_completed_once
            or self.skip_prevention_disabled
            or target <= state.max_watched_position
        )

    def check(self, target: float, state: PlaybackProgressState) -> SeekDecision:
        if self.can_seek(target, state):
            return SeekDecision(allowed=True, target=max(0.0, target))
        return SeekDecision(
            allowed=False,
            target=state.max_watched_position,
            message=SEEK_DENIED_MESSAGE,
        )

    def is_gated(self, state: PlaybackProgressState) -> bool:
        """True while seeks past the watched range are refused."""
        return not (state.has_completed_once or self.skip_prevention_disabled)


def rewind_target(current: float, seconds: float = DEFAULT_REWIND_SECONDS) -> float:
    """Position after the rewind control; always allowed, never below zero."""
    return max(0.0, current - seconds)
