"""Media element capability interface."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

TickCallback = Callable[[float], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class MediaHandle(Protocol):
    """The parts of a video element the player controller needs.

    Implementations wrap a real player (or a fake in tests). Positions and
    durations are in seconds.
    """

    def get_current_time(self) -> float: ...

    def set_current_time(self, seconds: float) -> None: ...

    def get_duration(self) -> float: ...

    def is_paused(self) -> bool: ...

    def on_tick(self, callback: TickCallback) -> Unsubscribe:
        """Register a time-update listener; returns a function that removes it."""
        ...
