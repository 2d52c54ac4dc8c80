"""Playback progress tracking and skip prevention.

Headless: the media element is reached only through the `MediaHandle`
protocol, so everything here runs (and is tested) without a browser.
"""

from __future__ import annotations

from .debounce import Debouncer
from .guard import SeekDecision, SkipGuard, rewind_target
from .media import MediaHandle
from .player import PlayerController
from .reporter import ProgressReporter
from .tracker import PlaybackProgressTracker, progress_percent

__all__ = [
    "Debouncer",
    "MediaHandle",
    "PlaybackProgressTracker",
    "PlayerController",
    "ProgressReporter",
    "SeekDecision",
    "SkipGuard",
    "progress_percent",
    "rewind_target",
]
