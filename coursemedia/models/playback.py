"""Playback progress models."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import Field

from coursemedia.models.base import BaseModel


class PlaybackStatus(str, Enum):
    """Viewer status for one video."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class PlaybackProgressState:
    """Advisory in-memory copy of one viewer's progress on one video.

    Invariants:
        - ``has_completed_once`` never reverts to False.
        - Once completed, ``status`` stays ``COMPLETED``.
        - ``max_watched_position`` never decreases.
    """

    current_position: float = 0.0
    max_watched_position: float = 0.0
    total_watched_seconds: float = 0.0
    progress_percent: int = 0
    status: PlaybackStatus = PlaybackStatus.NOT_STARTED
    has_completed_once: bool = False
    duration: float = 0.0


@dataclass
class ViewSession:
    """Who is watching, for progress writes.

    ``log_id`` identifies the viewer's view-log row. Without it the
    progress endpoint inserts a new row, so it is filled from the first
    write's response and sent with every later one.
    """

    user_id: str
    course_id: int | str
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    log_id: Optional[int | str] = None


class ProgressReport(BaseModel):
    """Full-state progress write sent to the persistence endpoint.

    Each report carries the complete current state, so a later report
    supersedes an earlier failed one.
    """

    video_id: int | str
    user_id: str | None = None
    course_id: int | str | None = None
    session_id: str | None = None
    log_id: int | str | None = None
    position: float = Field(..., ge=0, alias="current_position")
    total_watched: float = Field(0.0, ge=0, alias="total_watched_time")
    progress_percent: int = Field(..., ge=0, le=100)
    is_complete: bool = False
    status: PlaybackStatus = PlaybackStatus.IN_PROGRESS
    video_duration: float | None = None
    reason: str = Field("periodic", exclude=True)
    start_time: datetime | None = None
    end_time: datetime = Field(default_factory=datetime.now)

    def to_payload(self) -> dict[str, Any]:
        """Serialize with the endpoint's field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
