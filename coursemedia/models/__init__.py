"""Data models for coursemedia.

Provides Pydantic models for backend rows and payloads, and dataclasses for
in-memory upload and playback state.
"""

from __future__ import annotations

from .base import BaseModel
from .playback import PlaybackProgressState, PlaybackStatus, ProgressReport, ViewSession
from .progress import TransferProgress, UploadSummary
from .upload import Chunk, UploadSession, UploadStatus, UploadStrategy
from .video import VideoRecord

__all__ = [
    # Base
    "BaseModel",
    # Uploads
    "Chunk",
    "UploadSession",
    "UploadStatus",
    "UploadStrategy",
    "VideoRecord",
    # Progress
    "TransferProgress",
    "UploadSummary",
    # Playback
    "PlaybackProgressState",
    "PlaybackStatus",
    "ProgressReport",
    "ViewSession",
]
