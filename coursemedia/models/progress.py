"""Progress models for tracking transfer status.

Provides dataclasses for byte-level upload progress and upload summaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class TransferProgress:
    """Snapshot of an upload's byte progress, speed and ETA.

    ``estimated_seconds_remaining`` is ``None`` while the speed is unknown
    (nothing transferred during the last sample period).
    """

    bytes_transferred: int = 0
    total_bytes: int = 0
    speed_bytes_per_sec: float = 0.0
    estimated_seconds_remaining: Optional[float] = None
    chunks_completed: int = 0
    chunks_total: int = 0

    @property
    def percent(self) -> float:
        """Calculate bytes completion percentage."""
        if self.total_bytes == 0:
            return 0.0
        return (self.bytes_transferred / self.total_bytes) * 100

    @property
    def is_complete(self) -> bool:
        return self.total_bytes > 0 and self.bytes_transferred >= self.total_bytes

    @property
    def mb_transferred(self) -> float:
        """Return megabytes transferred."""
        return self.bytes_transferred / (1024 * 1024)

    @property
    def total_mb(self) -> float:
        """Return total megabytes."""
        return self.total_bytes / (1024 * 1024)


@dataclass
class UploadSummary:
    """Summary of a finished upload for CLI output."""

    session_id: str
    strategy: str
    status: str
    total_size: int
    chunks_total: int
    chunks_uploaded: int
    duration: float
    video_id: Optional[int] = None

    @property
    def throughput_mbps(self) -> float:
        """Calculate upload throughput in MB/s."""
        if self.duration == 0:
            return 0.0
        return self.total_size / (1024 * 1024) / self.duration
