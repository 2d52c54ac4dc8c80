"""Upload session and chunk models.

These are in-memory working state owned by the upload session manager; none
of them is persisted. The durable outcome of an upload is a ``VideoRecord``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from coursemedia.uploaders.common import VideoSource


class UploadStrategy(str, Enum):
    """How the bytes of a file reach storage."""

    DIRECT = "direct"
    CHUNKED = "chunked"


class UploadStatus(str, Enum):
    """Upload session lifecycle states."""

    PENDING = "pending"
    UPLOADING = "uploading"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (UploadStatus.COMPLETED, UploadStatus.FAILED, UploadStatus.CANCELLED)


@dataclass
class Chunk:
    """A half-open byte range ``[byte_start, byte_end)`` of the source file."""

    index: int
    byte_start: int
    byte_end: int
    uploaded: bool = False
    retry_count: int = 0
    last_error: str = ""

    @property
    def size(self) -> int:
        return self.byte_end - self.byte_start


@dataclass
class UploadSession:
    """State of one upload attempt of one file."""

    session_id: str
    course_id: int
    source: "VideoSource"
    source_file_size: int
    chunk_size: int
    strategy: UploadStrategy
    status: UploadStatus = UploadStatus.PENDING
    created_at: datetime = field(default_factory=datetime.now)
    chunks: List[Chunk] = field(default_factory=list)
    object_key: Optional[str] = None
    error: str = ""

    @property
    def is_chunked(self) -> bool:
        return self.strategy == UploadStrategy.CHUNKED

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def total_chunks(self) -> int:
        return len(self.chunks)

    @property
    def manifest_prefix(self) -> str:
        """Storage prefix holding this session's chunk objects."""
        return f"chunks/{self.session_id}"
