"""Common utilities for uploader modules."""

from __future__ import annotations

import math
import mimetypes
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from coursemedia.core.exceptions import InvalidArgumentError
from coursemedia.models.upload import Chunk

# Matroska is missing from some platform MIME tables
mimetypes.add_type("video/x-matroska", ".mkv")

UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


# =============================================================================
# Collaborator Interfaces
# =============================================================================


@runtime_checkable
class VideoSource(Protocol):
    """A readable video file: name, size, MIME type and random-access reads."""

    name: str
    size: int
    mime_type: Optional[str]

    def read(self, start: int, end: int) -> bytes:
        """Return the bytes of the half-open range ``[start, end)``."""
        ...


class ObjectStorage(Protocol):
    """Object storage operations needed by the upload engine."""

    def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: Optional[str] = None,
        upsert: bool = True,
    ) -> None: ...

    def delete(self, keys: Sequence[str]) -> None: ...

    def get_public_url(self, key: str) -> str: ...


# =============================================================================
# Local Files
# =============================================================================


@dataclass
class LocalVideoFile:
    """A video file on the local filesystem.

    Each read opens the file independently, so concurrent reads from
    several upload workers never share a file position.
    """

    path: Path
    name: str
    size: int
    mime_type: Optional[str]

    @classmethod
    def open(cls, path: Path, mime_type: Optional[str] = None) -> "LocalVideoFile":
        """Describe a local file, guessing its MIME type from the extension.

        Raises:
            InvalidArgumentError: If the path is not a regular file.
        """
        path = Path(path).expanduser()
        if not path.is_file():
            raise InvalidArgumentError(f"Not a file: {path}", field="path", value=str(path))
        guessed, _ = mimetypes.guess_type(path.name)
        return cls(
            path=path,
            name=path.name,
            size=path.stat().st_size,
            mime_type=mime_type or guessed,
        )

    def read(self, start: int, end: int) -> bytes:
        with self.path.open("rb") as f:
            f.seek(start)
            return f.read(end - start)


# =============================================================================
# Chunk Planning
# =============================================================================


def split_into_chunks(file_size: int, chunk_size: int) -> list[Chunk]:
    """Split a byte range ``[0, file_size)`` into ordered fixed-size chunks.

    The last chunk may be shorter than ``chunk_size``; an empty file yields
    no chunks.

    Args:
        file_size: Total size in bytes.
        chunk_size: Maximum bytes per chunk.

    Returns:
        ``ceil(file_size / chunk_size)`` chunks with contiguous,
        non-overlapping ranges.

    Raises:
        InvalidArgumentError: If ``chunk_size`` is not positive or
            ``file_size`` is negative.
    """
    if chunk_size <= 0:
        raise InvalidArgumentError(
            "chunk_size must be positive", field="chunk_size", value=chunk_size
        )
    if file_size < 0:
        raise InvalidArgumentError(
            "file_size must not be negative", field="file_size", value=file_size
        )

    total = math.ceil(file_size / chunk_size)
    return [
        Chunk(
            index=i,
            byte_start=i * chunk_size,
            byte_end=min((i + 1) * chunk_size, file_size),
        )
        for i in range(total)
    ]


# =============================================================================
# Storage Keys
# =============================================================================


def sanitize_filename(name: str) -> str:
    """Replace characters that are unsafe in storage keys with ``_``."""
    return UNSAFE_FILENAME_CHARS.sub("_", name)


def chunk_object_key(session_id: str, index: int) -> str:
    """Storage key for one chunk; the zero-padded index fixes reassembly order."""
    return f"chunks/{session_id}/chunk_{index:06d}"


def direct_object_key(course_id: int, filename: str, timestamp: int) -> str:
    """Storage key for a directly uploaded video."""
    return f"course-{course_id}/{timestamp}_{sanitize_filename(filename)}"


def strip_extension(filename: str) -> str:
    """Title for a video derived from its file name."""
    return Path(filename).stem or filename
