"""Video upload engine for coursemedia.

This module provides the pieces of the chunked upload path:
- Chunk planning and storage key helpers
- Single-chunk upload worker with bounded retries
- Parallel scheduler with fail-fast, pause/resume/cancel and transfer metering

These are internal implementation details. Use `UploadSessionManager` from
`coursemedia.services.uploads` as the public API.
"""

from coursemedia.uploaders.common import (
    LocalVideoFile,
    ObjectStorage,
    VideoSource,
    chunk_object_key,
    direct_object_key,
    sanitize_filename,
    split_into_chunks,
)
from coursemedia.uploaders.constants import (
    ALLOWED_VIDEO_TYPES,
    DEFAULT_BUCKET,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DIRECT_THRESHOLD,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_UPLOAD_WORKERS,
    UPLOAD_PRESETS,
)
from coursemedia.uploaders.parallel import ParallelUploadScheduler, TransferMeter
from coursemedia.uploaders.worker import ChunkUploadWorker

__all__ = [
    # Constants
    "ALLOWED_VIDEO_TYPES",
    "DEFAULT_BUCKET",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_DIRECT_THRESHOLD",
    "DEFAULT_MAX_FILE_SIZE",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_UPLOAD_WORKERS",
    "UPLOAD_PRESETS",
    # Common utilities
    "LocalVideoFile",
    "ObjectStorage",
    "VideoSource",
    "chunk_object_key",
    "direct_object_key",
    "sanitize_filename",
    "split_into_chunks",
    # Engine
    "ChunkUploadWorker",
    "ParallelUploadScheduler",
    "TransferMeter",
]
