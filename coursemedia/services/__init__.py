"""Service layer for coursemedia.

Provides service classes that encapsulate backend storage, table and app API
operations, plus the upload session manager built on them.
"""

from __future__ import annotations

from .base import BaseService
from .progress import ProgressService
from .storage import StorageService
from .uploads import UploadSessionManager
from .videos import VideoService

__all__ = [
    "BaseService",
    "ProgressService",
    "StorageService",
    "UploadSessionManager",
    "VideoService",
]
