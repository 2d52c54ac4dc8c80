"""coursemedia - Video uploads and playback progress for an LMS.

This package provides the media core of a learning management system:
- Upload course videos to object storage, directly or as parallel chunks
  with retries, pause/resume and cancellation
- Record uploaded videos in the ``videos`` table and resolve playback URLs
- Track a viewer's playback progress with periodic and forced reports
- Prevent skipping ahead until a video has been watched once
"""

__version__ = "0.1.0"

from coursemedia.core.client import BackendClient
from coursemedia.core.config import Config, PlaybackSettings, Profile, UploadSettings
from coursemedia.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    CourseMediaError,
    MetadataPersistFailure,
    ResourceNotFoundError,
    UploadCancelled,
    UploadFailed,
    ValidationError,
)

__all__ = [
    "__version__",
    "BackendClient",
    "Config",
    "PlaybackSettings",
    "Profile",
    "UploadSettings",
    "CourseMediaError",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "MetadataPersistFailure",
    "ResourceNotFoundError",
    "UploadCancelled",
    "UploadFailed",
    "ValidationError",
]
