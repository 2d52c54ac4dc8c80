"""Shared constants for uploader modules.

Two presets mirror the deployments this engine serves: ``standard`` for
course videos up to 3 GiB, and ``large`` for lecture archives up to 3 TiB
with bigger chunks.
"""

MB = 1024 * 1024
GB = 1024 * MB
TB = 1024 * GB

# =============================================================================
# Upload Defaults
# =============================================================================

# Bytes per chunk for chunked uploads
DEFAULT_CHUNK_SIZE = 10 * MB
LARGE_CHUNK_SIZE = 50 * MB

# Files at or below this size are uploaded with a single PUT
DEFAULT_DIRECT_THRESHOLD = 500 * MB

# Absolute maximum accepted file size
DEFAULT_MAX_FILE_SIZE = 3 * GB
LARGE_MAX_FILE_SIZE = 3 * TB

# Concurrent chunk uploads
DEFAULT_UPLOAD_WORKERS = 3

# Retries per chunk after the first attempt
DEFAULT_MAX_RETRIES = 3

# Exponential backoff base between chunk attempts (seconds: 1, 2, 4)
DEFAULT_RETRY_BACKOFF_BASE = 1.0

# Speed/ETA sampling period (seconds)
SPEED_SAMPLE_INTERVAL = 1.0

# Target bucket
DEFAULT_BUCKET = "videos"

# Row defaults for uploaded videos
DEFAULT_ORDER_INDEX = 999

ALLOWED_VIDEO_TYPES = (
    "video/mp4",
    "video/webm",
    "video/quicktime",
    "video/x-msvideo",
    "video/x-matroska",
)

UPLOAD_PRESETS: dict[str, dict[str, int]] = {
    "standard": {
        "chunk_size": DEFAULT_CHUNK_SIZE,
        "max_file_size": DEFAULT_MAX_FILE_SIZE,
    },
    "large": {
        "chunk_size": LARGE_CHUNK_SIZE,
        "max_file_size": LARGE_MAX_FILE_SIZE,
    },
}
