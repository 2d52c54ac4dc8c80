"""Input validation helpers for coursemedia."""

from __future__ import annotations

from collections.abc import Collection
from typing import Any
from urllib.parse import urlparse

from coursemedia.core.exceptions import (
    FileTooLargeError,
    InvalidArgumentError,
    InvalidURLError,
    UnsupportedTypeError,
)

SUPPORTED_SCHEMES = ("http", "https")


# =============================================================================
# URL Validation
# =============================================================================


def validate_server_url(url: str) -> str:
    """Validate and normalize a server URL.

    Args:
        url: URL to validate.

    Returns:
        URL with surrounding whitespace and trailing slashes removed.

    Raises:
        InvalidURLError: If the URL is empty, has no scheme or hostname,
            or uses an unsupported scheme.
    """
    if url is None or not str(url).strip():
        raise InvalidURLError(str(url), "URL is empty")

    url = str(url).strip().rstrip("/")
    parsed = urlparse(url)

    if not parsed.scheme:
        raise InvalidURLError(url, "URL must include scheme (http:// or https://)")
    if parsed.scheme not in SUPPORTED_SCHEMES:
        raise InvalidURLError(url, f"Unsupported scheme: {parsed.scheme}")
    if not parsed.netloc:
        raise InvalidURLError(url, "URL must include hostname")

    return url


def validate_url_or_none(url: str | None) -> str | None:
    """Validate a URL, treating empty values as absent."""
    if url is None or not url.strip():
        return None
    return validate_server_url(url)


# =============================================================================
# Numeric Validation
# =============================================================================


def _as_int(value: Any, field: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"{field} must be an integer", field=field, value=value)


def validate_workers(value: Any, *, maximum: int = 64) -> int:
    """Validate a parallel worker count (1..maximum)."""
    workers = _as_int(value, "workers")
    if workers < 1 or workers > maximum:
        raise InvalidArgumentError(
            f"workers must be between 1 and {maximum}", field="workers", value=workers
        )
    return workers


def validate_timeout(value: Any) -> int:
    """Validate a timeout in seconds (must be positive)."""
    timeout = _as_int(value, "timeout")
    if timeout <= 0:
        raise InvalidArgumentError("timeout must be positive", field="timeout", value=timeout)
    return timeout


def validate_chunk_size(value: Any) -> int:
    """Validate a chunk size in bytes (must be positive)."""
    chunk_size = _as_int(value, "chunk_size")
    if chunk_size <= 0:
        raise InvalidArgumentError(
            "chunk_size must be positive", field="chunk_size", value=chunk_size
        )
    return chunk_size


def validate_percent(value: Any, field: str = "percent") -> int:
    """Validate a percentage in the range 1..100."""
    percent = _as_int(value, field)
    if percent < 1 or percent > 100:
        raise InvalidArgumentError(f"{field} must be between 1 and 100", field=field, value=percent)
    return percent


# =============================================================================
# Video Source Validation
# =============================================================================


def validate_video_file(
    size: int,
    mime_type: str | None,
    *,
    max_size: int,
    allowed_types: Collection[str],
) -> None:
    """Validate a candidate video before any network activity.

    Args:
        size: File size in bytes.
        mime_type: MIME type reported for the file.
        max_size: Absolute maximum size in bytes.
        allowed_types: Allowed MIME types.

    Raises:
        FileTooLargeError: If the file exceeds ``max_size``.
        UnsupportedTypeError: If the MIME type is not allowed.
    """
    if size < 0:
        raise InvalidArgumentError("size must not be negative", field="size", value=size)
    if size > max_size:
        raise FileTooLargeError(size, max_size)
    if mime_type not in allowed_types:
        raise UnsupportedTypeError(mime_type, sorted(allowed_types))
