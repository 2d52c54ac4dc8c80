"""Exception hierarchy for coursemedia.

Provides typed exceptions for different failure modes with clear error messages.
"""

from __future__ import annotations

from typing import Any


class CourseMediaError(Exception):
    """Base exception for all coursemedia errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(CourseMediaError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ProfileNotFoundError(ConfigurationError):
    """Requested profile does not exist."""

    def __init__(self, profile: str):
        super().__init__(f"Profile not found: {profile}", field="profile", value=profile)
        self.profile = profile


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(CourseMediaError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidArgumentError(ValidationError):
    """A numeric or structural argument is out of range."""


class InvalidURLError(ValidationError):
    """Invalid URL format."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Invalid URL: {url}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="url", value=url)
        self.url = url
        self.reason = reason


class FileTooLargeError(ValidationError):
    """Source file exceeds the configured maximum size."""

    def __init__(self, size: int, max_size: int):
        super().__init__(
            f"File is too large: {size} bytes (maximum {max_size} bytes)",
            field="size",
            value=size,
        )
        self.size = size
        self.max_size = max_size


class UnsupportedTypeError(ValidationError):
    """Source file MIME type is not an allowed video type."""

    def __init__(self, mime_type: str | None, allowed: list[str] | None = None):
        msg = f"Unsupported file type: {mime_type or 'unknown'}"
        if allowed:
            msg = f"{msg} (allowed: {', '.join(allowed)})"
        super().__init__(msg, field="mime_type", value=mime_type)
        self.mime_type = mime_type
        self.allowed = allowed or []


# =============================================================================
# Connection Errors
# =============================================================================


class ConnectionError(CourseMediaError):
    """Base class for connection-related errors."""

    def __init__(self, message: str, url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message, details)
        self.url = url


class NetworkError(ConnectionError):
    """Network-level error (DNS, TCP, TLS, timeouts)."""

    def __init__(self, url: str, cause: str | None = None):
        msg = f"Network error connecting to {url}"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__(msg, url)
        self.cause = cause


class ServerUnreachableError(ConnectionError):
    """Server is not reachable."""

    def __init__(self, url: str):
        super().__init__(f"Server unreachable: {url}", url)


class RetryExhaustedError(ConnectionError):
    """All retry attempts failed."""

    def __init__(self, operation: str, attempts: int, last_error: Exception | None = None):
        msg = f"Operation '{operation}' failed after {attempts} attempts"
        if last_error:
            msg = f"{msg}: {last_error}"
        super().__init__(msg)
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationError(CourseMediaError):
    """Authentication failed or the credential lacks permission."""

    def __init__(self, url: str | None = None, reason: str = ""):
        msg = "Authentication failed"
        if url:
            msg = f"{msg} for {url}"
        if reason:
            msg = f"{msg}: {reason}"
        details = {"url": url} if url else {}
        super().__init__(msg, details)
        self.url = url
        self.reason = reason


# =============================================================================
# Resource Errors
# =============================================================================


class ResourceNotFoundError(CourseMediaError):
    """Requested resource does not exist."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            {"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(CourseMediaError):
    """Error during an operation."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        full_details: dict[str, Any] = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.operation = operation


class StorageError(OperationError):
    """Object storage rejected a request."""

    def __init__(self, message: str, key: str | None = None, status_code: int | None = None):
        details: dict[str, Any] = {}
        if key:
            details["key"] = key
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__("storage", message, details)
        self.key = key
        self.status_code = status_code


class ChunkUploadFailure(OperationError):
    """A single chunk exhausted its retry budget."""

    def __init__(self, index: int, attempts: int, cause: str = ""):
        msg = f"Failed to upload chunk {index} after {attempts} attempts"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__("upload", msg, {"chunk": index})
        self.index = index
        self.attempts = attempts
        self.cause = cause


class UploadFailed(OperationError):
    """Session-level terminal upload failure."""

    def __init__(
        self,
        message: str,
        session_id: str | None = None,
        cause: Exception | None = None,
    ):
        details = {"session": session_id} if session_id else {}
        super().__init__("upload", message, details)
        self.session_id = session_id
        self.cause = cause


class UploadCancelled(UploadFailed):
    """The upload was cancelled by the caller."""

    def __init__(self, session_id: str | None = None):
        super().__init__("Upload was cancelled", session_id)


class MetadataPersistFailure(OperationError):
    """Object bytes were stored but the metadata row could not be written."""

    def __init__(self, message: str, session_id: str | None = None):
        details = {"session": session_id} if session_id else {}
        super().__init__("persist", message, details)
        self.session_id = session_id


class PlaybackPersistFailure(OperationError):
    """A playback progress write failed."""

    def __init__(self, video_id: int | str, cause: str = ""):
        msg = f"Failed to save progress for video {video_id}"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__("progress", msg, {"video": video_id})
        self.video_id = video_id
        self.cause = cause
