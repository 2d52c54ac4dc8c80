"""Core modules for coursemedia."""

from coursemedia.core.exceptions import (
    AuthenticationError,
    ChunkUploadFailure,
    ConfigurationError,
    ConnectionError,
    CourseMediaError,
    FileTooLargeError,
    InvalidArgumentError,
    MetadataPersistFailure,
    NetworkError,
    OperationError,
    PlaybackPersistFailure,
    ResourceNotFoundError,
    RetryExhaustedError,
    StorageError,
    UnsupportedTypeError,
    UploadCancelled,
    UploadFailed,
    ValidationError,
)
from coursemedia.core.client import BackendClient
from coursemedia.core.config import (
    CONFIG_DIR,
    CONFIG_FILE,
    Config,
    PlaybackSettings,
    Profile,
    UploadSettings,
)
from coursemedia.core.logging import OperationLog, get_audit_logger, get_logger, setup_logging
from coursemedia.core.output import (
    OutputFormat,
    console,
    format_eta,
    format_file_size,
    print_error,
    print_json,
    print_output,
    print_success,
    print_table,
    print_warning,
)
from coursemedia.core.validation import (
    validate_chunk_size,
    validate_server_url,
    validate_timeout,
    validate_video_file,
    validate_workers,
)

__all__ = [
    # Exceptions
    "CourseMediaError",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "NetworkError",
    "ResourceNotFoundError",
    "RetryExhaustedError",
    "ValidationError",
    "InvalidArgumentError",
    "FileTooLargeError",
    "UnsupportedTypeError",
    "OperationError",
    "StorageError",
    "ChunkUploadFailure",
    "UploadFailed",
    "UploadCancelled",
    "MetadataPersistFailure",
    "PlaybackPersistFailure",
    # Validation
    "validate_server_url",
    "validate_workers",
    "validate_timeout",
    "validate_chunk_size",
    "validate_video_file",
    # Config
    "Config",
    "Profile",
    "UploadSettings",
    "PlaybackSettings",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Client
    "BackendClient",
    # Output
    "OutputFormat",
    "print_output",
    "print_table",
    "print_json",
    "print_error",
    "print_warning",
    "print_success",
    "format_file_size",
    "format_eta",
    "console",
    # Logging
    "get_logger",
    "get_audit_logger",
    "setup_logging",
    "OperationLog",
]
