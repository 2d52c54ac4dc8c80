"""Tests for coursemedia.core.validation."""

from __future__ import annotations

import pytest

from coursemedia.core.exceptions import (
    FileTooLargeError,
    InvalidArgumentError,
    InvalidURLError,
    UnsupportedTypeError,
)
from coursemedia.core.validation import (
    validate_chunk_size,
    validate_percent,
    validate_server_url,
    validate_timeout,
    validate_url_or_none,
    validate_video_file,
    validate_workers,
)
from coursemedia.uploaders.constants import ALLOWED_VIDEO_TYPES, GB

# =============================================================================
# URL Validation
# =============================================================================


class TestValidateServerUrl:
    """Tests for validate_server_url."""

    def test_valid_url(self):
        assert validate_server_url("https://project.example.org") == "https://project.example.org"

    def test_strips_trailing_slash_and_whitespace(self):
        assert validate_server_url("  https://project.example.org/ ") == "https://project.example.org"

    def test_keeps_path(self):
        assert validate_server_url("http://localhost:54321/api/") == "http://localhost:54321/api"

    @pytest.mark.parametrize(
        "url",
        ["", "   ", "project.example.org", "ftp://project.example.org", "https://"],
    )
    def test_invalid(self, url: str):
        with pytest.raises(InvalidURLError):
            validate_server_url(url)

    def test_url_or_none(self):
        assert validate_url_or_none(None) is None
        assert validate_url_or_none("  ") is None
        assert validate_url_or_none("https://lms.example.org/") == "https://lms.example.org"


# =============================================================================
# Numeric Validation
# =============================================================================


class TestNumericValidation:
    """Tests for numeric validators."""

    def test_workers(self):
        assert validate_workers(4) == 4
        assert validate_workers("8") == 8

    @pytest.mark.parametrize("value", [0, -1, 65, "many", None])
    def test_workers_invalid(self, value):
        with pytest.raises(InvalidArgumentError):
            validate_workers(value)

    def test_workers_custom_maximum(self):
        with pytest.raises(InvalidArgumentError):
            validate_workers(5, maximum=4)

    def test_timeout(self):
        assert validate_timeout("30") == 30
        with pytest.raises(InvalidArgumentError, match="timeout must be positive"):
            validate_timeout(0)

    def test_chunk_size(self):
        assert validate_chunk_size(1024) == 1024
        with pytest.raises(InvalidArgumentError):
            validate_chunk_size(-5)

    @pytest.mark.parametrize("value", [1, 50, 90, 100])
    def test_percent(self, value: int):
        assert validate_percent(value) == value

    @pytest.mark.parametrize("value", [0, 101, "abc"])
    def test_percent_invalid(self, value):
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_percent(value, "completion_threshold")
        assert "completion_threshold" in str(exc_info.value)


# =============================================================================
# Video Source Validation
# =============================================================================


class TestValidateVideoFile:
    """Tests for validate_video_file."""

    def test_accepts_allowed_video(self):
        validate_video_file(
            100 * 1024, "video/mp4", max_size=3 * GB, allowed_types=ALLOWED_VIDEO_TYPES
        )

    def test_accepts_file_at_limit(self):
        validate_video_file(3 * GB, "video/webm", max_size=3 * GB, allowed_types=ALLOWED_VIDEO_TYPES)

    def test_rejects_oversized_file(self):
        with pytest.raises(FileTooLargeError):
            validate_video_file(
                3 * GB + 1, "video/mp4", max_size=3 * GB, allowed_types=ALLOWED_VIDEO_TYPES
            )

    @pytest.mark.parametrize("mime_type", ["application/pdf", "image/png", None])
    def test_rejects_unsupported_type(self, mime_type):
        with pytest.raises(UnsupportedTypeError):
            validate_video_file(1024, mime_type, max_size=3 * GB, allowed_types=ALLOWED_VIDEO_TYPES)

    def test_size_checked_before_type(self):
        with pytest.raises(FileTooLargeError):
            validate_video_file(10 * GB, "text/plain", max_size=3 * GB, allowed_types=ALLOWED_VIDEO_TYPES)

    def test_negative_size(self):
        with pytest.raises(InvalidArgumentError):
            validate_video_file(-1, "video/mp4", max_size=3 * GB, allowed_types=ALLOWED_VIDEO_TYPES)
