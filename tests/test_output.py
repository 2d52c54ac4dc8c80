"""Tests for coursemedia.core.output helpers."""

from __future__ import annotations

import pytest

from coursemedia.core.output import OutputFormat, format_eta, format_file_size


class TestFormatFileSize:
    """Tests for format_file_size."""

    @pytest.mark.parametrize(
        ("num_bytes", "expected"),
        [
            (0, "0 B"),
            (-10, "0 B"),
            (95, "95 B"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (10 * 1024 * 1024, "10 MB"),
            (3 * 1024**3, "3 GB"),
            (3 * 1024**4, "3 TB"),
        ],
    )
    def test_format(self, num_bytes: int, expected: str):
        assert format_file_size(num_bytes) == expected


class TestFormatEta:
    """Tests for format_eta."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (None, "calculating..."),
            (float("inf"), "calculating..."),
            (-1, "calculating..."),
            (0, "0s"),
            (42.7, "42s"),
            (65, "1m 5s"),
            (3700, "1h 1m"),
        ],
    )
    def test_format(self, seconds, expected: str):
        assert format_eta(seconds) == expected


def test_output_format_from_string():
    assert OutputFormat.from_string("JSON") is OutputFormat.JSON
    assert OutputFormat.from_string("table") is OutputFormat.TABLE
