"""Tests for coursemedia package imports and exports."""

from __future__ import annotations


class TestPackageImports:
    """Tests for package imports."""

    def test_import_coursemedia(self):
        import coursemedia

        assert coursemedia.__version__ == "0.1.0"
        assert "UploadSettings" in coursemedia.__all__

    def test_import_core_modules(self):
        from coursemedia.core import client, config, exceptions, logging, output, validation

        assert client is not None
        assert config is not None
        assert exceptions is not None
        assert validation is not None
        assert output is not None
        assert logging is not None

    def test_import_models(self):
        from coursemedia.models import base, playback, progress, upload, video

        assert base is not None
        assert upload is not None
        assert video is not None
        assert progress is not None
        assert playback is not None

    def test_import_services(self):
        from coursemedia.services import base, progress, storage, uploads, videos

        assert base is not None
        assert storage is not None
        assert videos is not None
        assert uploads is not None
        assert progress is not None

    def test_import_uploaders_and_playback(self):
        from coursemedia.playback import debounce, guard, media, player, reporter, tracker
        from coursemedia.uploaders import common, constants, parallel, worker

        assert common is not None
        assert constants is not None
        assert parallel is not None
        assert worker is not None
        assert debounce is not None
        assert guard is not None
        assert media is not None
        assert player is not None
        assert reporter is not None
        assert tracker is not None

    def test_import_cli(self):
        from coursemedia.cli import common, config_cmd, main, playback, upload, video

        assert main is not None
        assert common is not None
        assert config_cmd is not None
        assert upload is not None
        assert video is not None
        assert playback is not None


class TestExceptionHierarchy:
    """Tests for exception hierarchy."""

    def test_base_error(self):
        from coursemedia.core.exceptions import CourseMediaError

        exc = CourseMediaError("test error")
        assert "test error" in str(exc)
        assert isinstance(exc, Exception)

    def test_auth_error(self):
        from coursemedia.core.exceptions import AuthenticationError

        exc = AuthenticationError("https://example.org", "bad key")
        assert "example.org" in str(exc)

    def test_cancel_is_an_upload_failure(self):
        from coursemedia.core.exceptions import UploadCancelled, UploadFailed

        exc = UploadCancelled("upload_1_abc")
        assert isinstance(exc, UploadFailed)
        assert "upload_1_abc" in str(exc)

    def test_chunk_failure_names_chunk(self):
        from coursemedia.core.exceptions import ChunkUploadFailure

        exc = ChunkUploadFailure(7, 4, "HTTP 500")
        assert "chunk 7" in str(exc)
        assert "4 attempts" in str(exc)
        assert exc.index == 7

    def test_validation_errors(self):
        from coursemedia.core.exceptions import (
            FileTooLargeError,
            InvalidURLError,
            UnsupportedTypeError,
            ValidationError,
        )

        url_exc = InvalidURLError("bad-url", "missing scheme")
        assert "bad-url" in str(url_exc)

        size_exc = FileTooLargeError(200, 100)
        assert isinstance(size_exc, ValidationError)
        assert "200" in str(size_exc)

        type_exc = UnsupportedTypeError("application/pdf", ["video/mp4"])
        assert "application/pdf" in str(type_exc)
        assert "video/mp4" in str(type_exc)
