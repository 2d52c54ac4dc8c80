"""Pytest configuration and fixtures for coursemedia tests."""

from __future__ import annotations

import tempfile
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Generator, Optional

import pytest

from coursemedia.core.config import UploadSettings
from coursemedia.core.exceptions import StorageError
from coursemedia.models.video import VideoRecord
from coursemedia.playback.media import TickCallback, Unsubscribe
from coursemedia.services.uploads import UploadSessionManager
from coursemedia.uploaders.worker import ChunkUploadWorker

# =============================================================================
# Fakes
# =============================================================================


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSource:
    """In-memory video source whose bytes depend on their offset.

    Byte ``i`` is ``i % 251``, so a chunk read from the wrong range never
    matches `expected`.
    """

    def __init__(self, size: int, name: str = "lecture.mp4", mime_type: Optional[str] = "video/mp4"):
        self.name = name
        self.size = size
        self.mime_type = mime_type
        self.reads: list[tuple[int, int]] = []

    def read(self, start: int, end: int) -> bytes:
        self.reads.append((start, end))
        return self.expected(start, end)

    def expected(self, start: int, end: int) -> bytes:
        return bytes(i % 251 for i in range(start, end))


class InMemoryStorage:
    """Object storage that records writes and can be told to fail.

    ``fail_times`` maps a key to how many puts of that key fail before one
    succeeds; ``always_fail`` keys never succeed.
    """

    base_url = "https://storage.test"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.objects: dict[str, int] = {}
        self.data: dict[str, bytes] = {}
        self.put_attempts: list[str] = []
        self.deleted: list[list[str]] = []
        self.fail_times: dict[str, int] = {}
        self.always_fail: set[str] = set()
        self.delete_error: Optional[Exception] = None
        self.on_put: Optional[Callable[[str], None]] = None

    def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: Optional[str] = None,
        upsert: bool = True,
    ) -> None:
        with self._lock:
            self.put_attempts.append(key)
        if self.on_put is not None:
            self.on_put(key)
        with self._lock:
            if key in self.always_fail:
                raise StorageError("injected failure", key=key, status_code=500)
            remaining = self.fail_times.get(key, 0)
            if remaining:
                self.fail_times[key] = remaining - 1
                raise StorageError("injected failure", key=key, status_code=500)
            self.objects[key] = len(data)
            self.data[key] = bytes(data)

    def delete(self, keys: Sequence[str]) -> None:
        if self.delete_error is not None:
            raise self.delete_error
        with self._lock:
            self.deleted.append(list(keys))
            for key in keys:
                self.objects.pop(key, None)
                self.data.pop(key, None)

    def get_public_url(self, key: str) -> str:
        return f"{self.base_url}/public/videos/{key}"

    @property
    def deleted_keys(self) -> list[str]:
        return [k for batch in self.deleted for k in batch]


class FakeVideoService:
    """Video store assigning sequential IDs."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.created: list[VideoRecord] = []

    def create(self, record: VideoRecord) -> VideoRecord:
        if self.error is not None:
            raise self.error
        created = record.model_copy(update={"id": len(self.created) + 1})
        self.created.append(created)
        return created


class FakeMedia:
    """Media element stand-in with manual time updates."""

    def __init__(self, duration: float = 100.0) -> None:
        self.current_time = 0.0
        self.duration = duration
        self.paused = True
        self.seeks: list[float] = []
        self.listeners: list[TickCallback] = []

    def get_current_time(self) -> float:
        return self.current_time

    def set_current_time(self, seconds: float) -> None:
        self.current_time = seconds
        self.seeks.append(seconds)

    def get_duration(self) -> float:
        return self.duration

    def is_paused(self) -> bool:
        return self.paused

    def on_tick(self, callback: TickCallback) -> Unsubscribe:
        self.listeners.append(callback)

        def unsubscribe() -> None:
            self.listeners.remove(callback)

        return unsubscribe

    def emit(self, position: float) -> None:
        """Move the playhead and fire a time update."""
        self.current_time = position
        for listener in list(self.listeners):
            listener(position)


def no_sleep_worker_factory(storage, source, settings: UploadSettings) -> ChunkUploadWorker:
    return ChunkUploadWorker(
        storage, source, max_retries=settings.max_retries, sleep=lambda s: None
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def videos() -> FakeVideoService:
    return FakeVideoService()


@pytest.fixture
def small_settings() -> UploadSettings:
    """Byte-scale settings: 10-byte chunks, direct up to 50 bytes."""
    return UploadSettings(
        chunk_size=10,
        direct_threshold=50,
        max_file_size=1000,
        concurrency=3,
        max_retries=3,
    )


@pytest.fixture
def manager(
    storage: InMemoryStorage,
    videos: FakeVideoService,
    small_settings: UploadSettings,
) -> UploadSessionManager:
    return UploadSessionManager(
        storage,
        videos,
        small_settings,
        worker_factory=no_sleep_worker_factory,
        clock=lambda: 1_700_000_000.0,
        sample_interval=0.01,
    )


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: test
output_format: table

profiles:
  test:
    url: https://project-test.example.org
    app_url: https://lms-test.example.org
    bucket: test-videos
    verify_ssl: false
    timeout: 30

  production:
    url: https://project.example.org
    verify_ssl: true
    timeout: 60

upload:
  preset: large
  concurrency: 5

playback:
  completion_threshold: 95
  report_interval: 10
"""
