"""Parallel chunk uploader with pause, resume and cancel.

A fixed number of worker loops share one cursor over the chunk plan. Each
loop claims the next unclaimed chunk under a lock, uploads it, records the
result and claims again. Chunks complete in any order; the index embedded in
each chunk's storage key is what preserves reassembly order.

This is an internal implementation detail. Use `UploadSessionManager` from
`coursemedia.services.uploads` as the public API.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

from coursemedia.core.exceptions import (
    ChunkUploadFailure,
    InvalidArgumentError,
    UploadCancelled,
    UploadFailed,
)
from coursemedia.models.progress import TransferProgress
from coursemedia.models.upload import Chunk
from coursemedia.uploaders.common import chunk_object_key
from coursemedia.uploaders.constants import DEFAULT_UPLOAD_WORKERS, SPEED_SAMPLE_INTERVAL
from coursemedia.uploaders.worker import ChunkUploadWorker

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[TransferProgress], None]

# Returned by _claim when a pause landed after the loop's pause check
_PAUSED = object()


# =============================================================================
# Transfer Meter
# =============================================================================


class TransferMeter:
    """Aggregates transferred bytes and derives speed and ETA from samples."""

    def __init__(
        self,
        total_bytes: int,
        chunks_total: int,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.total_bytes = total_bytes
        self.chunks_total = chunks_total
        self.clock = clock
        self._lock = threading.Lock()
        self._bytes = 0
        self._chunks = 0
        self._last_sample_at = clock()
        self._last_sample_bytes = 0
        self._speed = 0.0
        self._eta: Optional[float] = None

    @property
    def bytes_transferred(self) -> int:
        with self._lock:
            return self._bytes

    def add(self, nbytes: int) -> None:
        """Account for one completed chunk."""
        with self._lock:
            self._bytes += nbytes
            self._chunks += 1

    def sample(self) -> TransferProgress:
        """Recompute speed and ETA from the bytes moved since the last sample."""
        now = self.clock()
        with self._lock:
            transferred = self._bytes
            elapsed = now - self._last_sample_at
            if elapsed > 0:
                self._speed = (transferred - self._last_sample_bytes) / elapsed
                self._last_sample_at = now
                self._last_sample_bytes = transferred
            remaining = self.total_bytes - transferred
            self._eta = remaining / self._speed if self._speed > 0 else None
        return self.snapshot()

    def snapshot(self) -> TransferProgress:
        """Current progress without taking a new speed sample."""
        with self._lock:
            return TransferProgress(
                bytes_transferred=self._bytes,
                total_bytes=self.total_bytes,
                speed_bytes_per_sec=self._speed,
                estimated_seconds_remaining=self._eta,
                chunks_completed=self._chunks,
                chunks_total=self.chunks_total,
            )


# =============================================================================
# Scheduler
# =============================================================================


class ParallelUploadScheduler:
    """Runs chunk uploads with bounded concurrency and fail-fast semantics."""

    def __init__(
        self,
        worker: ChunkUploadWorker,
        *,
        concurrency: int = DEFAULT_UPLOAD_WORKERS,
        progress_callback: Optional[ProgressCallback] = None,
        sample_interval: float = SPEED_SAMPLE_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        pause_poll_interval: float = 0.1,
    ) -> None:
        if concurrency < 1:
            raise InvalidArgumentError(
                "concurrency must be at least 1", field="concurrency", value=concurrency
            )
        self.worker = worker
        self.concurrency = concurrency
        self.progress_callback = progress_callback
        self.sample_interval = sample_interval
        self.clock = clock
        self.pause_poll_interval = pause_poll_interval

        self._lock = threading.Lock()
        self._resume = threading.Event()
        self._resume.set()
        self._cancel = threading.Event()
        self._done = threading.Event()
        self._cursor = 0
        self._failure: Optional[ChunkUploadFailure] = None
        self.uploaded_at_failure: list[int] = []
        self.late_results: list[int] = []
        self.meter: Optional[TransferMeter] = None

    # =========================================================================
    # Control
    # =========================================================================

    @property
    def paused(self) -> bool:
        return not self._resume.is_set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def stopping(self) -> bool:
        """True once no further chunks will be claimed (cancel or failure)."""
        return self._cancel.is_set() or self._failure is not None

    @property
    def failure(self) -> Optional[ChunkUploadFailure]:
        return self._failure

    def pause(self) -> None:
        """Stop claiming new chunks; in-flight chunks finish."""
        self._resume.clear()
        logger.info("Upload paused")

    def resume(self) -> None:
        self._resume.set()
        logger.info("Upload resumed")

    def cancel(self) -> None:
        """Stop claiming chunks and end the run with ``UploadCancelled``."""
        self._cancel.set()
        self._resume.set()
        logger.info("Upload cancel requested")

    # =========================================================================
    # Run
    # =========================================================================

    def run(
        self,
        chunks: list[Chunk],
        session_id: str,
        *,
        key_for: Optional[Callable[[Chunk], str]] = None,
    ) -> None:
        """Upload all chunks.

        Args:
            chunks: Chunk plan; ``uploaded`` flags are set in place.
            session_id: Upload session ID used in chunk storage keys.
            key_for: Storage key for a chunk. Defaults to the session's
                chunk key (``chunks/{session_id}/chunk_{index:06d}``).

        Raises:
            UploadFailed: A chunk exhausted its retries.
            UploadCancelled: ``cancel()`` was called.
        """

        def default_key(chunk: Chunk) -> str:
            return chunk_object_key(session_id, chunk.index)

        self._cursor = 0
        self._failure = None
        self.uploaded_at_failure = []
        self.late_results = []
        self._done.clear()
        self.meter = TransferMeter(
            sum(c.size for c in chunks),
            len(chunks),
            clock=self.clock,
        )
        for chunk in chunks:
            if chunk.uploaded:
                self.meter.add(chunk.size)

        loops = min(self.concurrency, len(chunks))
        sampler: Optional[threading.Thread] = None
        if self.progress_callback is not None:
            sampler = threading.Thread(
                target=self._sample_loop, name="upload-progress", daemon=True
            )
            sampler.start()

        try:
            if loops:
                with ThreadPoolExecutor(
                    max_workers=loops, thread_name_prefix="chunk-upload"
                ) as executor:
                    futures = [
                        executor.submit(self._worker_loop, chunks, key_for or default_key)
                        for _ in range(loops)
                    ]
                    for future in as_completed(futures):
                        future.result()
        finally:
            self._done.set()
            if sampler is not None:
                sampler.join()
                self._report(self.meter.sample())

        if self._cancel.is_set():
            raise UploadCancelled(session_id)
        if self._failure is not None:
            raise UploadFailed(str(self._failure), session_id, cause=self._failure)

    def _report(self, progress: TransferProgress) -> None:
        if self.progress_callback is not None:
            self.progress_callback(progress)

    def _sample_loop(self) -> None:
        assert self.meter is not None
        while not self._done.wait(self.sample_interval):
            self._report(self.meter.sample())

    def _wait_while_paused(self) -> bool:
        """Idle while paused. Returns False if the run should stop."""
        while not self._resume.wait(self.pause_poll_interval):
            if self.stopping:
                return False
        return not self.stopping

    def _claim(self, chunks: list[Chunk]) -> object:
        """Next unclaimed chunk, ``None`` when done, or ``_PAUSED``."""
        with self._lock:
            if self.stopping:
                return None
            if self.paused:
                return _PAUSED
            while self._cursor < len(chunks):
                chunk = chunks[self._cursor]
                self._cursor += 1
                if not chunk.uploaded:
                    return chunk
            return None

    def _worker_loop(self, chunks: list[Chunk], key_for: Callable[[Chunk], str]) -> None:
        assert self.meter is not None
        while True:
            if not self._wait_while_paused():
                return
            claimed = self._claim(chunks)
            if claimed is _PAUSED:
                continue
            if not isinstance(claimed, Chunk):
                return
            chunk = claimed

            ok = self.worker.upload(chunk, key_for(chunk))

            with self._lock:
                if self._failure is not None:
                    logger.debug("Discarding late result for chunk %d", chunk.index)
                    if ok:
                        self.late_results.append(chunk.index)
                    return
                if ok:
                    chunk.uploaded = True
                    self.meter.add(chunk.size)
                    logger.debug("Chunk %d uploaded (%d bytes)", chunk.index, chunk.size)
                elif self._cancel.is_set():
                    return
                else:
                    self._failure = ChunkUploadFailure(
                        chunk.index, chunk.retry_count + 1, chunk.last_error
                    )
                    self.uploaded_at_failure = [c.index for c in chunks if c.uploaded]
                    logger.error("Stopping upload: %s", self._failure)
                    return
