"""Upload session management.

`UploadSessionManager` is the public API of the upload engine. It validates a
file, chooses the direct or chunked strategy, drives the chunk scheduler and
writes exactly one ``videos`` row per successful upload. Failed, cancelled
and orphaned uploads have their stored objects deleted best-effort.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any, Optional, Protocol

from coursemedia.core.config import UploadSettings
from coursemedia.core.exceptions import (
    InvalidArgumentError,
    MetadataPersistFailure,
    UploadCancelled,
    UploadFailed,
)
from coursemedia.core.logging import AuditLogger, get_audit_logger, log_context
from coursemedia.core.output import format_file_size
from coursemedia.core.validation import validate_video_file
from coursemedia.models.upload import Chunk, UploadSession, UploadStatus, UploadStrategy
from coursemedia.models.video import VideoRecord
from coursemedia.uploaders.common import (
    ObjectStorage,
    VideoSource,
    chunk_object_key,
    direct_object_key,
    split_into_chunks,
    strip_extension,
)
from coursemedia.uploaders.constants import DEFAULT_ORDER_INDEX, SPEED_SAMPLE_INTERVAL
from coursemedia.uploaders.parallel import ParallelUploadScheduler, ProgressCallback
from coursemedia.uploaders.worker import ChunkUploadWorker

logger = logging.getLogger(__name__)


class VideoStore(Protocol):
    """Durable store for video metadata rows."""

    def create(self, record: VideoRecord) -> VideoRecord: ...


WorkerFactory = Callable[[ObjectStorage, VideoSource, UploadSettings], ChunkUploadWorker]


def default_worker_factory(
    storage: ObjectStorage,
    source: VideoSource,
    settings: UploadSettings,
) -> ChunkUploadWorker:
    """Build a chunk worker with the configured retry budget."""
    return ChunkUploadWorker(storage, source, max_retries=settings.max_retries)


def new_session_id(now: Optional[float] = None) -> str:
    """Millisecond timestamp plus a short random suffix."""
    now = time.time() if now is None else now
    return f"{int(now * 1000)}_{uuid.uuid4().hex[:7]}"


def plan_upload(
    source: VideoSource,
    course_id: int,
    settings: UploadSettings,
    *,
    session_id: Optional[str] = None,
    now: Optional[float] = None,
) -> UploadSession:
    """Validate a file and decide how it will be uploaded.

    Files up to ``direct_threshold`` bytes go up as a single object; larger
    files are split into ``chunk_size`` parts. Pure: no network calls.

    Raises:
        FileTooLargeError: If the file exceeds ``max_file_size``.
        UnsupportedTypeError: If the MIME type is not allowed.
    """
    validate_video_file(
        source.size,
        source.mime_type,
        max_size=settings.max_file_size,
        allowed_types=settings.allowed_mime_types,
    )

    now = time.time() if now is None else now
    sid = session_id or new_session_id(now)
    if source.size <= settings.direct_threshold:
        return UploadSession(
            session_id=sid,
            course_id=course_id,
            source=source,
            source_file_size=source.size,
            chunk_size=source.size,
            strategy=UploadStrategy.DIRECT,
            object_key=direct_object_key(course_id, source.name, int(now * 1000)),
        )
    return UploadSession(
        session_id=sid,
        course_id=course_id,
        source=source,
        source_file_size=source.size,
        chunk_size=settings.chunk_size,
        strategy=UploadStrategy.CHUNKED,
        chunks=split_into_chunks(source.size, settings.chunk_size),
    )


class UploadSessionManager:
    """Owns upload sessions from validation to the metadata row."""

    def __init__(
        self,
        storage: ObjectStorage,
        videos: VideoStore,
        settings: Optional[UploadSettings] = None,
        *,
        worker_factory: WorkerFactory = default_worker_factory,
        clock: Callable[[], float] = time.time,
        sample_interval: float = SPEED_SAMPLE_INTERVAL,
        audit: Optional[AuditLogger] = None,
    ) -> None:
        self.storage = storage
        self.videos = videos
        self.settings = settings or UploadSettings()
        self.worker_factory = worker_factory
        self.clock = clock
        self.sample_interval = sample_interval
        self.audit = audit or get_audit_logger()
        self._lock = threading.Lock()
        self._active: dict[str, ParallelUploadScheduler] = {}
        self._direct_parts: dict[str, Chunk] = {}

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def begin(
        self,
        source: VideoSource,
        course_id: int,
        *,
        session_id: Optional[str] = None,
    ) -> UploadSession:
        """Validate a file and plan its upload. Makes no network calls.

        Args:
            source: File to upload.
            course_id: Course the video belongs to.
            session_id: Explicit session ID (generated if omitted).

        Returns:
            A pending session.

        Raises:
            FileTooLargeError: If the file exceeds ``max_file_size``.
            UnsupportedTypeError: If the MIME type is not allowed.
        """
        session = plan_upload(
            source,
            course_id,
            self.settings,
            session_id=session_id,
            now=self.clock(),
        )
        logger.info(
            "Planned %s upload %s: %s (%s, %d chunks)",
            session.strategy.value,
            session.session_id,
            source.name,
            format_file_size(source.size),
            session.total_chunks,
        )
        return session

    def transfer(
        self,
        session: UploadSession,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        """Move the session's bytes into storage.

        Raises:
            UploadFailed: A chunk exhausted its retries. Uploaded chunks have
                been deleted best-effort and the session is ``failed``.
            UploadCancelled: The session was cancelled. Uploaded chunks have
                been deleted best-effort and the session is ``cancelled``.
        """
        if session.status != UploadStatus.PENDING:
            raise InvalidArgumentError(
                f"Session {session.session_id} is {session.status.value}, expected pending",
                field="status",
                value=session.status.value,
            )

        worker = self.worker_factory(self.storage, session.source, self.settings)
        scheduler = ParallelUploadScheduler(
            worker,
            concurrency=self.settings.concurrency if session.is_chunked else 1,
            progress_callback=progress_callback,
            sample_interval=self.sample_interval,
        )
        worker.should_stop = lambda: scheduler.stopping

        key_for: Optional[Callable[[Chunk], str]] = None
        if session.is_chunked:
            chunks = session.chunks
        else:
            # Whole file as one part through the same worker
            direct_part = Chunk(index=0, byte_start=0, byte_end=session.source_file_size)
            chunks = [direct_part]
            object_key = session.object_key or ""

            def direct_key(chunk: Chunk) -> str:
                return object_key

            key_for = direct_key
            self._direct_parts[session.session_id] = direct_part

        with self._lock:
            self._active[session.session_id] = scheduler
            session.status = UploadStatus.UPLOADING

        try:
            scheduler.run(chunks, session.session_id, key_for=key_for)
        except UploadCancelled:
            session.status = UploadStatus.CANCELLED
            self._cleanup(session, self.stored_keys(session))
            self._direct_parts.pop(session.session_id, None)
            self.audit.record(
                "upload.cancelled",
                success=False,
                course_id=session.course_id,
                session_id=session.session_id,
            )
            raise
        except UploadFailed as e:
            session.status = UploadStatus.FAILED
            session.error = str(e)
            if session.is_chunked:
                keys = [
                    chunk_object_key(session.session_id, i) for i in scheduler.uploaded_at_failure
                ]
            else:
                keys = self.stored_keys(session)
            self._cleanup(session, keys)
            if session.is_chunked and scheduler.late_results:
                # Chunks that landed after the failure were never marked uploaded
                self._cleanup(
                    session,
                    [chunk_object_key(session.session_id, i) for i in scheduler.late_results],
                )
            self._direct_parts.pop(session.session_id, None)
            self.audit.record(
                "upload.failed",
                success=False,
                course_id=session.course_id,
                session_id=session.session_id,
                stage="transfer",
                error=session.error,
            )
            raise
        finally:
            with self._lock:
                self._active.pop(session.session_id, None)

        session.status = UploadStatus.UPLOADING
        logger.info(
            "Transferred %s for session %s",
            format_file_size(session.source_file_size),
            session.session_id,
        )

    def complete(
        self,
        session: UploadSession,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        duration: int = 0,
        order_index: int = DEFAULT_ORDER_INDEX,
    ) -> VideoRecord:
        """Write the metadata row for a fully transferred session.

        Raises:
            MetadataPersistFailure: If the row could not be written. The
                stored objects have been deleted best-effort.
        """
        if session.status != UploadStatus.UPLOADING or not self._fully_stored(session):
            raise InvalidArgumentError(
                f"Session {session.session_id} has not finished transferring",
                field="status",
                value=session.status.value,
            )

        record = self._build_record(
            session,
            title=title,
            description=description,
            duration=duration,
            order_index=order_index,
        )
        try:
            created = self.videos.create(record)
        except Exception as e:
            session.status = UploadStatus.FAILED
            session.error = str(e)
            self._cleanup(session, self.stored_keys(session))
            self._direct_parts.pop(session.session_id, None)
            self.audit.record(
                "upload.failed",
                success=False,
                course_id=session.course_id,
                session_id=session.session_id,
                stage="metadata",
                error=str(e),
            )
            raise MetadataPersistFailure(
                f"Failed to save video metadata: {e}", session.session_id
            ) from e

        session.status = UploadStatus.COMPLETED
        self._direct_parts.pop(session.session_id, None)
        self.audit.record(
            "upload.completed",
            course_id=session.course_id,
            video_id=created.id,
            session_id=session.session_id,
            strategy=session.strategy.value,
            size=session.source_file_size,
            chunks=session.total_chunks,
        )
        return created

    def abort(self, session: UploadSession) -> None:
        """Discard a session and everything it stored so far."""
        if session.status == UploadStatus.COMPLETED:
            raise InvalidArgumentError(
                f"Session {session.session_id} is already completed",
                field="status",
                value=session.status.value,
            )
        with self._lock:
            scheduler = self._active.get(session.session_id)
        if scheduler is not None:
            # transfer() cleans up when the scheduler stops
            scheduler.cancel()
            return
        if session.is_terminal:
            return
        session.status = UploadStatus.CANCELLED
        self._cleanup(session, self.stored_keys(session))
        self._direct_parts.pop(session.session_id, None)
        self.audit.record(
            "upload.aborted",
            success=False,
            course_id=session.course_id,
            session_id=session.session_id,
        )

    # =========================================================================
    # Control
    # =========================================================================

    def _scheduler(self, session: UploadSession) -> ParallelUploadScheduler:
        with self._lock:
            scheduler = self._active.get(session.session_id)
        if scheduler is None:
            raise InvalidArgumentError(
                f"Session {session.session_id} is not transferring",
                field="status",
                value=session.status.value,
            )
        return scheduler

    def pause(self, session: UploadSession) -> None:
        """Stop claiming chunks; in-flight chunks finish."""
        self._scheduler(session).pause()
        session.status = UploadStatus.PAUSED

    def resume(self, session: UploadSession) -> None:
        self._scheduler(session).resume()
        session.status = UploadStatus.UPLOADING

    def cancel(self, session: UploadSession) -> None:
        """Cancel a session whether or not it is transferring."""
        self.abort(session)

    # =========================================================================
    # Convenience
    # =========================================================================

    def upload(
        self,
        source: VideoSource,
        course_id: int,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        duration: int = 0,
        progress_callback: Optional[ProgressCallback] = None,
        session_id: Optional[str] = None,
        on_begin: Optional[Callable[[UploadSession], Any]] = None,
    ) -> VideoRecord:
        """Validate, transfer and record one file.

        Args:
            source: File to upload.
            course_id: Course the video belongs to.
            title: Display title (defaults to the file name without extension).
            description: Optional description.
            duration: Video length in seconds.
            progress_callback: Receives a `TransferProgress` about once a second.
            session_id: Explicit session ID.
            on_begin: Called with the planned session before any bytes move,
                so callers can keep a handle for pause/resume/cancel.

        Returns:
            The created video record.
        """
        session = self.begin(source, course_id, session_id=session_id)
        if on_begin is not None:
            on_begin(session)
        with log_context(
            "upload",
            logger,
            session=session.session_id,
            strategy=session.strategy.value,
            size=source.size,
        ) as op:
            self.transfer(session, progress_callback)
            created = self.complete(
                session, title=title, description=description, duration=duration
            )
            op.note(video_id=created.id)
            return created

    # =========================================================================
    # Helpers
    # =========================================================================

    def stored_keys(self, session: UploadSession) -> list[str]:
        """Keys of objects this session has written so far."""
        if session.is_chunked:
            return [
                chunk_object_key(session.session_id, c.index) for c in session.chunks if c.uploaded
            ]
        part = self._direct_parts.get(session.session_id)
        if part is not None and part.uploaded and session.object_key:
            return [session.object_key]
        return []

    def _fully_stored(self, session: UploadSession) -> bool:
        if session.is_chunked:
            return all(c.uploaded for c in session.chunks)
        part = self._direct_parts.get(session.session_id)
        return part is not None and part.uploaded

    def _cleanup(self, session: UploadSession, keys: Sequence[str]) -> None:
        """Delete stored objects, logging instead of raising on failure."""
        if not keys:
            return
        try:
            self.storage.delete(list(keys))
            logger.info("Deleted %d objects for session %s", len(keys), session.session_id)
        except Exception as e:
            logger.warning(
                "Cleanup of %d objects for session %s failed: %s",
                len(keys),
                session.session_id,
                e,
            )

    def _build_record(
        self,
        session: UploadSession,
        *,
        title: Optional[str],
        description: Optional[str],
        duration: int,
        order_index: int,
    ) -> VideoRecord:
        source = session.source
        metadata: dict[str, Any] = {
            "originalName": source.name,
            "size": source.size,
            "type": source.mime_type,
            "chunked": session.is_chunked,
        }
        if session.is_chunked:
            first_key = chunk_object_key(session.session_id, 0)
            file_path = session.manifest_prefix
            metadata.update(
                {
                    "sessionId": session.session_id,
                    "totalChunks": session.total_chunks,
                    "totalSize": session.source_file_size,
                    "chunkSize": session.chunk_size,
                    "uploadedAt": datetime.fromtimestamp(self.clock()).isoformat(),
                }
            )
        else:
            first_key = session.object_key or ""
            file_path = first_key

        return VideoRecord(
            course_id=session.course_id,
            title=title or strip_extension(source.name),
            description=description or f"File size: {format_file_size(source.size)}",
            file_url=self.storage.get_public_url(first_key),
            file_path=file_path,
            file_size=source.size,
            mime_type=source.mime_type,
            duration=duration,
            order_index=order_index,
            metadata=metadata,
        )
