"""Video metadata service for the ``videos`` table."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from coursemedia.core.exceptions import ConfigurationError, ResourceNotFoundError
from coursemedia.models.video import VideoRecord
from coursemedia.uploaders.common import chunk_object_key

from .base import BaseService
from .storage import DEFAULT_SIGNED_URL_EXPIRY, StorageService

if TYPE_CHECKING:
    from coursemedia.core.client import BackendClient

logger = logging.getLogger(__name__)

VIDEOS_PATH = "/rest/v1/videos"


class VideoService(BaseService):
    """Service for video metadata rows."""

    def __init__(
        self,
        client: "BackendClient",
        storage: Optional[StorageService] = None,
    ) -> None:
        super().__init__(client)
        self.storage = storage

    def create(self, record: VideoRecord) -> VideoRecord:
        """Insert one row and return it as stored.

        Args:
            record: Row to insert. ``id`` and ``created_at`` are ignored.

        Returns:
            The inserted row with server-assigned fields.
        """
        data = self._post(
            VIDEOS_PATH,
            json=record.to_insert_payload(),
            headers={"Prefer": "return=representation"},
            retry=False,
        )
        if isinstance(data, dict):
            data = [data]
        rows = data if isinstance(data, list) else []
        if not rows:
            logger.warning("Insert returned no representation; using submitted row")
            return record
        created = VideoRecord.model_validate(rows[0])
        logger.info("Created video %s for course %s", created.id, created.course_id)
        return created

    def get(self, video_id: int) -> VideoRecord:
        """Get a video row by ID.

        Raises:
            ResourceNotFoundError: If no row has this ID.
        """
        rows = self._get(VIDEOS_PATH, params={"id": f"eq.{video_id}", "select": "*"})
        if not rows:
            raise ResourceNotFoundError("video", str(video_id))
        return VideoRecord.model_validate(rows[0])

    def list_for_course(self, course_id: int) -> list[VideoRecord]:
        """List a course's videos in display order."""
        rows = self._get(
            VIDEOS_PATH,
            params={
                "course_id": f"eq.{course_id}",
                "select": "*",
                "order": "order_index.asc",
            },
        )
        return [VideoRecord.model_validate(r) for r in rows or []]

    def object_keys(self, record: VideoRecord) -> list[str]:
        """Storage keys of a record's bytes, in playback order."""
        if not record.is_chunked:
            return [record.file_path]
        session_id = record.metadata.get("sessionId")
        if not session_id:
            raise ResourceNotFoundError("chunk manifest", str(record.id))
        return [chunk_object_key(session_id, i) for i in range(record.total_chunks)]

    def playback_urls(
        self,
        record: VideoRecord,
        expires_in: int = DEFAULT_SIGNED_URL_EXPIRY,
    ) -> list[str]:
        """Resolve a record into signed URLs, one per stored part, in order.

        A chunked record yields one URL per chunk in index order; a direct
        record yields a single URL.

        Raises:
            ConfigurationError: If the service has no storage service.
        """
        if self.storage is None:
            raise ConfigurationError("VideoService has no storage service for signing URLs")
        return [self.storage.create_signed_url(k, expires_in) for k in self.object_keys(record)]
