"""Single-chunk upload with bounded retries.

This is an internal implementation detail. Use `UploadSessionManager` from
`coursemedia.services.uploads` as the public API.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Optional

from coursemedia.core.exceptions import AuthenticationError
from coursemedia.models.upload import Chunk
from coursemedia.uploaders.common import ObjectStorage, VideoSource
from coursemedia.uploaders.constants import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_BACKOFF_BASE

logger = logging.getLogger(__name__)


class ChunkUploadWorker:
    """Uploads one chunk's byte range to a destination key.

    Every attempt for a chunk writes to the same key with overwrite
    semantics, so retries leave exactly one object behind.
    """

    def __init__(
        self,
        storage: ObjectStorage,
        source: VideoSource,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_base: float = DEFAULT_RETRY_BACKOFF_BASE,
        sleep: Callable[[float], None] = time.sleep,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.storage = storage
        self.source = source
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.sleep = sleep
        self.should_stop = should_stop

    def _backoff(self, retry: int) -> float:
        if self.backoff_base <= 0:
            return 0.0
        return self.backoff_base * (2 ** (retry - 1))

    def upload(self, chunk: Chunk, destination_key: str) -> bool:
        """Upload a chunk, retrying up to ``max_retries`` times.

        Args:
            chunk: Chunk to upload; ``retry_count`` and ``last_error`` are
                updated in place.
            destination_key: Storage key for the chunk.

        Returns:
            True if the chunk is stored, False once retries are exhausted.
        """
        while True:
            try:
                data = self.source.read(chunk.byte_start, chunk.byte_end)
                self.storage.put(
                    destination_key,
                    data,
                    content_type=self.source.mime_type,
                    upsert=True,
                )
                chunk.last_error = ""
                return True
            except AuthenticationError as e:
                chunk.last_error = str(e)
                logger.error("Chunk %d: %s (not retrying)", chunk.index, e)
                return False
            except Exception as e:
                chunk.last_error = str(e) or type(e).__name__
                if chunk.retry_count >= self.max_retries:
                    logger.error(
                        "Chunk %d failed after %d attempts: %s",
                        chunk.index,
                        chunk.retry_count + 1,
                        chunk.last_error,
                    )
                    return False
                if self.should_stop is not None and self.should_stop():
                    logger.debug("Chunk %d: stop requested, not retrying", chunk.index)
                    return False

                chunk.retry_count += 1
                delay = self._backoff(chunk.retry_count)
                logger.warning(
                    "Chunk %d: %s on attempt %d/%d, retrying in %.1fs",
                    chunk.index,
                    chunk.last_error,
                    chunk.retry_count,
                    self.max_retries + 1,
                    delay,
                )
                if delay:
                    self.sleep(delay)
