"""Object storage service (Supabase-style storage REST API)."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Optional
from urllib.parse import quote

import httpx

from coursemedia.core.exceptions import StorageError
from coursemedia.core.timeouts import DEFAULT_STORAGE_TIMEOUT_SECONDS
from coursemedia.uploaders.constants import DEFAULT_BUCKET

from .base import BaseService

if TYPE_CHECKING:
    from coursemedia.core.client import BackendClient

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "/storage/v1"
DEFAULT_SIGNED_URL_EXPIRY = 3600
DEFAULT_CACHE_CONTROL = "3600"


def _quote_key(key: str) -> str:
    return quote(key, safe="/")


class StorageService(BaseService):
    """Reads and writes objects in one storage bucket."""

    def __init__(
        self,
        client: "BackendClient",
        bucket: str = DEFAULT_BUCKET,
        *,
        timeout: int = DEFAULT_STORAGE_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(client)
        self.bucket = bucket
        self.timeout = timeout

    def _object_path(self, *parts: str) -> str:
        return self._build_path(STORAGE_PREFIX, "object", *parts)

    def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: Optional[str] = None,
        upsert: bool = True,
        timeout: Optional[int] = None,
    ) -> None:
        """Write one object.

        Makes a single attempt; callers that want retries (the chunk
        worker) own them.

        Args:
            key: Object key within the bucket.
            data: Object bytes.
            content_type: MIME type stored with the object.
            upsert: Overwrite an existing object with the same key.
            timeout: Per-request timeout override in seconds.

        Raises:
            StorageError: If storage rejects the write.
        """
        headers = {
            "content-type": content_type or "application/octet-stream",
            "cache-control": DEFAULT_CACHE_CONTROL,
            "x-upsert": "true" if upsert else "false",
        }
        path = self._object_path(self.bucket, _quote_key(key))
        try:
            self.client.post(
                path,
                content=data,
                headers=headers,
                timeout=timeout or self.timeout,
                retry=False,
            )
        except httpx.HTTPStatusError as e:
            raise StorageError(
                f"Upload rejected: {e.response.text or e}",
                key=key,
                status_code=e.response.status_code,
            ) from e
        logger.debug("Stored %s (%d bytes)", key, len(data))

    def delete(self, keys: Sequence[str]) -> None:
        """Delete objects by key.

        Raises:
            StorageError: If storage rejects the delete.
        """
        if not keys:
            return
        try:
            self._delete(
                self._object_path(self.bucket),
                json={"prefixes": list(keys)},
            )
        except httpx.HTTPStatusError as e:
            raise StorageError(
                f"Delete rejected: {e.response.text or e}",
                status_code=e.response.status_code,
            ) from e
        logger.debug("Deleted %d objects from %s", len(keys), self.bucket)

    def get_public_url(self, key: str) -> str:
        """Public URL of an object. No request is made."""
        path = self._object_path("public", self.bucket, _quote_key(key))
        return f"{self.client.base_url}{path}"

    def create_signed_url(self, key: str, expires_in: int = DEFAULT_SIGNED_URL_EXPIRY) -> str:
        """Create a time-limited URL for an object.

        Args:
            key: Object key within the bucket.
            expires_in: Lifetime of the URL in seconds.

        Returns:
            Absolute signed URL.

        Raises:
            StorageError: If storage does not return a signed URL.
        """
        path = self._object_path("sign", self.bucket, _quote_key(key))
        try:
            data = self._post(path, json={"expiresIn": expires_in})
        except httpx.HTTPStatusError as e:
            raise StorageError(
                f"Signing rejected: {e.response.text or e}",
                key=key,
                status_code=e.response.status_code,
            ) from e

        signed = None
        if isinstance(data, dict):
            signed = data.get("signedURL") or data.get("signedUrl")
        if not signed:
            raise StorageError("Storage returned no signed URL", key=key)
        if signed.startswith("http"):
            return signed
        return f"{self.client.base_url}{STORAGE_PREFIX}/{signed.lstrip('/')}"
