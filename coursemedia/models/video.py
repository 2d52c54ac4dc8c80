"""Model for rows of the ``videos`` table."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from coursemedia.models.base import BaseModel


class VideoRecord(BaseModel):
    """Durable record of a completed upload.

    ``metadata`` carries ``chunked`` and, for chunked uploads, the manifest
    fields ``sessionId``, ``totalChunks``, ``totalSize`` and ``chunkSize``.
    """

    id: int | None = Field(None, description="Row ID assigned by the database")
    course_id: int = Field(..., description="Owning course")
    title: str = Field(..., description="Display title")
    description: str | None = None
    file_url: str = Field(..., description="Public URL of the object (first part if chunked)")
    file_path: str = Field(..., description="Storage key, or chunk prefix if chunked")
    file_size: int = Field(..., ge=0)
    mime_type: str | None = None
    duration: int = Field(0, ge=0, description="Length in seconds, 0 if unknown")
    order_index: int = 999
    status: str = "active"
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None

    @property
    def is_chunked(self) -> bool:
        return bool(self.metadata.get("chunked"))

    @property
    def total_chunks(self) -> int:
        return int(self.metadata.get("totalChunks", 0)) if self.is_chunked else 1

    def to_insert_payload(self) -> dict[str, Any]:
        """Row payload for insertion (server-assigned columns omitted)."""
        return self.model_dump(exclude={"id", "created_at"}, exclude_none=True)
