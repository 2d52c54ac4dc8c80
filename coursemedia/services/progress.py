"""Playback progress persistence service."""

from __future__ import annotations

import logging
from typing import Any

from coursemedia.models.playback import ProgressReport

from .base import BaseService

logger = logging.getLogger(__name__)

SAVE_PROGRESS_PATH = "/api/videos/save-progress"


class ProgressService(BaseService):
    """Writes viewer progress to the LMS web app.

    The client must point at the app (``Profile.api_base_url``), not at the
    storage/database backend.
    """

    def update(self, video_id: int | str, report: ProgressReport) -> Any:
        """Post one full-state progress report.

        Single attempt: a later report carries the complete state and
        supersedes a lost one.

        Args:
            video_id: Video the report belongs to.
            report: Progress report to persist.

        Without ``report.log_id`` the endpoint creates a new view-log row
        for the report's user and course.

        Returns:
            Parsed response body, including the ``log_id`` of the row written.
        """
        payload = report.to_payload()
        payload["video_id"] = video_id
        logger.debug(
            "Saving progress for video %s: %s%% (%s)",
            video_id,
            report.progress_percent,
            report.reason,
        )
        return self._post(SAVE_PROGRESS_PATH, json=payload, retry=False)
