# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Announcement service for course announcements.

Announcements always belong to one course. Lists can be narrowed by
priority and announcement type.
"""

import logging
from typing import Any
from uuid import UUID

from src.domains.entity.service import EntityService
from src.infrastructure.database.models.announcement import Announcement
from src.infrastructure.database.models.course import Course
from src.models.announcement import (
    AnnouncementCreateRequest,
    AnnouncementResponse,
    AnnouncementUpdateRequest,
)
from src.models.common import Envelope

logger = logging.getLogger(__name__)


class AnnouncementService(EntityService[Announcement]):
    """Service for course announcements. Deletion is physical."""

    model = Announcement
    entity_name = "Announcement"
    search_fields = ("title", "content")
    create_schema = AnnouncementCreateRequest
    update_schema = AnnouncementUpdateRequest
    response_schema = AnnouncementResponse

    async def _post(self, course_id: Any, created_by: str | None, payload: Any) -> Envelope:
        request = self._validate(AnnouncementCreateRequest, payload)
        course = await self._find(Course, course_id, "Course not found")

        announcement = Announcement(
            **request.model_dump(), course_id=course.id, created_by=created_by
        )
        self._db.add(announcement)
        await self._db.commit()
        await self._db.refresh(announcement)

        logger.info("Announcement %s posted to course %s", announcement.id, course.id)
        return Envelope.ok(
            data=AnnouncementResponse.model_validate(announcement),
            message="Announcement created successfully",
        )

    async def create(  # type: ignore[override]
        self,
        course_id: str | UUID,
        created_by: str | None,
        payload: Any,
    ) -> Envelope:
        """Post an announcement to a course."""
        return await self._guard("create", lambda: self._post(course_id, created_by, payload))

    async def list(  # type: ignore[override]
        self,
        course_id: str | UUID,
        page: Any = 1,
        limit: Any = None,
        priority: str | None = None,
        announcement_type: str | None = None,
        search: str | None = None,
    ) -> Envelope:
        """Return one page of a course's announcements, newest first."""

        async def run() -> Envelope:
            key = self._coerce_id(course_id, "Course not found")
            filters = {
                "course_id": key,
                "priority": priority,
                "announcement_type": announcement_type,
            }
            return await self._list(page, limit, search, filters)

        return await self._guard("list", run)
