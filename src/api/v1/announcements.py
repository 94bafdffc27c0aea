# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course announcement API endpoints.

This module provides endpoints for announcements:
- GET /course/{course_id} - Announcements of a course, filterable by priority and type
- GET /{announcement_id} - Get one announcement
- POST /course/{course_id} - Post an announcement to a course
- PUT /{announcement_id} - Update announcement
- DELETE /{announcement_id} - Delete announcement
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_auth
from src.api.middleware.auth import CurrentUser
from src.api.responses import envelope_response
from src.domains.announcement import AnnouncementService
from src.models.announcement import AnnouncementResponse
from src.models.common import Envelope

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_announcement_service(
    db: AsyncSession, current_user: CurrentUser
) -> AnnouncementService:
    return AnnouncementService(db, actor_id=current_user.id)


@router.get(
    "/course/{course_id}",
    response_model=Envelope[list[AnnouncementResponse]],
    summary="List course announcements",
)
async def list_course_announcements(
    course_id: str,
    page: str | None = Query(None),
    limit: str | None = Query(None),
    priority: str | None = Query(None),
    announcement_type: str | None = Query(None, alias="type"),
    search: str | None = Query(None, description="Search title or content"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_announcement_service(db, current_user)
    result = await service.list(
        course_id,
        page=page,
        limit=limit,
        priority=priority,
        announcement_type=announcement_type,
        search=search,
    )
    return envelope_response(result)


@router.get(
    "/{announcement_id}",
    response_model=Envelope[AnnouncementResponse],
    summary="Get announcement",
)
async def get_announcement(
    announcement_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_announcement_service(db, current_user)
    return envelope_response(await service.get(announcement_id))


@router.post(
    "/course/{course_id}",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[AnnouncementResponse],
    summary="Post announcement",
)
async def create_announcement(
    course_id: str,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Post an announcement to a course. Title and content are required."""
    service = _get_announcement_service(db, current_user)
    result = await service.create(course_id, current_user.id, payload)
    return envelope_response(result, status.HTTP_201_CREATED)


@router.put(
    "/{announcement_id}",
    response_model=Envelope[AnnouncementResponse],
    summary="Update announcement",
)
async def update_announcement(
    announcement_id: str,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_announcement_service(db, current_user)
    return envelope_response(await service.update(announcement_id, payload))


@router.delete("/{announcement_id}", response_model=Envelope, summary="Delete announcement")
async def delete_announcement(
    announcement_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_announcement_service(db, current_user)
    return envelope_response(await service.delete(announcement_id))
