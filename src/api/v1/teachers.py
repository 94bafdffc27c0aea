# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher API endpoints.

This module provides endpoints for teacher records:
- GET / - List active teachers of the caller's branch
- GET /{teacher_id} - Get teacher details
- POST / - Create a teacher (optionally with a login account)
- PUT /{teacher_id} - Update teacher
- DELETE /{teacher_id} - Deactivate teacher
- GET /{teacher_id}/courses - Active courses taught
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_auth
from src.api.middleware.auth import CurrentUser
from src.api.responses import envelope_response
from src.domains.teacher import TeacherService
from src.models.common import Envelope
from src.models.course import CourseResponse
from src.models.teacher import TeacherDetail, TeacherResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_teacher_service(db: AsyncSession, current_user: CurrentUser) -> TeacherService:
    return TeacherService(db, actor_id=current_user.id)


@router.get("", response_model=Envelope[list[TeacherResponse]], summary="List teachers")
async def list_teachers(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    search: str | None = Query(None, description="Search names, email or employee code"),
    branch_id: str | None = Query(None, description="Branch filter (SuperAdmin only)"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_teacher_service(db, current_user)
    result = await service.list(
        page=page,
        limit=limit,
        search=search,
        branch_id=current_user.scope_branch(branch_id),
    )
    return envelope_response(result)


@router.get("/{teacher_id}", response_model=Envelope[TeacherDetail], summary="Get teacher")
async def get_teacher(
    teacher_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_teacher_service(db, current_user)
    return envelope_response(await service.get(teacher_id))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[TeacherResponse],
    summary="Create teacher",
)
async def create_teacher(
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Create a teacher.

    The employee code is generated from the branch code when omitted.
    With ``username`` and ``password`` a Teacher login is created and the
    RBAC Teacher role assigned.
    """
    logger.info("Creating teacher in branch %s, by=%s", payload.get("branch_id"), current_user.id)

    service = _get_teacher_service(db, current_user)
    return envelope_response(await service.create(payload), status.HTTP_201_CREATED)


@router.put("/{teacher_id}", response_model=Envelope[TeacherResponse], summary="Update teacher")
async def update_teacher(
    teacher_id: str,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_teacher_service(db, current_user)
    return envelope_response(await service.update(teacher_id, payload))


@router.delete("/{teacher_id}", response_model=Envelope, summary="Deactivate teacher")
async def delete_teacher(
    teacher_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_teacher_service(db, current_user)
    return envelope_response(await service.delete(teacher_id))


@router.get(
    "/{teacher_id}/courses",
    response_model=Envelope[list[CourseResponse]],
    summary="Teacher courses",
)
async def get_teacher_courses(
    teacher_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_teacher_service(db, current_user)
    return envelope_response(await service.courses(teacher_id))
