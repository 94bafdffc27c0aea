# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course API endpoints.

This module provides endpoints for courses and enrollment:
- GET / - List active courses of the caller's branch
- GET /{course_id} - Get course details with teacher and enrollment count
- POST / - Create a course
- PUT /{course_id} - Update course
- DELETE /{course_id} - Deactivate course
- GET /{course_id}/enrollments - All enrollments
- GET /{course_id}/students - Currently enrolled students
- POST /{course_id}/enroll - Enroll a student (capacity enforced)
- POST /{course_id}/drop - Drop a student

Example:
    POST /api/v1/courses/{course_id}/enroll
    {"student_id": "2f1c..."}
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_auth
from src.api.middleware.auth import CurrentUser
from src.api.responses import envelope_response
from src.domains.course import CourseService
from src.models.common import Envelope
from src.models.course import CourseDetail, CourseEnrollment, CourseResponse, EnrollmentResponse
from src.models.student import StudentResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_course_service(db: AsyncSession, current_user: CurrentUser) -> CourseService:
    return CourseService(db, actor_id=current_user.id)


@router.get("", response_model=Envelope[list[CourseResponse]], summary="List courses")
async def list_courses(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    search: str | None = Query(None, description="Search course name or code"),
    branch_id: str | None = Query(None, description="Branch filter (SuperAdmin only)"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_course_service(db, current_user)
    result = await service.list(
        page=page,
        limit=limit,
        search=search,
        branch_id=current_user.scope_branch(branch_id),
    )
    return envelope_response(result)


@router.get("/{course_id}", response_model=Envelope[CourseDetail], summary="Get course")
async def get_course(
    course_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_course_service(db, current_user)
    return envelope_response(await service.get(course_id))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[CourseResponse],
    summary="Create course",
)
async def create_course(
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    logger.info("Creating course: code=%s, by=%s", payload.get("course_code"), current_user.id)

    service = _get_course_service(db, current_user)
    return envelope_response(await service.create(payload), status.HTTP_201_CREATED)


@router.put("/{course_id}", response_model=Envelope[CourseResponse], summary="Update course")
async def update_course(
    course_id: str,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_course_service(db, current_user)
    return envelope_response(await service.update(course_id, payload))


@router.delete("/{course_id}", response_model=Envelope, summary="Deactivate course")
async def delete_course(
    course_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_course_service(db, current_user)
    return envelope_response(await service.delete(course_id))


@router.get(
    "/{course_id}/enrollments",
    response_model=Envelope[list[CourseEnrollment]],
    summary="Course enrollments",
)
async def get_course_enrollments(
    course_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_course_service(db, current_user)
    return envelope_response(await service.enrollments(course_id))


@router.get(
    "/{course_id}/students",
    response_model=Envelope[list[StudentResponse]],
    summary="Enrolled students",
)
async def get_course_students(
    course_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_course_service(db, current_user)
    return envelope_response(await service.students(course_id))


@router.post(
    "/{course_id}/enroll",
    response_model=Envelope[EnrollmentResponse],
    summary="Enroll student",
)
async def enroll_student(
    course_id: str,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Enroll a student in a course.

    A dropped enrollment is reactivated. Fails when the student is
    already enrolled or the course is full.
    """
    service = _get_course_service(db, current_user)
    return envelope_response(await service.enroll(course_id, payload))


@router.post("/{course_id}/drop", response_model=Envelope, summary="Drop student")
async def drop_student(
    course_id: str,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_course_service(db, current_user)
    return envelope_response(await service.drop(course_id, payload))
