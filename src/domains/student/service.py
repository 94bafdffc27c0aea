# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student service for admissions and student records.

This module provides the StudentService that handles:
- Student CRUD with search over names, contact details and codes
- Optional login account creation with the Student role
- Soft deletion (``is_active`` is cleared, history is kept)
- Per-student enrollments, grades and attendance

Example:
    >>> service = StudentService(db_session)
    >>> result = await service.create({
    ...     "first_name": "Ada", "last_name": "Lovelace",
    ...     "branch_id": branch_id, "student_code": "STU-001",
    ...     "date_of_birth": "2010-12-10", "admission_date": "2024-09-01",
    ...     "username": "ada", "password": "s3cret",
    ... })
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.domains.auth.password import PasswordHasher
from src.domains.entity.service import ConstraintViolationError, EntityService
from src.domains.user.service import provision_account
from src.infrastructure.database.models.attendance import Attendance
from src.infrastructure.database.models.branch import Branch
from src.infrastructure.database.models.course import Enrollment
from src.infrastructure.database.models.grade import Grade
from src.infrastructure.database.models.student import Student
from src.models.attendance import AttendanceRecord
from src.models.common import Envelope
from src.models.course import StudentEnrollment
from src.models.grade import GradeRecord
from src.models.student import (
    StudentCreateRequest,
    StudentDetail,
    StudentResponse,
    StudentUpdateRequest,
)

logger = logging.getLogger(__name__)

STUDENT_ROLE = "Student"
DUPLICATE_CODE_MESSAGE = "Student code already exists"


class StudentService(EntityService[Student]):
    """Service for managing students. Deletion only clears ``is_active``."""

    model = Student
    entity_name = "Student"
    search_fields = (
        "first_name",
        "last_name",
        "personal_email",
        "personal_phone",
        "student_code",
        "national_id",
    )
    create_schema = StudentCreateRequest
    update_schema = StudentUpdateRequest
    response_schema = StudentResponse
    detail_schema = StudentDetail
    soft_delete = True

    def __init__(
        self,
        db: AsyncSession,
        timeout: float | None = None,
        actor_id: str | None = None,
        password_hasher: PasswordHasher | None = None,
    ) -> None:
        super().__init__(db, timeout=timeout, actor_id=actor_id)
        self._hasher = password_hasher or PasswordHasher()

    def _detail_options(self) -> tuple:
        return (selectinload(Student.branch), selectinload(Student.user))

    async def _before_create(self, request: StudentCreateRequest) -> None:
        if await self._exists(Student, Student.student_code == request.student_code):
            raise ConstraintViolationError(DUPLICATE_CODE_MESSAGE)
        await self._find(Branch, request.branch_id, "Branch not found")

    async def _build(self, request: StudentCreateRequest) -> Student:
        user_id = request.user_id
        if request.username and request.password:
            user = await provision_account(
                self._db,
                self._hasher,
                role_name=STUDENT_ROLE,
                username=request.username,
                password=request.password,
                email=request.personal_email,
                first_name=request.first_name,
                last_name=request.last_name,
                phone=request.personal_phone,
                branch_id=request.branch_id,
            )
            user_id = user.id

        fields = request.model_dump(exclude={"user_id", "username", "password"})
        return Student(**fields, user_id=user_id)

    async def _before_update(self, entity: Student, changes: dict[str, Any]) -> None:
        code = changes.get("student_code")
        if code and code != entity.student_code:
            taken = await self._exists(
                Student, Student.student_code == code, Student.id != entity.id
            )
            if taken:
                raise ConstraintViolationError(DUPLICATE_CODE_MESSAGE)

    # =========================================================================
    # Per-student records
    # =========================================================================

    async def _enrollments(self, student_id: Any) -> Envelope:
        student = await self._load(student_id)
        stmt = (
            select(Enrollment)
            .where(Enrollment.student_id == student.id)
            .options(selectinload(Enrollment.course))
            .order_by(Enrollment.enrollment_date.desc(), Enrollment.created_at.desc())
        )
        return Envelope.ok(data=await self._all(stmt, StudentEnrollment.model_validate))

    async def _grades(self, student_id: Any) -> Envelope:
        student = await self._load(student_id)
        stmt = (
            select(Grade)
            .where(Grade.student_id == student.id)
            .options(selectinload(Grade.student), selectinload(Grade.course))
            .order_by(Grade.grade_date.desc(), Grade.created_at.desc())
        )
        return Envelope.ok(data=await self._all(stmt, GradeRecord.model_validate))

    async def _attendance(self, student_id: Any) -> Envelope:
        student = await self._load(student_id)
        stmt = (
            select(Attendance)
            .where(Attendance.student_id == student.id)
            .options(selectinload(Attendance.student), selectinload(Attendance.course))
            .order_by(Attendance.attendance_date.desc())
        )
        return Envelope.ok(data=await self._all(stmt, AttendanceRecord.model_validate))

    async def enrollments(self, student_id: str | UUID) -> Envelope:
        """List the student's course enrollments, newest first."""
        return await self._guard("enrollments", lambda: self._enrollments(student_id))

    async def grades(self, student_id: str | UUID) -> Envelope:
        """List the student's grades with course names."""
        return await self._guard("grades", lambda: self._grades(student_id))

    async def attendance(self, student_id: str | UUID) -> Envelope:
        """List the student's attendance records, most recent day first."""
        return await self._guard("attendance", lambda: self._attendance(student_id))
