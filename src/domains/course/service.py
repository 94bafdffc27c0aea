# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course service for course catalog and enrollments.

This module provides the CourseService that handles:
- Course CRUD over active courses, searchable by name and code
- Soft deletion
- Enrolling and dropping students within course capacity
- Listing a course's enrollments and enrolled students

Example:
    >>> service = CourseService(db_session)
    >>> await service.enroll(course_id, {"student_id": student_id})
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from src.domains.entity.service import (
    ConstraintViolationError,
    EntityService,
    NotFoundError,
)
from src.infrastructure.database.models.branch import Branch
from src.infrastructure.database.models.course import Course, Enrollment
from src.infrastructure.database.models.student import Student
from src.infrastructure.database.models.teacher import Teacher
from src.models.common import Envelope
from src.models.course import (
    CourseCreateRequest,
    CourseDetail,
    CourseEnrollment,
    CourseResponse,
    CourseUpdateRequest,
    EnrollmentResponse,
    EnrollRequest,
)
from src.models.student import StudentResponse
from src.utils.datetime import utc_today

logger = logging.getLogger(__name__)

ALREADY_ENROLLED_MESSAGE = "Student already enrolled in this course"


class CourseService(EntityService[Course]):
    """Service for managing courses and their enrollments."""

    model = Course
    entity_name = "Course"
    search_fields = ("course_name", "course_code")
    create_schema = CourseCreateRequest
    update_schema = CourseUpdateRequest
    response_schema = CourseResponse
    detail_schema = CourseDetail
    soft_delete = True
    active_only = True

    def _detail_options(self) -> tuple:
        return (selectinload(Course.teacher), selectinload(Course.enrollments))

    async def _check_teacher(self, teacher_id: str | None) -> None:
        if teacher_id is not None:
            await self._find(Teacher, teacher_id, "Teacher not found")

    async def _before_create(self, request: CourseCreateRequest) -> None:
        await self._find(Branch, request.branch_id, "Branch not found")
        await self._check_teacher(request.teacher_id)

    async def _before_update(self, entity: Course, changes: dict[str, Any]) -> None:
        await self._check_teacher(changes.get("teacher_id"))

    async def _active_course(self, course_id: Any) -> Course:
        course = await self._load(course_id)
        if not course.is_active:
            raise NotFoundError(self.not_found_message)
        return course

    # =========================================================================
    # Enrollments
    # =========================================================================

    async def _enroll(self, course_id: Any, payload: Any) -> Envelope:
        request = self._validate(EnrollRequest, payload)
        course = await self._active_course(course_id)
        student = await self._find(Student, request.student_id, "Student not found")

        result = await self._db.execute(
            select(Enrollment).where(
                Enrollment.course_id == course.id, Enrollment.student_id == student.id
            )
        )
        enrollment = result.scalar_one_or_none()
        if enrollment is not None and enrollment.status == "enrolled":
            raise ConstraintViolationError(ALREADY_ENROLLED_MESSAGE)

        enrolled = await self._count(
            Enrollment, Enrollment.course_id == course.id, Enrollment.status == "enrolled"
        )
        if enrolled >= course.max_students:
            raise ConstraintViolationError(
                f"Course is full ({course.max_students} students)"
            )

        enrollment_date = request.enrollment_date or utc_today()
        if enrollment is None:
            enrollment = Enrollment(
                student_id=student.id,
                course_id=course.id,
                enrollment_date=enrollment_date,
                status="enrolled",
            )
            self._db.add(enrollment)
        else:
            enrollment.status = "enrolled"
            enrollment.enrollment_date = enrollment_date
        await self._db.commit()
        await self._db.refresh(enrollment)

        logger.info("Student %s enrolled in course %s", student.id, course.id)
        return Envelope.ok(
            data=EnrollmentResponse.model_validate(enrollment),
            message="Student enrolled successfully",
        )

    async def _drop(self, course_id: Any, payload: Any) -> Envelope:
        request = self._validate(EnrollRequest, payload)
        course = await self._load(course_id)
        result = await self._db.execute(
            select(Enrollment).where(
                Enrollment.course_id == course.id,
                Enrollment.student_id == request.student_id,
                Enrollment.status == "enrolled",
            )
        )
        enrollment = result.scalar_one_or_none()
        if enrollment is None:
            raise NotFoundError("Enrollment not found")

        enrollment.status = "dropped"
        await self._db.commit()

        logger.info("Student %s dropped from course %s", request.student_id, course.id)
        return Envelope.ok(message="Student dropped from course")

    async def _enrollments(self, course_id: Any) -> Envelope:
        course = await self._load(course_id)
        stmt = (
            select(Enrollment)
            .where(Enrollment.course_id == course.id)
            .options(selectinload(Enrollment.student))
            .order_by(Enrollment.enrollment_date.desc(), Enrollment.created_at.desc())
        )
        return Envelope.ok(data=await self._all(stmt, CourseEnrollment.model_validate))

    async def _students(self, course_id: Any) -> Envelope:
        course = await self._load(course_id)
        stmt = (
            select(Student)
            .join(Enrollment, Enrollment.student_id == Student.id)
            .where(Enrollment.course_id == course.id, Enrollment.status == "enrolled")
            .order_by(Student.last_name, Student.first_name)
        )
        return Envelope.ok(data=await self._all(stmt, StudentResponse.model_validate))

    async def enroll(self, course_id: str | UUID, payload: Any) -> Envelope:
        """Enroll a student, re-activating a dropped enrollment if one exists."""
        return await self._guard("enroll", lambda: self._enroll(course_id, payload))

    async def drop(self, course_id: str | UUID, payload: Any) -> Envelope:
        return await self._guard("drop", lambda: self._drop(course_id, payload))

    async def enrollments(self, course_id: str | UUID) -> Envelope:
        return await self._guard("enrollments", lambda: self._enrollments(course_id))

    async def students(self, course_id: str | UUID) -> Envelope:
        """List students currently enrolled in the course."""
        return await self._guard("students", lambda: self._students(course_id))
