# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for CourseService, focused on enrollments."""

from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest

from src.domains.course.service import CourseService
from src.infrastructure.database.models.course import Enrollment
from src.models.common import ErrorKind


@pytest.fixture
def service(mock_db: AsyncMock) -> CourseService:
    return CourseService(mock_db)


@pytest.fixture
def course(sample_course_id: str) -> SimpleNamespace:
    return SimpleNamespace(id=sample_course_id, is_active=True, max_students=2)


@pytest.fixture
def student(sample_student_id: str) -> SimpleNamespace:
    return SimpleNamespace(id=sample_student_id)


class TestCreateCourse:
    """Tests for course creation references."""

    @pytest.mark.asyncio
    async def test_create_with_unknown_teacher(
        self,
        service: CourseService,
        mock_db: AsyncMock,
        mock_result: Any,
        sample_branch_id: str,
        sample_teacher_id: str,
    ) -> None:
        mock_db.execute.side_effect = [
            mock_result(SimpleNamespace(id=sample_branch_id)),
            mock_result(None),
        ]

        result = await service.create(
            {
                "course_code": "MATH-101",
                "course_name": "Algebra",
                "branch_id": sample_branch_id,
                "teacher_id": sample_teacher_id,
            }
        )

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.message == "Teacher not found"

    @pytest.mark.asyncio
    async def test_create_defaults_capacity(
        self,
        service: CourseService,
        mock_db: AsyncMock,
        mock_result: Any,
        sample_branch_id: str,
    ) -> None:
        mock_db.execute.return_value = mock_result(SimpleNamespace(id=sample_branch_id))

        result = await service.create(
            {"course_code": "MATH-101", "course_name": "Algebra", "branch_id": sample_branch_id}
        )

        assert result.success is True
        assert result.data.max_students == 40
        assert result.data.is_active is True

    @pytest.mark.asyncio
    async def test_create_rejects_zero_capacity(
        self, service: CourseService, sample_branch_id: str
    ) -> None:
        result = await service.create(
            {
                "course_code": "MATH-101",
                "course_name": "Algebra",
                "branch_id": sample_branch_id,
                "max_students": 0,
            }
        )

        assert result.error_kind == ErrorKind.VALIDATION_ERROR


class TestEnroll:
    """Tests for enrolling students."""

    @pytest.mark.asyncio
    async def test_enroll_success(
        self,
        service: CourseService,
        mock_db: AsyncMock,
        mock_result: Any,
        course: SimpleNamespace,
        student: SimpleNamespace,
        sample_student_id: str,
    ) -> None:
        mock_db.execute.side_effect = [
            mock_result(course),
            mock_result(student),
            mock_result(None),
            mock_result(1),
        ]

        result = await service.enroll(course.id, {"student_id": sample_student_id})

        assert result.success is True
        assert result.message == "Student enrolled successfully"
        assert result.data.status == "enrolled"
        added = mock_db.add.call_args[0][0]
        assert isinstance(added, Enrollment)
        assert added.student_id == sample_student_id

    @pytest.mark.asyncio
    async def test_enroll_twice(
        self,
        service: CourseService,
        mock_db: AsyncMock,
        mock_result: Any,
        course: SimpleNamespace,
        student: SimpleNamespace,
        sample_student_id: str,
    ) -> None:
        mock_db.execute.side_effect = [
            mock_result(course),
            mock_result(student),
            mock_result(SimpleNamespace(status="enrolled")),
        ]

        result = await service.enroll(course.id, {"student_id": sample_student_id})

        assert result.error_kind == ErrorKind.CONSTRAINT_VIOLATION
        assert result.message == "Student already enrolled in this course"

    @pytest.mark.asyncio
    async def test_enroll_full_course(
        self,
        service: CourseService,
        mock_db: AsyncMock,
        mock_result: Any,
        course: SimpleNamespace,
        student: SimpleNamespace,
        sample_student_id: str,
    ) -> None:
        mock_db.execute.side_effect = [
            mock_result(course),
            mock_result(student),
            mock_result(None),
            mock_result(2),
        ]

        result = await service.enroll(course.id, {"student_id": sample_student_id})

        assert result.error_kind == ErrorKind.CONSTRAINT_VIOLATION
        assert result.message == "Course is full (2 students)"
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_reenroll_dropped_student(
        self,
        service: CourseService,
        mock_db: AsyncMock,
        mock_result: Any,
        course: SimpleNamespace,
        student: SimpleNamespace,
        sample_student_id: str,
    ) -> None:
        enrollment = Enrollment(
            id="550e8400-e29b-41d4-a716-446655440010",
            student_id=sample_student_id,
            course_id=course.id,
            status="dropped",
        )
        mock_db.execute.side_effect = [
            mock_result(course),
            mock_result(student),
            mock_result(enrollment),
            mock_result(0),
        ]

        result = await service.enroll(course.id, {"student_id": sample_student_id})

        assert result.success is True
        assert enrollment.status == "enrolled"
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_enroll_in_inactive_course(
        self,
        service: CourseService,
        mock_db: AsyncMock,
        mock_result: Any,
        course: SimpleNamespace,
        sample_student_id: str,
    ) -> None:
        course.is_active = False
        mock_db.execute.return_value = mock_result(course)

        result = await service.enroll(course.id, {"student_id": sample_student_id})

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.message == "Course not found"

    @pytest.mark.asyncio
    async def test_enroll_requires_student_id(
        self, service: CourseService, course: SimpleNamespace
    ) -> None:
        result = await service.enroll(course.id, {})

        assert result.error_kind == ErrorKind.VALIDATION_ERROR
        assert result.message == "student_id required"


class TestDrop:
    """Tests for dropping students."""

    @pytest.mark.asyncio
    async def test_drop_marks_enrollment_dropped(
        self,
        service: CourseService,
        mock_db: AsyncMock,
        mock_result: Any,
        course: SimpleNamespace,
        sample_student_id: str,
    ) -> None:
        enrollment = SimpleNamespace(status="enrolled")
        mock_db.execute.side_effect = [mock_result(course), mock_result(enrollment)]

        result = await service.drop(course.id, {"student_id": sample_student_id})

        assert result.success is True
        assert result.message == "Student dropped from course"
        assert enrollment.status == "dropped"

    @pytest.mark.asyncio
    async def test_drop_without_enrollment(
        self,
        service: CourseService,
        mock_db: AsyncMock,
        mock_result: Any,
        course: SimpleNamespace,
        sample_student_id: str,
    ) -> None:
        mock_db.execute.side_effect = [mock_result(course), mock_result(None)]

        result = await service.drop(course.id, {"student_id": sample_student_id})

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.message == "Enrollment not found"
