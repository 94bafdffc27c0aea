# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for StudentService."""

from datetime import date, datetime, timezone
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest

from src.domains.auth.password import PasswordHasher
from src.domains.student.service import StudentService
from src.infrastructure.database.models.student import Student
from src.infrastructure.database.models.user import User
from src.models.common import ErrorKind


@pytest.fixture
def service(mock_db: AsyncMock) -> StudentService:
    return StudentService(mock_db, password_hasher=PasswordHasher(rounds=4))


@pytest.fixture
def student_payload(sample_branch_id: str) -> dict[str, Any]:
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "branch_id": sample_branch_id,
        "student_code": "STU-001",
        "date_of_birth": "2010-12-10",
        "admission_date": "2024-09-01",
    }


def make_student(student_id: str, branch_id: str, **overrides: Any) -> SimpleNamespace:
    now = datetime.now(timezone.utc)
    fields = {
        "id": student_id,
        "branch_id": branch_id,
        "user_id": None,
        "student_code": "STU-001",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "date_of_birth": date(2010, 12, 10),
        "admission_date": date(2024, 9, 1),
        "admission_status": "admitted",
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestCreateStudent:
    """Tests for student creation."""

    @pytest.mark.asyncio
    async def test_create_without_account(
        self,
        service: StudentService,
        mock_db: AsyncMock,
        mock_result: Any,
        student_payload: dict[str, Any],
        sample_branch_id: str,
    ) -> None:
        mock_db.execute.side_effect = [
            mock_result(None),
            mock_result(SimpleNamespace(id=sample_branch_id)),
        ]

        result = await service.create(student_payload)

        assert result.success is True
        assert result.message == "Student created successfully"
        assert result.data.student_code == "STU-001"
        assert result.data.admission_status == "pending"
        assert result.data.user_id is None
        assert result.data.is_active is True
        added = mock_db.add.call_args[0][0]
        assert isinstance(added, Student)

    @pytest.mark.asyncio
    async def test_create_with_account(
        self,
        service: StudentService,
        mock_db: AsyncMock,
        mock_result: Any,
        student_payload: dict[str, Any],
        sample_branch_id: str,
    ) -> None:
        student_role = SimpleNamespace(id="role-student", name="Student")
        mock_db.execute.side_effect = [
            mock_result(None),
            mock_result(SimpleNamespace(id=sample_branch_id)),
            mock_result(None),
            mock_result(None),
            mock_result(student_role),
        ]

        result = await service.create({**student_payload, "username": "ada", "password": "s3cret"})

        assert result.success is True
        added = [call.args[0] for call in mock_db.add.call_args_list]
        user = next(obj for obj in added if isinstance(obj, User))
        assert user.username == "ada"
        assert user.email == "ada@koolhub.edu"
        assert user.role_id == "role-student"
        assert user.password_hash != "s3cret"
        assert result.data.user_id == user.id
        mock_db.flush.assert_awaited_once()
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_account_without_seeded_role(
        self,
        service: StudentService,
        mock_db: AsyncMock,
        mock_result: Any,
        student_payload: dict[str, Any],
        sample_branch_id: str,
    ) -> None:
        mock_db.execute.side_effect = [
            mock_result(None),
            mock_result(SimpleNamespace(id=sample_branch_id)),
            mock_result(None),
            mock_result(None),
            mock_result(None),
        ]

        result = await service.create({**student_payload, "username": "ada", "password": "s3cret"})

        assert result.error_kind == ErrorKind.VALIDATION_ERROR
        assert result.message == "Student role configuration error"
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_with_taken_username(
        self,
        service: StudentService,
        mock_db: AsyncMock,
        mock_result: Any,
        student_payload: dict[str, Any],
        sample_branch_id: str,
    ) -> None:
        mock_db.execute.side_effect = [
            mock_result(None),
            mock_result(SimpleNamespace(id=sample_branch_id)),
            mock_result("existing-user"),
        ]

        result = await service.create({**student_payload, "username": "ada", "password": "s3cret"})

        assert result.error_kind == ErrorKind.CONSTRAINT_VIOLATION
        assert result.message == "Username already exists"

    @pytest.mark.asyncio
    async def test_create_duplicate_student_code(
        self,
        service: StudentService,
        mock_db: AsyncMock,
        mock_result: Any,
        student_payload: dict[str, Any],
    ) -> None:
        mock_db.execute.return_value = mock_result("existing-student")

        result = await service.create(student_payload)

        assert result.error_kind == ErrorKind.CONSTRAINT_VIOLATION
        assert result.message == "Student code already exists"

    @pytest.mark.asyncio
    async def test_create_in_unknown_branch(
        self,
        service: StudentService,
        mock_db: AsyncMock,
        mock_result: Any,
        student_payload: dict[str, Any],
    ) -> None:
        mock_db.execute.side_effect = [mock_result(None), mock_result(None)]

        result = await service.create(student_payload)

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.message == "Branch not found"

    @pytest.mark.asyncio
    async def test_create_missing_fields(self, service: StudentService) -> None:
        result = await service.create({"first_name": "Ada"})

        assert result.error_kind == ErrorKind.VALIDATION_ERROR
        assert result.message.endswith("required")
        assert "last_name" in result.message
        assert "student_code" in result.message


class TestDeleteStudent:
    """Tests for soft deletion."""

    @pytest.mark.asyncio
    async def test_delete_clears_active_flag(
        self,
        service: StudentService,
        mock_db: AsyncMock,
        mock_result: Any,
        sample_student_id: str,
        sample_branch_id: str,
    ) -> None:
        student = make_student(sample_student_id, sample_branch_id)
        mock_db.execute.return_value = mock_result(student)

        result = await service.delete(sample_student_id)

        assert result.success is True
        assert result.message == "Student deleted successfully"
        assert student.is_active is False
        mock_db.delete.assert_not_awaited()
        mock_db.commit.assert_awaited_once()


class TestStudentRecords:
    """Tests for per-student enrollments, grades and attendance."""

    @pytest.mark.asyncio
    async def test_enrollments_for_unknown_student(
        self,
        service: StudentService,
        mock_db: AsyncMock,
        mock_result: Any,
        sample_student_id: str,
    ) -> None:
        mock_db.execute.return_value = mock_result(None)

        result = await service.enrollments(sample_student_id)

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.message == "Student not found"

    @pytest.mark.asyncio
    async def test_enrollments_include_course(
        self,
        service: StudentService,
        mock_db: AsyncMock,
        mock_result: Any,
        sample_student_id: str,
        sample_branch_id: str,
        sample_course_id: str,
    ) -> None:
        enrollment = SimpleNamespace(
            id="enr-1",
            student_id=sample_student_id,
            course_id=sample_course_id,
            enrollment_date=date(2024, 9, 2),
            status="enrolled",
            created_at=datetime.now(timezone.utc),
            course=SimpleNamespace(
                id=sample_course_id, course_code="MATH-101", course_name="Algebra"
            ),
        )
        mock_db.execute.side_effect = [
            mock_result(make_student(sample_student_id, sample_branch_id)),
            mock_result(rows=[enrollment]),
        ]

        result = await service.enrollments(sample_student_id)

        assert result.success is True
        assert len(result.data) == 1
        assert result.data[0].course.course_code == "MATH-101"

    @pytest.mark.asyncio
    async def test_attendance_empty(
        self,
        service: StudentService,
        mock_db: AsyncMock,
        mock_result: Any,
        sample_student_id: str,
        sample_branch_id: str,
    ) -> None:
        mock_db.execute.side_effect = [
            mock_result(make_student(sample_student_id, sample_branch_id)),
            mock_result(rows=[]),
        ]

        result = await service.attendance(sample_student_id)

        assert result.success is True
        assert result.data == []
