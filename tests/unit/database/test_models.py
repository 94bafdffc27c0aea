# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for database models.

Tests table registration, constraints and model helper properties.
"""

from decimal import Decimal

from src.infrastructure.database.models import (
    SUPER_ADMIN_ROLE,
    Base,
    Course,
    Enrollment,
    Grade,
    Role,
    Student,
    User,
)


class TestMetadata:
    """Test table registration on the shared metadata."""

    def test_all_tables_registered(self) -> None:
        expected = {
            "branches",
            "roles",
            "users",
            "permissions",
            "rbac_roles",
            "rbac_role_permissions",
            "user_roles",
            "students",
            "teachers",
            "courses",
            "enrollments",
            "attendance",
            "grades",
            "announcements",
            "direct_messages",
            "reports",
        }

        assert expected <= set(Base.metadata.tables)

    def test_enrollment_unique_per_student_and_course(self) -> None:
        names = {c.name for c in Base.metadata.tables["enrollments"].constraints}

        assert "uq_enrollments_student_course" in names

    def test_attendance_unique_per_day(self) -> None:
        names = {c.name for c in Base.metadata.tables["attendance"].constraints}

        assert "uq_attendance_student_course_date" in names

    def test_primary_keys_use_naming_convention(self) -> None:
        assert Base.metadata.tables["students"].primary_key.name == "pk_students"


class TestUser:
    """Test user role helpers."""

    def test_super_admin(self) -> None:
        user = User(username="root", role=Role(name=SUPER_ADMIN_ROLE))

        assert user.role_name == SUPER_ADMIN_ROLE
        assert user.is_super_admin is True

    def test_without_role(self) -> None:
        user = User(username="guest")

        assert user.role_name is None
        assert user.is_super_admin is False
        assert repr(user) == "<User guest>"


class TestCourse:
    """Test course helpers."""

    def test_enrolled_count_ignores_dropped(self) -> None:
        course = Course(
            course_name="Algebra",
            enrollments=[
                Enrollment(status="enrolled"),
                Enrollment(status="dropped"),
                Enrollment(status="enrolled"),
                Enrollment(status="completed"),
            ],
        )

        assert course.enrolled_count == 2


class TestStudentAndGrade:
    """Test student and grade properties."""

    def test_full_name(self) -> None:
        assert Student(first_name="Ada", last_name="Lovelace").full_name == "Ada Lovelace"

    def test_grade_percentage(self) -> None:
        grade = Grade(score=Decimal("42.5"), max_score=Decimal("50"))

        assert grade.percentage == 85.0

    def test_grade_percentage_without_max(self) -> None:
        grade = Grade(score=Decimal("10"), max_score=Decimal("0"))

        assert grade.percentage is None
