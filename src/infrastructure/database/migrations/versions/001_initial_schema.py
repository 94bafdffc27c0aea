# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-01-15

Creates branches, accounts, RBAC, academic records, messaging and
reporting tables as defined in src/infrastructure/database/models/.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=False),
        server_default=sa.text("gen_random_uuid()"),
        primary_key=True,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def _fk(name: str, target: str, ondelete: str, nullable: bool = True) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=False),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    """Create all tables."""
    # ==========================================================================
    # 1. branches
    # ==========================================================================
    op.create_table(
        "branches",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("principal_name", sa.String(255), nullable=True),
        sa.Column("principal_email", sa.String(255), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="UTC"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_branches_code", "branches", ["code"])

    # ==========================================================================
    # 2. roles (legacy, one per user) and users
    # ==========================================================================
    op.create_table(
        "roles",
        _id(),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("is_system", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "users",
        _id(),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        _fk("branch_id", "branches.id", "RESTRICT"),
        _fk("role_id", "roles.id", "SET NULL"),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"])
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_branch_id", "users", ["branch_id"])

    # ==========================================================================
    # 3. RBAC
    # ==========================================================================
    op.create_table(
        "permissions",
        _id(),
        sa.Column("permission_name", sa.String(100), nullable=False, unique=True),
        sa.Column("resource", sa.String(50), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_permissions_resource", "permissions", ["resource"])

    op.create_table(
        "rbac_roles",
        _id(),
        _fk("branch_id", "branches.id", "CASCADE"),
        sa.Column("role_name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_system", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_rbac_roles_branch_id", "rbac_roles", ["branch_id"])

    op.create_table(
        "rbac_role_permissions",
        sa.Column(
            "rbac_role_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("rbac_roles.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "permission_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("permissions.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "user_roles",
        _id(),
        _fk("user_id", "users.id", "CASCADE", nullable=False),
        _fk("rbac_role_id", "rbac_roles.id", "CASCADE", nullable=False),
        _fk("branch_id", "branches.id", "CASCADE"),
        _fk("assigned_by", "users.id", "SET NULL"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "rbac_role_id", name="uq_user_roles_user_role"),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"])

    # ==========================================================================
    # 4. students and teachers
    # ==========================================================================
    op.create_table(
        "students",
        _id(),
        _fk("branch_id", "branches.id", "RESTRICT", nullable=False),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            unique=True,
            nullable=True,
        ),
        sa.Column("student_code", sa.String(50), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("date_of_birth", sa.Date, nullable=False),
        sa.Column("admission_date", sa.Date, nullable=False),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("blood_group", sa.String(5), nullable=True),
        sa.Column("nationality", sa.String(100), nullable=True),
        sa.Column("national_id", sa.String(50), nullable=True),
        sa.Column("passport_number", sa.String(50), nullable=True),
        sa.Column("permanent_address", sa.Text, nullable=True),
        sa.Column("current_address", sa.Text, nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("personal_phone", sa.String(50), nullable=True),
        sa.Column("personal_email", sa.String(255), nullable=True),
        sa.Column("admission_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint(
            "admission_status IN ('pending', 'admitted', 'rejected', 'withdrawn', 'graduated')",
            name="valid_admission_status",
        ),
    )
    op.create_index("ix_students_branch_id", "students", ["branch_id"])

    op.create_table(
        "teachers",
        _id(),
        _fk("branch_id", "branches.id", "RESTRICT", nullable=False),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            unique=True,
            nullable=True,
        ),
        sa.Column("employee_code", sa.String(50), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("date_of_birth", sa.Date, nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("nationality", sa.String(100), nullable=True),
        sa.Column("hire_date", sa.Date, nullable=False),
        sa.Column("employment_type", sa.String(20), nullable=False, server_default="full_time"),
        sa.Column("designation", sa.String(100), nullable=True),
        sa.Column("qualification", sa.Text, nullable=True),
        sa.Column("years_experience", sa.Integer, nullable=True),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("total_leaves", sa.Integer, nullable=False, server_default="24"),
        sa.Column("used_leaves", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_teachers_branch_id", "teachers", ["branch_id"])

    # ==========================================================================
    # 5. courses and enrollments
    # ==========================================================================
    op.create_table(
        "courses",
        _id(),
        _fk("branch_id", "branches.id", "RESTRICT", nullable=False),
        _fk("teacher_id", "teachers.id", "SET NULL"),
        sa.Column("course_code", sa.String(50), nullable=False),
        sa.Column("course_name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("max_students", sa.Integer, nullable=False, server_default="40"),
        sa.Column("room_number", sa.String(50), nullable=True),
        sa.Column("building", sa.String(100), nullable=True),
        sa.Column("schedule", postgresql.JSONB, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_courses_branch_id", "courses", ["branch_id"])
    op.create_index("ix_courses_teacher_id", "courses", ["teacher_id"])

    op.create_table(
        "enrollments",
        _id(),
        _fk("student_id", "students.id", "CASCADE", nullable=False),
        _fk("course_id", "courses.id", "CASCADE", nullable=False),
        sa.Column(
            "enrollment_date", sa.Date, nullable=False, server_default=sa.text("CURRENT_DATE")
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="enrolled"),
        *_timestamps(),
        sa.UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
        sa.CheckConstraint(
            "status IN ('enrolled', 'dropped', 'completed')",
            name="valid_enrollment_status",
        ),
    )
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])

    # ==========================================================================
    # 6. attendance and grades
    # ==========================================================================
    op.create_table(
        "attendance",
        _id(),
        _fk("student_id", "students.id", "CASCADE", nullable=False),
        _fk("course_id", "courses.id", "CASCADE", nullable=False),
        sa.Column("attendance_date", sa.Date, nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("remarks", sa.Text, nullable=True),
        _fk("recorded_by", "users.id", "SET NULL"),
        *_timestamps(),
        sa.UniqueConstraint(
            "student_id",
            "course_id",
            "attendance_date",
            name="uq_attendance_student_course_date",
        ),
        sa.CheckConstraint(
            "status IN ('present', 'absent', 'late', 'excused')",
            name="valid_attendance_status",
        ),
    )
    op.create_index("ix_attendance_student_id", "attendance", ["student_id"])
    op.create_index("ix_attendance_course_id", "attendance", ["course_id"])
    op.create_index("ix_attendance_attendance_date", "attendance", ["attendance_date"])

    op.create_table(
        "grades",
        _id(),
        _fk("student_id", "students.id", "CASCADE", nullable=False),
        _fk("course_id", "courses.id", "CASCADE", nullable=False),
        sa.Column("assessment_type", sa.String(50), nullable=False),
        sa.Column("assessment_name", sa.String(255), nullable=True),
        sa.Column("score", sa.Numeric(6, 2), nullable=False),
        sa.Column("max_score", sa.Numeric(6, 2), nullable=False, server_default="100"),
        sa.Column("weight", sa.Numeric(5, 2), nullable=True),
        sa.Column("remarks", sa.Text, nullable=True),
        _fk("graded_by", "teachers.id", "SET NULL"),
        sa.Column("grade_date", sa.Date, nullable=False, server_default=sa.text("CURRENT_DATE")),
        *_timestamps(),
        sa.CheckConstraint("score >= 0 AND score <= max_score", name="valid_grade_score"),
    )
    op.create_index("ix_grades_student_id", "grades", ["student_id"])
    op.create_index("ix_grades_course_id", "grades", ["course_id"])

    # ==========================================================================
    # 7. announcements and direct messages
    # ==========================================================================
    op.create_table(
        "announcements",
        _id(),
        _fk("course_id", "courses.id", "CASCADE", nullable=False),
        _fk("created_by", "users.id", "SET NULL"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("priority", sa.String(10), nullable=False, server_default="normal"),
        sa.Column("announcement_type", sa.String(20), nullable=False, server_default="general"),
        sa.Column("attachment_url", sa.String(500), nullable=True),
        sa.Column("scheduled_for", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_announcements_course_id", "announcements", ["course_id"])

    op.create_table(
        "direct_messages",
        _id(),
        _fk("sender_id", "users.id", "CASCADE", nullable=False),
        _fk("recipient_id", "users.id", "CASCADE", nullable=False),
        sa.Column("subject", sa.String(255), nullable=True),
        sa.Column("message_body", sa.Text, nullable=False),
        sa.Column("attachment_url", sa.String(500), nullable=True),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_direct_messages_sender_id", "direct_messages", ["sender_id"])
    op.create_index("ix_direct_messages_recipient_id", "direct_messages", ["recipient_id"])

    # ==========================================================================
    # 8. reports
    # ==========================================================================
    op.create_table(
        "reports",
        _id(),
        _fk("branch_id", "branches.id", "CASCADE", nullable=False),
        sa.Column("report_type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        _fk("generated_by", "users.id", "SET NULL"),
        sa.Column("report_format", sa.String(10), nullable=False, server_default="pdf"),
        sa.Column("status", sa.String(20), nullable=False, server_default="completed"),
        sa.Column("date_range_start", sa.Date, nullable=True),
        sa.Column("date_range_end", sa.Date, nullable=True),
        sa.Column("summary", postgresql.JSONB, nullable=False, server_default="{}"),
        sa.Column(
            "generated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        *_timestamps(),
    )
    op.create_index("ix_reports_branch_id", "reports", ["branch_id"])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    for table in (
        "reports",
        "direct_messages",
        "announcements",
        "grades",
        "attendance",
        "enrollments",
        "courses",
        "teachers",
        "students",
        "user_roles",
        "rbac_role_permissions",
        "rbac_roles",
        "permissions",
        "users",
        "roles",
        "branches",
    ):
        op.drop_table(table)
