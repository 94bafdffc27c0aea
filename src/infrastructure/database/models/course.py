# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Courses and student enrollments."""

from datetime import date
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from src.utils.datetime import utc_today

if TYPE_CHECKING:
    from src.infrastructure.database.models.branch import Branch
    from src.infrastructure.database.models.student import Student
    from src.infrastructure.database.models.teacher import Teacher

ENROLLMENT_STATUSES = ("enrolled", "dropped", "completed")


class Course(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A course offered by a branch. Deleting a course only clears ``is_active``."""

    __tablename__ = "courses"

    branch_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("branches.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    teacher_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False), ForeignKey("teachers.id", ondelete="SET NULL"), index=True
    )
    course_code: Mapped[str] = mapped_column(String(50), nullable=False)
    course_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    max_students: Mapped[int] = mapped_column(Integer, nullable=False, default=40)
    room_number: Mapped[str | None] = mapped_column(String(50))
    building: Mapped[str | None] = mapped_column(String(100))
    schedule: Mapped[dict[str, Any] | None] = mapped_column(JSONB)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    branch: Mapped["Branch"] = relationship(back_populates="courses")
    teacher: Mapped[Optional["Teacher"]] = relationship(back_populates="courses")
    enrollments: Mapped[list["Enrollment"]] = relationship(back_populates="course")

    @property
    def enrolled_count(self) -> int:
        return sum(1 for enrollment in self.enrollments if enrollment.status == "enrolled")


class Enrollment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
    )

    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    enrollment_date: Mapped[date] = mapped_column(Date, nullable=False, default=utc_today)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="enrolled")

    student: Mapped["Student"] = relationship(back_populates="enrollments")
    course: Mapped[Course] = relationship(back_populates="enrollments")
