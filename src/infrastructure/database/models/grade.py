# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assessment grades."""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from src.utils.datetime import utc_today

if TYPE_CHECKING:
    from src.infrastructure.database.models.course import Course
    from src.infrastructure.database.models.student import Student
    from src.infrastructure.database.models.teacher import Teacher


class Grade(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One score for one assessment of one student in one course."""

    __tablename__ = "grades"

    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assessment_type: Mapped[str] = mapped_column(String(50), nullable=False)
    assessment_name: Mapped[str | None] = mapped_column(String(255))
    score: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    max_score: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False, default=100)
    weight: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    remarks: Mapped[str | None] = mapped_column(Text)
    graded_by: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("teachers.id", ondelete="SET NULL"),
    )
    grade_date: Mapped[date] = mapped_column(Date, nullable=False, default=utc_today)

    student: Mapped["Student"] = relationship(back_populates="grades")
    course: Mapped["Course"] = relationship()
    grader: Mapped[Optional["Teacher"]] = relationship()

    @property
    def percentage(self) -> float | None:
        if not self.max_score:
            return None
        return round(float(self.score) / float(self.max_score) * 100, 2)
