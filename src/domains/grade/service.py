# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade service for assessment scores.

This module provides the GradeService that handles:
- Recording single grades and listing a course's grades
- Publishing a whole assessment at once (one row per student, updated
  when the assessment is published again)
- Correcting and deleting grades

Grades record the teacher profile of the acting user in ``graded_by``.

Example:
    >>> service = GradeService(db_session, actor_id=teacher_user.id)
    >>> await service.bulk_upsert({
    ...     "course_id": cid, "assessment_type": "midterm", "total_marks": 50,
    ...     "grades": [{"student_id": sid, "marks_obtained": 42}],
    ... })
"""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from src.domains.entity.service import EntityService, ValidationError
from src.infrastructure.database.models.course import Course
from src.infrastructure.database.models.grade import Grade
from src.infrastructure.database.models.student import Student
from src.infrastructure.database.models.teacher import Teacher
from src.models.common import Envelope
from src.models.grade import (
    BulkGradeRequest,
    GradeRecord,
    GradeResponse,
    GradeUpdateRequest,
    RecordGradeRequest,
)
from src.utils.datetime import utc_today

logger = logging.getLogger(__name__)

NOT_A_TEACHER_MESSAGE = "User must be a teacher to grade."


class GradeService(EntityService[Grade]):
    """Service for grades. Deletion is physical."""

    model = Grade
    entity_name = "Grade"
    search_fields = ("assessment_type", "assessment_name")
    create_schema = RecordGradeRequest
    update_schema = GradeUpdateRequest
    response_schema = GradeResponse
    detail_schema = GradeRecord

    def _detail_options(self) -> tuple:
        return (selectinload(Grade.student), selectinload(Grade.course))

    async def _grader_id(self) -> str | None:
        """Teacher profile id of the acting user, if they have one."""
        if self._actor_id is None:
            return None
        result = await self._db.execute(
            select(Teacher.id).where(Teacher.user_id == self._actor_id)
        )
        return result.scalar_one_or_none()

    async def _before_create(self, request: RecordGradeRequest) -> None:
        await self._find(Student, request.student_id, "Student not found")
        await self._find(Course, request.course_id, "Course not found")

    async def _build(self, request: RecordGradeRequest) -> Grade:
        fields = request.model_dump()
        fields["grade_date"] = request.grade_date or utc_today()
        return Grade(**fields, graded_by=await self._grader_id())

    async def _before_update(self, entity: Grade, changes: dict[str, Any]) -> None:
        score = changes.get("score", entity.score)
        max_score = changes.get("max_score", entity.max_score)
        if Decimal(score) > Decimal(max_score):
            raise ValidationError("score cannot exceed max_score")

    async def _by_course(self, course_id: Any) -> Envelope:
        course = await self._find(Course, course_id, "Course not found")
        stmt = (
            select(Grade)
            .where(Grade.course_id == course.id)
            .options(*self._detail_options())
            .order_by(Grade.created_at.desc())
        )
        return Envelope.ok(data=await self._all(stmt, GradeRecord.model_validate))

    async def _bulk_upsert(self, payload: Any) -> Envelope:
        request = self._validate(BulkGradeRequest, payload)
        course = await self._find(Course, request.course_id, "Course not found")
        grader_id = await self._grader_id()
        if grader_id is None:
            raise ValidationError(NOT_A_TEACHER_MESSAGE)

        today = utc_today()
        for entry in request.grades:
            result = await self._db.execute(
                select(Grade).where(
                    Grade.student_id == entry.student_id,
                    Grade.course_id == course.id,
                    Grade.assessment_type == request.assessment_type,
                )
            )
            grade = result.scalar_one_or_none()
            if grade is None:
                self._db.add(
                    Grade(
                        student_id=entry.student_id,
                        course_id=course.id,
                        assessment_type=request.assessment_type,
                        assessment_name=request.assessment_type,
                        score=entry.marks_obtained,
                        max_score=request.total_marks,
                        weight=Decimal(0),
                        remarks=entry.remarks,
                        graded_by=grader_id,
                        grade_date=today,
                    )
                )
            else:
                grade.score = entry.marks_obtained
                grade.max_score = request.total_marks
                grade.remarks = entry.remarks
                grade.graded_by = grader_id
                grade.grade_date = today
        await self._db.commit()

        count = len(request.grades)
        logger.info(
            "Grades published for %d students: course %s, %s",
            count,
            course.id,
            request.assessment_type,
        )
        return Envelope.ok(
            data={
                "course_id": course.id,
                "assessment_type": request.assessment_type,
                "count": count,
            },
            message=f"Grades published for {count} students",
        )

    async def record(self, payload: Any) -> Envelope:
        """Record one grade."""
        return await self.create(payload)

    async def by_course(self, course_id: Any) -> Envelope:
        """List a course's grades with student details, newest first."""
        return await self._guard("by course", lambda: self._by_course(course_id))

    async def bulk_upsert(self, payload: Any) -> Envelope:
        """Publish one assessment for many students in a single transaction."""
        return await self._guard("bulk upsert", lambda: self._bulk_upsert(payload))
