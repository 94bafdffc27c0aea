# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance service for daily attendance marking.

Attendance is keyed by student, course and day: marking the same key
again updates the existing row. Bulk marking writes a whole class in one
transaction.

Example:
    >>> service = AttendanceService(db_session, actor_id=teacher_user.id)
    >>> await service.mark(
    ...     {"student_id": sid, "course_id": cid, "date": "2025-03-01", "status": "present"}
    ... )
"""

import logging
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from src.domains.entity.service import EntityService, ValidationError
from src.infrastructure.database.models.attendance import Attendance
from src.infrastructure.database.models.course import Course, Enrollment
from src.infrastructure.database.models.student import Student
from src.models.attendance import (
    AttendanceRecord,
    AttendanceResponse,
    AttendanceUpdateRequest,
    BulkAttendanceRequest,
    MarkAttendanceRequest,
)
from src.models.common import Envelope

logger = logging.getLogger(__name__)

NOT_ENROLLED_MESSAGE = "Student is not enrolled in any course. Cannot mark attendance."


class AttendanceService(EntityService[Attendance]):
    """Service for attendance records.

    ``create`` marks one attendance; ``list`` pages through a branch's
    attendance, most recent day first.
    """

    model = Attendance
    entity_name = "Attendance"
    create_schema = MarkAttendanceRequest
    update_schema = AttendanceUpdateRequest
    response_schema = AttendanceResponse
    detail_schema = AttendanceRecord

    def _detail_options(self) -> tuple:
        return (selectinload(Attendance.student), selectinload(Attendance.course))

    async def _upsert(
        self,
        student_id: str,
        course_id: str,
        day: date,
        status: str,
        remarks: str | None,
    ) -> tuple[Attendance, bool]:
        """Insert or update the row for one student, course and day.

        Returns:
            The row and whether it already existed.
        """
        result = await self._db.execute(
            select(Attendance).where(
                Attendance.student_id == student_id,
                Attendance.course_id == course_id,
                Attendance.attendance_date == day,
            )
        )
        record = result.scalar_one_or_none()
        if record is not None:
            record.status = status
            record.remarks = remarks
            record.recorded_by = self._actor_id
            return record, True

        record = Attendance(
            student_id=student_id,
            course_id=course_id,
            attendance_date=day,
            status=status,
            remarks=remarks,
            recorded_by=self._actor_id,
        )
        self._db.add(record)
        return record, False

    async def _first_course(self, student_id: str) -> str:
        result = await self._db.execute(
            select(Enrollment.course_id)
            .where(Enrollment.student_id == student_id)
            .order_by(Enrollment.enrollment_date, Enrollment.created_at)
            .limit(1)
        )
        course_id = result.scalar_one_or_none()
        if course_id is None:
            raise ValidationError(NOT_ENROLLED_MESSAGE)
        return course_id

    async def _create(self, payload: Any) -> Envelope:
        request = self._validate(MarkAttendanceRequest, payload)
        student = await self._find(Student, request.student_id, "Student not found")
        if request.course_id is not None:
            course_id = (await self._find(Course, request.course_id, "Course not found")).id
        else:
            course_id = await self._first_course(student.id)

        record, existed = await self._upsert(
            student.id, course_id, request.date, request.status, request.remarks
        )
        await self._db.commit()
        await self._db.refresh(record)

        logger.info(
            "Attendance %s for student %s on %s: %s",
            "updated" if existed else "marked",
            student.id,
            request.date,
            request.status,
        )
        return Envelope.ok(
            data=AttendanceResponse.model_validate(record),
            message=(
                "Attendance updated successfully" if existed else "Attendance marked successfully"
            ),
        )

    async def _bulk_mark(self, payload: Any) -> Envelope:
        request = self._validate(BulkAttendanceRequest, payload)
        course = await self._find(Course, request.course_id, "Course not found")

        for entry in request.records:
            await self._upsert(
                entry.student_id, course.id, request.date, entry.status, entry.remarks
            )
        await self._db.commit()

        count = len(request.records)
        logger.info("Attendance marked for %d students of course %s", count, course.id)
        return Envelope.ok(
            data={"course_id": course.id, "date": request.date.isoformat(), "count": count},
            message=f"Attendance marked for {count} students",
        )

    async def _list(self, page: Any, limit: Any, search: str | None, filters: dict) -> Envelope:
        stmt = select(Attendance)
        branch_id = filters.get("branch_id")
        if branch_id is not None:
            stmt = stmt.join(Course, Attendance.course_id == Course.id).where(
                Course.branch_id == branch_id
            )
        return await self._paginate(
            stmt,
            page,
            limit,
            order_by=(Attendance.attendance_date.desc(), Attendance.created_at.desc()),
            convert=AttendanceRecord.model_validate,
            options=self._detail_options(),
        )

    async def _by_course(self, course_id: Any, day: date | None) -> Envelope:
        course = await self._find(Course, course_id, "Course not found")
        stmt = select(Attendance).where(Attendance.course_id == course.id)
        if day is not None:
            stmt = stmt.where(Attendance.attendance_date == day)
        stmt = stmt.options(*self._detail_options()).order_by(
            Attendance.attendance_date.desc(), Attendance.created_at.desc()
        )
        return Envelope.ok(data=await self._all(stmt, AttendanceRecord.model_validate))

    async def mark(self, payload: Any) -> Envelope:
        """Mark one student's attendance, updating an existing mark for that day."""
        return await self.create(payload)

    async def bulk_mark(self, payload: Any) -> Envelope:
        """Mark attendance for many students of one course on one day."""
        return await self._guard("bulk mark", lambda: self._bulk_mark(payload))

    async def by_course(self, course_id: Any, day: date | None = None) -> Envelope:
        """List a course's attendance, optionally for a single day."""
        return await self._guard("by course", lambda: self._by_course(course_id, day))
