# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Reporting service for branch reports.

A report run computes summary statistics for one branch and stores them
with the report row:

- ``student_progress``: enrollments by status, optionally for one course
- ``teacher_performance``: per teacher, courses taught and students enrolled
- ``attendance_summary``: attendance counts by status and the attendance
  rate over a date range (0 when the range has no records)

Rendering the stored summary as PDF or Excel is left to the consumer;
``report_format`` records the requested format.
"""

import logging
from typing import Any

from sqlalchemy import distinct, func, select

from src.domains.entity.service import EntityService
from src.infrastructure.database.models.attendance import ATTENDANCE_STATUSES, Attendance
from src.infrastructure.database.models.branch import Branch
from src.infrastructure.database.models.course import ENROLLMENT_STATUSES, Course, Enrollment
from src.infrastructure.database.models.report import Report
from src.infrastructure.database.models.teacher import Teacher
from src.models.common import Envelope, ErrorKind
from src.models.report import GenerateReportRequest, ReportResponse
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

REPORT_TITLES = {
    "student_progress": "Student Progress Report",
    "teacher_performance": "Teacher Performance Report",
    "attendance_summary": "Attendance Report",
}


def attendance_rate(present: int, total: int) -> float:
    """Percentage of present marks, rounded to two decimals."""
    if total == 0:
        return 0.0
    return round(present / total * 100, 2)


class ReportingService(EntityService[Report]):
    """Service for generating and browsing branch reports.

    Reports are immutable once generated; ``update`` is refused.
    """

    model = Report
    entity_name = "Report"
    search_fields = ("title",)
    create_schema = GenerateReportRequest
    response_schema = ReportResponse

    # =========================================================================
    # Summaries
    # =========================================================================

    async def _student_progress(self, request: GenerateReportRequest) -> dict[str, Any]:
        stmt = (
            select(Enrollment.status, func.count())
            .join(Course, Enrollment.course_id == Course.id)
            .where(Course.branch_id == request.branch_id)
            .group_by(Enrollment.status)
        )
        if request.course_id is not None:
            stmt = stmt.where(Enrollment.course_id == request.course_id)
        result = await self._db.execute(stmt)

        by_status = dict.fromkeys(ENROLLMENT_STATUSES, 0)
        by_status.update({status: count for status, count in result.all()})
        return {
            "course_id": request.course_id,
            "enrollments": sum(by_status.values()),
            "by_status": by_status,
        }

    async def _teacher_performance(self, request: GenerateReportRequest) -> dict[str, Any]:
        stmt = (
            select(
                Teacher.id,
                Teacher.first_name,
                Teacher.last_name,
                func.count(distinct(Course.id)),
                func.count(Enrollment.id),
            )
            .outerjoin(Course, Course.teacher_id == Teacher.id)
            .outerjoin(Enrollment, Enrollment.course_id == Course.id)
            .where(Teacher.branch_id == request.branch_id, Teacher.is_active.is_(True))
            .group_by(Teacher.id, Teacher.first_name, Teacher.last_name)
            .order_by(Teacher.last_name, Teacher.first_name)
        )
        if request.teacher_id is not None:
            stmt = stmt.where(Teacher.id == request.teacher_id)
        result = await self._db.execute(stmt)

        teachers = [
            {
                "teacher_id": teacher_id,
                "name": f"{first_name} {last_name}",
                "courses": courses,
                "enrollments": enrollments,
            }
            for teacher_id, first_name, last_name, courses, enrollments in result.all()
        ]
        return {"teachers": len(teachers), "rows": teachers}

    async def _attendance_summary(self, request: GenerateReportRequest) -> dict[str, Any]:
        stmt = (
            select(Attendance.status, func.count())
            .join(Course, Attendance.course_id == Course.id)
            .where(
                Course.branch_id == request.branch_id,
                Attendance.attendance_date >= request.start_date,
                Attendance.attendance_date <= request.end_date,
            )
            .group_by(Attendance.status)
        )
        result = await self._db.execute(stmt)

        by_status = dict.fromkeys(ATTENDANCE_STATUSES, 0)
        by_status.update({status: count for status, count in result.all()})
        total = sum(by_status.values())
        return {
            "total_records": total,
            "present_count": by_status["present"],
            "absent_count": by_status["absent"],
            "by_status": by_status,
            "attendance_rate": attendance_rate(by_status["present"], total),
        }

    # =========================================================================
    # Operations
    # =========================================================================

    async def _generate(self, payload: Any, generated_by: str | None) -> Envelope:
        request = self._validate(GenerateReportRequest, payload)
        branch = await self._find(Branch, request.branch_id, "Branch not found")

        summarize = {
            "student_progress": self._student_progress,
            "teacher_performance": self._teacher_performance,
            "attendance_summary": self._attendance_summary,
        }[request.report_type]
        summary = await summarize(request)

        now = utc_now()
        title = f"{REPORT_TITLES[request.report_type]} - {branch.name}"
        if request.start_date is not None and request.end_date is not None:
            title += f" ({request.start_date.isoformat()} to {request.end_date.isoformat()})"
        else:
            title += f" ({now.date().isoformat()})"

        report = Report(
            branch_id=branch.id,
            report_type=request.report_type,
            title=title,
            generated_by=generated_by,
            report_format=request.report_format,
            status="completed",
            date_range_start=request.start_date,
            date_range_end=request.end_date,
            summary=summary,
            generated_at=now,
        )
        self._db.add(report)
        await self._db.commit()
        await self._db.refresh(report)

        logger.info(
            "Report %s (%s) generated for branch %s", report.id, report.report_type, branch.id
        )
        return Envelope.ok(
            data=ReportResponse.model_validate(report),
            message=f"{REPORT_TITLES[request.report_type]} generated",
        )

    async def generate(self, payload: Any, generated_by: str | None = None) -> Envelope:
        """Compute a report's summary and store the report."""
        return await self._guard("generate", lambda: self._generate(payload, generated_by))

    async def create(self, payload: Any) -> Envelope:
        return await self.generate(payload, generated_by=self._actor_id)

    async def update(self, entity_id: Any, payload: Any) -> Envelope:
        logger.warning("Refused update of report %s", entity_id)
        return Envelope.fail(
            "Reports cannot be modified; generate a new one", ErrorKind.VALIDATION_ERROR
        )
