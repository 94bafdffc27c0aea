# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Report request and response models."""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, model_validator

from src.models.common import UUIDStr

ReportType = Literal["student_progress", "teacher_performance", "attendance_summary"]
ReportFormat = Literal["pdf", "excel"]


class GenerateReportRequest(BaseModel):
    """Parameters of one report run.

    Attendance summaries need both ``start_date`` and ``end_date``;
    ``course_id`` narrows student progress and ``teacher_id`` narrows
    teacher performance.
    """

    model_config = ConfigDict(extra="ignore")

    branch_id: UUIDStr
    report_type: ReportType
    report_format: ReportFormat = "pdf"
    course_id: UUIDStr | None = None
    teacher_id: UUIDStr | None = None
    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def attendance_needs_range(self) -> "GenerateReportRequest":
        if self.report_type == "attendance_summary":
            if self.start_date is None or self.end_date is None:
                raise ValueError("start_date and end_date are required for attendance reports")
            if self.start_date > self.end_date:
                raise ValueError("start_date must not be after end_date")
        return self


class ReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    branch_id: str
    report_type: str
    title: str
    generated_by: str | None = None
    report_format: str
    status: str
    date_range_start: date | None = None
    date_range_end: date | None = None
    summary: dict[str, Any]
    generated_at: datetime
    created_at: datetime
