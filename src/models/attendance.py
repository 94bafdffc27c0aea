# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance request and response models."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import StudentBrief, UUIDStr
from src.models.course import CourseBrief

AttendanceStatus = Literal["present", "absent", "late", "excused"]


class MarkAttendanceRequest(BaseModel):
    """One attendance mark. Without ``course_id`` the student's first enrollment is used."""

    model_config = ConfigDict(extra="ignore")

    student_id: UUIDStr
    date: date
    status: AttendanceStatus
    course_id: UUIDStr | None = None
    remarks: str | None = None


class AttendanceUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: AttendanceStatus | None = None
    remarks: str | None = None


class BulkAttendanceRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    student_id: UUIDStr
    status: AttendanceStatus
    remarks: str | None = None


class BulkAttendanceRequest(BaseModel):
    """Marks for many students of one course on one day."""

    model_config = ConfigDict(extra="ignore")

    course_id: UUIDStr
    date: date
    records: list[BulkAttendanceRecord] = Field(..., min_length=1)


class AttendanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    attendance_date: date
    status: str
    remarks: str | None = None
    recorded_by: str | None = None
    created_at: datetime
    updated_at: datetime


class AttendanceRecord(AttendanceResponse):
    """Attendance row with student and course projections."""

    student: StudentBrief | None = None
    course: CourseBrief | None = None
