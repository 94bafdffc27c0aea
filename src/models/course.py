# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course and enrollment request and response models."""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from src.models.common import NonEmptyStr, PersonSummary, UUIDStr, default_when_blank

EnrollmentStatus = Literal["enrolled", "dropped", "completed"]


class CourseCreateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    course_code: NonEmptyStr = Field(..., max_length=50)
    course_name: NonEmptyStr = Field(..., max_length=255)
    branch_id: UUIDStr
    teacher_id: UUIDStr | None = None
    description: str | None = None
    max_students: int = Field(default=40, ge=1)
    room_number: str | None = Field(None, max_length=50)
    building: str | None = Field(None, max_length=100)
    schedule: dict[str, Any] | None = None
    is_active: bool = True

    @field_validator("teacher_id", "max_students", mode="before")
    @classmethod
    def blank_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        return default_when_blank(cls, value, info)


class CourseUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    course_code: NonEmptyStr | None = Field(None, max_length=50)
    course_name: NonEmptyStr | None = Field(None, max_length=255)
    teacher_id: UUIDStr | None = None
    description: str | None = None
    max_students: int | None = Field(None, ge=1)
    room_number: str | None = Field(None, max_length=50)
    building: str | None = Field(None, max_length=100)
    schedule: dict[str, Any] | None = None
    is_active: bool | None = None


class CourseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    branch_id: str
    teacher_id: str | None = None
    course_code: str
    course_name: str
    description: str | None = None
    max_students: int
    room_number: str | None = None
    building: str | None = None
    schedule: dict[str, Any] | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class CourseBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    course_code: str
    course_name: str


class CourseDetail(CourseResponse):
    """Course with its teacher and enrollment count."""

    teacher: PersonSummary | None = None
    enrolled_count: int = 0


class EnrollRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    student_id: UUIDStr
    enrollment_date: date | None = None


class EnrollmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    enrollment_date: date
    status: str
    created_at: datetime


class StudentEnrollment(EnrollmentResponse):
    """Enrollment seen from the student side."""

    course: CourseBrief | None = None


class CourseEnrollment(EnrollmentResponse):
    """Enrollment seen from the course side."""

    student: PersonSummary | None = None
