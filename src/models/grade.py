# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade request and response models."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.common import NonEmptyStr, StudentBrief, UUIDStr
from src.models.course import CourseBrief


class RecordGradeRequest(BaseModel):
    """A single grade entry."""

    model_config = ConfigDict(extra="ignore")

    student_id: UUIDStr
    course_id: UUIDStr
    assessment_type: NonEmptyStr = Field(..., max_length=50)
    score: Decimal = Field(..., ge=0)
    max_score: Decimal = Field(default=Decimal(100), gt=0)
    assessment_name: str | None = Field(None, max_length=255)
    weight: Decimal | None = Field(None, ge=0)
    remarks: str | None = None
    grade_date: date | None = None

    @model_validator(mode="after")
    def score_within_max(self) -> "RecordGradeRequest":
        if self.score > self.max_score:
            raise ValueError("score cannot exceed max_score")
        return self


class GradeUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    score: Decimal | None = Field(None, ge=0)
    max_score: Decimal | None = Field(None, gt=0)
    assessment_name: str | None = Field(None, max_length=255)
    weight: Decimal | None = Field(None, ge=0)
    remarks: str | None = None
    grade_date: date | None = None


class BulkGradeEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    student_id: UUIDStr
    marks_obtained: Decimal = Field(..., ge=0)
    remarks: str | None = None


class BulkGradeRequest(BaseModel):
    """Scores of many students for one assessment of one course."""

    model_config = ConfigDict(extra="ignore")

    course_id: UUIDStr
    assessment_type: NonEmptyStr = Field(..., max_length=50)
    total_marks: Decimal = Field(..., gt=0)
    grades: list[BulkGradeEntry] = Field(..., min_length=1)

    @model_validator(mode="after")
    def marks_within_total(self) -> "BulkGradeRequest":
        for entry in self.grades:
            if entry.marks_obtained > self.total_marks:
                raise ValueError(
                    f"marks for student {entry.student_id} exceed total_marks"
                )
        return self


class GradeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    assessment_type: str
    assessment_name: str | None = None
    score: Decimal
    max_score: Decimal
    percentage: float | None = None
    weight: Decimal | None = None
    remarks: str | None = None
    graded_by: str | None = None
    grade_date: date
    created_at: datetime
    updated_at: datetime


class GradeRecord(GradeResponse):
    """Grade with student and course projections."""

    student: StudentBrief | None = None
    course: CourseBrief | None = None
