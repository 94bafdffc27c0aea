# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student request and response models."""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from src.models.common import NonEmptyStr, UUIDStr, default_when_blank
from src.models.user import BranchBrief, UserResponse

AdmissionStatus = Literal["pending", "admitted", "rejected", "withdrawn", "graduated"]


class StudentCreateRequest(BaseModel):
    """Fields accepted when creating a student.

    Supplying both ``username`` and ``password`` also creates a login
    account with the Student role, linked to the new record.
    """

    model_config = ConfigDict(extra="ignore")

    first_name: NonEmptyStr = Field(..., max_length=100)
    last_name: NonEmptyStr = Field(..., max_length=100)
    branch_id: UUIDStr
    student_code: NonEmptyStr = Field(..., max_length=50)
    date_of_birth: date
    admission_date: date
    gender: str | None = Field(None, max_length=20)
    blood_group: str | None = Field(None, max_length=5)
    nationality: str | None = Field(None, max_length=100)
    national_id: str | None = Field(None, max_length=50)
    passport_number: str | None = Field(None, max_length=50)
    permanent_address: str | None = None
    current_address: str | None = None
    city: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    personal_phone: str | None = Field(None, max_length=50)
    personal_email: str | None = Field(None, max_length=255)
    admission_status: AdmissionStatus = "pending"
    user_id: UUIDStr | None = None
    username: str | None = Field(None, max_length=100)
    password: str | None = Field(None, max_length=72)

    @field_validator(
        "gender",
        "blood_group",
        "nationality",
        "national_id",
        "passport_number",
        "permanent_address",
        "current_address",
        "city",
        "postal_code",
        "personal_phone",
        "personal_email",
        "admission_status",
        "user_id",
        mode="before",
    )
    @classmethod
    def blank_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        return default_when_blank(cls, value, info)


class StudentUpdateRequest(BaseModel):
    """Fields a student update may change."""

    model_config = ConfigDict(extra="ignore")

    first_name: NonEmptyStr | None = Field(None, max_length=100)
    last_name: NonEmptyStr | None = Field(None, max_length=100)
    student_code: NonEmptyStr | None = Field(None, max_length=50)
    date_of_birth: date | None = None
    admission_date: date | None = None
    gender: str | None = Field(None, max_length=20)
    blood_group: str | None = Field(None, max_length=5)
    nationality: str | None = Field(None, max_length=100)
    national_id: str | None = Field(None, max_length=50)
    passport_number: str | None = Field(None, max_length=50)
    permanent_address: str | None = None
    current_address: str | None = None
    city: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    personal_phone: str | None = Field(None, max_length=50)
    personal_email: str | None = Field(None, max_length=255)
    admission_status: AdmissionStatus | None = None
    is_active: bool | None = None


class StudentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    branch_id: str
    user_id: str | None = None
    student_code: str
    first_name: str
    last_name: str
    date_of_birth: date
    admission_date: date
    gender: str | None = None
    blood_group: str | None = None
    nationality: str | None = None
    national_id: str | None = None
    passport_number: str | None = None
    permanent_address: str | None = None
    current_address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    personal_phone: str | None = None
    personal_email: str | None = None
    admission_status: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class StudentDetail(StudentResponse):
    """Student with branch and linked login account."""

    branch: BranchBrief | None = None
    user: UserResponse | None = None
