# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher request and response models."""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from src.models.common import NonEmptyStr, UUIDStr, default_when_blank
from src.models.user import BranchBrief, UserResponse

EmploymentType = Literal["full_time", "part_time", "contract", "visiting"]


class TeacherCreateRequest(BaseModel):
    """Fields accepted when creating a teacher.

    ``employee_code`` is generated from the branch code when omitted.
    Supplying ``username`` and ``password`` also creates a login account.
    """

    model_config = ConfigDict(extra="ignore")

    branch_id: UUIDStr
    first_name: NonEmptyStr = Field(..., max_length=100)
    last_name: NonEmptyStr = Field(..., max_length=100)
    employee_code: str | None = Field(None, max_length=50)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    date_of_birth: date | None = None
    gender: str | None = Field(None, max_length=20)
    nationality: str | None = Field(None, max_length=100)
    hire_date: date | None = None
    employment_type: EmploymentType = "full_time"
    designation: str | None = Field(None, max_length=100)
    qualification: str | None = None
    years_experience: int | None = Field(None, ge=0)
    department: str | None = Field(None, max_length=100)
    total_leaves: int = Field(default=24, ge=0)
    used_leaves: int = Field(default=0, ge=0)
    user_id: UUIDStr | None = None
    username: str | None = Field(None, max_length=100)
    password: str | None = Field(None, max_length=72)

    @field_validator("employee_code", "email", "employment_type", "user_id", mode="before")
    @classmethod
    def blank_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        return default_when_blank(cls, value, info)


class TeacherUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    first_name: NonEmptyStr | None = Field(None, max_length=100)
    last_name: NonEmptyStr | None = Field(None, max_length=100)
    employee_code: NonEmptyStr | None = Field(None, max_length=50)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    date_of_birth: date | None = None
    gender: str | None = Field(None, max_length=20)
    nationality: str | None = Field(None, max_length=100)
    hire_date: date | None = None
    employment_type: EmploymentType | None = None
    designation: str | None = Field(None, max_length=100)
    qualification: str | None = None
    years_experience: int | None = Field(None, ge=0)
    department: str | None = Field(None, max_length=100)
    total_leaves: int | None = Field(None, ge=0)
    used_leaves: int | None = Field(None, ge=0)
    is_active: bool | None = None


class TeacherResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    branch_id: str
    user_id: str | None = None
    employee_code: str
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    nationality: str | None = None
    hire_date: date
    employment_type: str
    designation: str | None = None
    qualification: str | None = None
    years_experience: int | None = None
    department: str | None = None
    total_leaves: int
    used_leaves: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class TeacherDetail(TeacherResponse):
    """Teacher with branch and linked login account."""

    branch: BranchBrief | None = None
    user: UserResponse | None = None
