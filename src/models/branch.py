# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Branch request and response models."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from src.models.common import NonEmptyStr, PersonSummary, UserBrief, default_when_blank

STATE_ALIASES = AliasChoices("state", "state_province")


class BranchCreateRequest(BaseModel):
    """Fields accepted when creating a branch."""

    model_config = ConfigDict(extra="ignore")

    name: NonEmptyStr = Field(..., max_length=255, description="Display name")
    code: NonEmptyStr = Field(..., max_length=50, description="Unique short code")
    address: str | None = None
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100, validation_alias=STATE_ALIASES)
    country: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    phone: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=255)
    website: str | None = Field(None, max_length=255)
    principal_name: str | None = Field(None, max_length=255)
    principal_email: str | None = Field(None, max_length=255)
    timezone: str = Field(default="UTC", max_length=64)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    is_active: bool = True

    @field_validator("timezone", "currency", mode="before")
    @classmethod
    def blank_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        return default_when_blank(cls, value, info)


class BranchUpdateRequest(BaseModel):
    """Fields a branch update may change. Anything else is dropped."""

    model_config = ConfigDict(extra="ignore")

    name: NonEmptyStr | None = Field(None, max_length=255)
    code: NonEmptyStr | None = Field(None, max_length=50)
    address: str | None = None
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100, validation_alias=STATE_ALIASES)
    country: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    phone: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=255)
    website: str | None = Field(None, max_length=255)
    principal_name: str | None = Field(None, max_length=255)
    principal_email: str | None = Field(None, max_length=255)
    timezone: str | None = Field(None, max_length=64)
    currency: str | None = Field(None, min_length=3, max_length=3)
    is_active: bool | None = None


class BranchResponse(BaseModel):
    """Branch record as returned by list, create and update."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: str
    city: str | None = None
    state: str | None = None
    country: str | None = None
    address: str | None = None
    postal_code: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    principal_name: str | None = None
    principal_email: str | None = None
    timezone: str
    currency: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class BranchDetail(BranchResponse):
    """Branch with projected users, students and teachers."""

    users: list[UserBrief] = []
    students: list[PersonSummary] = []
    teachers: list[PersonSummary] = []
