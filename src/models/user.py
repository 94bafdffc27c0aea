# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User account request and response models.

Responses never carry the password hash.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.models.common import NonEmptyStr, UUIDStr


class UserCreateRequest(BaseModel):
    """Fields accepted when creating a user account."""

    model_config = ConfigDict(extra="ignore")

    username: NonEmptyStr = Field(..., max_length=100, description="Unique login name")
    email: EmailStr = Field(..., description="Unique email address")
    password: NonEmptyStr = Field(..., max_length=72, description="Plain text password")
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=50)
    branch_id: UUIDStr | None = None
    role_id: UUIDStr | None = None
    is_active: bool = True


class UserUpdateRequest(BaseModel):
    """Fields a user update may change. Username and password are not among them."""

    model_config = ConfigDict(extra="ignore")

    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=50)
    email: EmailStr | None = None
    is_active: bool | None = None
    branch_id: UUIDStr | None = None
    role_id: UUIDStr | None = None


class RoleBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class BranchBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: str


class UserResponse(BaseModel):
    """User record as returned by list, create and update."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    is_active: bool
    branch_id: str | None = None
    role_id: str | None = None
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class UserDetail(UserResponse):
    """User with legacy role and branch."""

    role: RoleBrief | None = None
    branch: BranchBrief | None = None
