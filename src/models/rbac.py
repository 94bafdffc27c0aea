# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""RBAC request and response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import NonEmptyStr, UUIDStr


class RoleCreateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role_name: NonEmptyStr = Field(..., max_length=100)
    description: str | None = None
    branch_id: UUIDStr | None = None
    permission_ids: list[UUIDStr] = Field(default_factory=list)


class RoleUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role_name: NonEmptyStr | None = Field(None, max_length=100)
    description: str | None = None


class RolePermissionsRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    permission_ids: list[UUIDStr]


class PermissionCreateRequest(BaseModel):
    """A permission; ``permission_name`` defaults to ``<resource>:<action>``."""

    model_config = ConfigDict(extra="ignore")

    resource: NonEmptyStr = Field(..., max_length=50)
    action: NonEmptyStr = Field(..., max_length=50)
    permission_name: str | None = Field(None, max_length=100)
    description: str | None = None


class AssignRoleRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role_id: UUIDStr
    branch_id: UUIDStr | None = None
    expires_at: datetime | None = None


class PermissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    permission_name: str
    resource: str
    action: str
    description: str | None = None


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    role_name: str
    description: str | None = None
    branch_id: str | None = None
    is_system: bool
    created_at: datetime


class RoleDetail(RoleResponse):
    permissions: list[PermissionResponse] = Field(default_factory=list)


class UserRoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    rbac_role_id: str
    branch_id: str | None = None
    assigned_by: str | None = None
    expires_at: datetime | None = None
    created_at: datetime


class PermissionCheck(BaseModel):
    permission_name: str
    granted: bool
