# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Announcement request and response models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import NonEmptyStr

Priority = Literal["low", "normal", "high", "urgent"]
AnnouncementType = Literal["general", "assignment", "exam", "holiday"]


class AnnouncementCreateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: NonEmptyStr = Field(..., max_length=255)
    content: NonEmptyStr
    priority: Priority = "normal"
    announcement_type: AnnouncementType = "general"
    attachment_url: str | None = Field(None, max_length=500)
    scheduled_for: datetime | None = None
    expires_at: datetime | None = None


class AnnouncementUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: NonEmptyStr | None = Field(None, max_length=255)
    content: NonEmptyStr | None = None
    priority: Priority | None = None
    announcement_type: AnnouncementType | None = None
    attachment_url: str | None = Field(None, max_length=500)
    scheduled_for: datetime | None = None
    expires_at: datetime | None = None


class AnnouncementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    created_by: str | None = None
    title: str
    content: str
    priority: str
    announcement_type: str
    attachment_url: str | None = None
    scheduled_for: datetime | None = None
    expires_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
