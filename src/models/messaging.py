# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Direct message request and response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import NonEmptyStr, UserBrief, UUIDStr


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    recipient_id: UUIDStr
    message_body: NonEmptyStr
    subject: str | None = Field(None, max_length=255)
    attachment_url: str | None = Field(None, max_length=500)


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    sender_id: str
    recipient_id: str
    subject: str | None = None
    message_body: str
    attachment_url: str | None = None
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime


class InboxMessage(MessageResponse):
    sender: UserBrief | None = None


class SentMessage(MessageResponse):
    recipient: UserBrief | None = None


class UnreadCount(BaseModel):
    unread_count: int
