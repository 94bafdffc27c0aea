# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Messaging service for direct messages between users.

This module provides the MessagingService that handles:
- Sending a message to another user
- Inbox and sent folders, newest first
- The conversation between two users, oldest first
- Read receipts and unread counts
- Deletion, which hides a message from both parties

Only the recipient may mark a message read; sender and recipient may
both delete it. Messages the caller cannot see are reported as not found.
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import selectinload

from src.domains.entity.service import NotFoundError, ServiceBase
from src.infrastructure.database.models.messaging import DirectMessage
from src.infrastructure.database.models.user import User
from src.models.common import Envelope
from src.models.messaging import (
    InboxMessage,
    MessageResponse,
    SendMessageRequest,
    SentMessage,
    UnreadCount,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

CONVERSATION_LIMIT = 50


class MessagingService(ServiceBase[DirectMessage]):
    """Service for direct messages."""

    model = DirectMessage
    entity_name = "Message"

    async def _visible(self, message_id: Any, user_id: str) -> DirectMessage:
        """Load a message the user sent or received and has not deleted."""
        message = await self._load(message_id)
        if message.is_deleted or user_id not in (message.sender_id, message.recipient_id):
            raise NotFoundError(self.not_found_message)
        return message

    async def _send(self, sender_id: str, payload: Any) -> Envelope:
        request = self._validate(SendMessageRequest, payload)
        sender_key = self._coerce_id(sender_id, "Sender or recipient not found")
        participants = sorted({sender_key, request.recipient_id})
        result = await self._db.execute(
            select(func.count()).select_from(User).where(User.id.in_(participants))
        )
        if (result.scalar() or 0) < len(participants):
            raise NotFoundError("Sender or recipient not found")

        message = DirectMessage(
            sender_id=sender_key,
            recipient_id=request.recipient_id,
            subject=request.subject,
            message_body=request.message_body,
            attachment_url=request.attachment_url,
        )
        self._db.add(message)
        await self._db.commit()
        await self._db.refresh(message)

        logger.info("Message %s sent from %s to %s", message.id, sender_key, request.recipient_id)
        return Envelope.ok(
            data=MessageResponse.model_validate(message),
            message="Message sent successfully",
        )

    async def _folder(self, user_id: str, page: Any, limit: Any, inbox: bool) -> Envelope:
        key = self._coerce_id(user_id, "User not found")
        owner = DirectMessage.recipient_id if inbox else DirectMessage.sender_id
        stmt = select(DirectMessage).where(owner == key, DirectMessage.is_deleted.is_(False))
        other = DirectMessage.sender if inbox else DirectMessage.recipient
        return await self._paginate(
            stmt,
            page,
            limit,
            order_by=(DirectMessage.created_at.desc(), DirectMessage.id.desc()),
            convert=(InboxMessage if inbox else SentMessage).model_validate,
            options=(selectinload(other),),
            message="Inbox messages retrieved" if inbox else "Sent messages retrieved",
        )

    async def _conversation(self, user_id: str, other_id: Any, limit: Any) -> Envelope:
        me = self._coerce_id(user_id, "User not found")
        other = self._coerce_id(other_id, "User not found")
        _, size = self._page_params(1, limit if limit is not None else CONVERSATION_LIMIT)
        stmt = (
            select(DirectMessage)
            .where(
                DirectMessage.is_deleted.is_(False),
                or_(
                    and_(DirectMessage.sender_id == me, DirectMessage.recipient_id == other),
                    and_(DirectMessage.sender_id == other, DirectMessage.recipient_id == me),
                ),
            )
            .order_by(DirectMessage.created_at.asc(), DirectMessage.id.asc())
            .limit(size)
        )
        return Envelope.ok(
            data=await self._all(stmt, MessageResponse.model_validate),
            message="Conversation retrieved",
        )

    async def _mark_read(self, message_id: Any, user_id: str) -> Envelope:
        message = await self._visible(message_id, user_id)
        if message.recipient_id != user_id:
            raise NotFoundError(self.not_found_message)
        if not message.is_read:
            message.is_read = True
            message.read_at = utc_now()
            await self._db.commit()
        return Envelope.ok(
            data=MessageResponse.model_validate(message),
            message="Message marked as read",
        )

    async def _delete(self, message_id: Any, user_id: str) -> Envelope:
        message = await self._visible(message_id, user_id)
        message.is_deleted = True
        await self._db.commit()
        logger.info("Message %s deleted by %s", message.id, user_id)
        return Envelope.ok(message="Message deleted")

    async def _unread_count(self, user_id: str) -> Envelope:
        key = self._coerce_id(user_id, "User not found")
        result = await self._db.execute(
            select(func.count())
            .select_from(DirectMessage)
            .where(
                DirectMessage.recipient_id == key,
                DirectMessage.is_read.is_(False),
                DirectMessage.is_deleted.is_(False),
            )
        )
        return Envelope.ok(
            data=UnreadCount(unread_count=result.scalar() or 0),
            message="Unread count retrieved",
        )

    # =========================================================================
    # Public API
    # =========================================================================

    async def send(self, sender_id: str, payload: Any) -> Envelope:
        """Send a message; both users must exist."""
        return await self._guard("send", lambda: self._send(sender_id, payload))

    async def inbox(self, user_id: str, page: Any = 1, limit: Any = None) -> Envelope:
        return await self._guard("inbox", lambda: self._folder(user_id, page, limit, inbox=True))

    async def sent(self, user_id: str, page: Any = 1, limit: Any = None) -> Envelope:
        return await self._guard("sent", lambda: self._folder(user_id, page, limit, inbox=False))

    async def conversation(
        self, user_id: str, other_id: str | UUID, limit: Any = None
    ) -> Envelope:
        """Messages exchanged by two users, oldest first, at most ``limit``."""
        return await self._guard(
            "conversation", lambda: self._conversation(user_id, other_id, limit)
        )

    async def mark_read(self, message_id: str | UUID, user_id: str) -> Envelope:
        """Mark a received message read."""
        return await self._guard("mark read", lambda: self._mark_read(message_id, user_id))

    async def delete(self, message_id: str | UUID, user_id: str) -> Envelope:
        return await self._guard("delete", lambda: self._delete(message_id, user_id))

    async def unread_count(self, user_id: str) -> Envelope:
        return await self._guard("unread count", lambda: self._unread_count(user_id))
