# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Direct messaging API endpoints.

All endpoints act on behalf of the authenticated user:
- POST / - Send a message
- GET /inbox - Received messages, newest first
- GET /sent - Sent messages, newest first
- GET /conversation/{user_id} - Messages exchanged with another user, oldest first
- GET /unread-count - Number of unread received messages
- PUT /{message_id}/read - Mark a received message read
- DELETE /{message_id} - Hide a sent or received message
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_auth
from src.api.middleware.auth import CurrentUser
from src.api.responses import envelope_response
from src.domains.messaging import MessagingService
from src.models.common import Envelope
from src.models.messaging import InboxMessage, MessageResponse, SentMessage, UnreadCount

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_messaging_service(db: AsyncSession, current_user: CurrentUser) -> MessagingService:
    return MessagingService(db, actor_id=current_user.id)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[MessageResponse],
    summary="Send message",
)
async def send_message(
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_messaging_service(db, current_user)
    result = await service.send(current_user.id, payload)
    return envelope_response(result, status.HTTP_201_CREATED)


@router.get("/inbox", response_model=Envelope[list[InboxMessage]], summary="Inbox")
async def get_inbox(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_messaging_service(db, current_user)
    return envelope_response(await service.inbox(current_user.id, page, limit))


@router.get("/sent", response_model=Envelope[list[SentMessage]], summary="Sent messages")
async def get_sent(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_messaging_service(db, current_user)
    return envelope_response(await service.sent(current_user.id, page, limit))


@router.get(
    "/conversation/{user_id}",
    response_model=Envelope[list[MessageResponse]],
    summary="Conversation",
)
async def get_conversation(
    user_id: str,
    limit: str | None = Query(None, description="Maximum messages (default 50)"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_messaging_service(db, current_user)
    return envelope_response(await service.conversation(current_user.id, user_id, limit))


@router.get("/unread-count", response_model=Envelope[UnreadCount], summary="Unread count")
async def get_unread_count(
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_messaging_service(db, current_user)
    return envelope_response(await service.unread_count(current_user.id))


@router.put("/{message_id}/read", response_model=Envelope[MessageResponse], summary="Mark read")
async def mark_message_read(
    message_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Mark a message read. Only its recipient may do so."""
    service = _get_messaging_service(db, current_user)
    return envelope_response(await service.mark_read(message_id, current_user.id))


@router.delete("/{message_id}", response_model=Envelope, summary="Delete message")
async def delete_message(
    message_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_messaging_service(db, current_user)
    return envelope_response(await service.delete(message_id, current_user.id))
