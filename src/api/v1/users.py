# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User account API endpoints.

This module provides endpoints for login account management:
- GET / - List users of the caller's branch (any branch for SuperAdmins)
- GET /{user_id} - Get user details with role and branch
- POST / - Create a user
- PUT /{user_id} - Update user
- DELETE /{user_id} - Delete user

Password hashes never appear in responses.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_auth
from src.api.middleware.auth import CurrentUser
from src.api.responses import envelope_response
from src.domains.user import UserService
from src.models.common import Envelope
from src.models.user import UserDetail, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_user_service(db: AsyncSession, current_user: CurrentUser) -> UserService:
    return UserService(db, actor_id=current_user.id)


@router.get("", response_model=Envelope[list[UserResponse]], summary="List users")
async def list_users(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    search: str | None = Query(None, description="Search username, email or names"),
    branch_id: str | None = Query(None, description="Branch filter (SuperAdmin only)"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """List users.

    Non-SuperAdmin callers only see users of their own branch.
    """
    service = _get_user_service(db, current_user)
    result = await service.list(
        page=page,
        limit=limit,
        search=search,
        branch_id=current_user.scope_branch(branch_id),
    )
    return envelope_response(result)


@router.get("/{user_id}", response_model=Envelope[UserDetail], summary="Get user")
async def get_user(
    user_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_user_service(db, current_user)
    return envelope_response(await service.get(user_id))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[UserResponse],
    summary="Create user",
)
async def create_user(
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Create a user. Username, email and password are required."""
    logger.info("Creating user: username=%s, by=%s", payload.get("username"), current_user.id)

    service = _get_user_service(db, current_user)
    return envelope_response(await service.create(payload), status.HTTP_201_CREATED)


@router.put("/{user_id}", response_model=Envelope[UserResponse], summary="Update user")
async def update_user(
    user_id: str,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Update a user.

    Only names, phone, email, active flag, branch and role can change.
    """
    service = _get_user_service(db, current_user)
    return envelope_response(await service.update(user_id, payload))


@router.delete("/{user_id}", response_model=Envelope, summary="Delete user")
async def delete_user(
    user_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    logger.info("Deleting user: id=%s, by=%s", user_id, current_user.id)

    service = _get_user_service(db, current_user)
    return envelope_response(await service.delete(user_id))
