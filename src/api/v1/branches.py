# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Branch management API endpoints.

This module provides endpoints for branch (campus) management:
- GET / - List branches with search and pagination
- GET /{branch_id} - Get branch details with related users and people
- POST / - Create a new branch
- PUT /{branch_id} - Update branch
- DELETE /{branch_id} - Delete branch (refused while records reference it)

Every response body is a result envelope; the status code follows the
envelope outcome.

Example:
    POST /api/v1/branches
    {
        "name": "Main Campus",
        "code": "MAIN",
        "city": "Lahore"
    }
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_auth
from src.api.middleware.auth import CurrentUser
from src.api.responses import envelope_response
from src.domains.branch import BranchService
from src.domains.entity import coerce_positive_int
from src.models.branch import BranchDetail, BranchResponse
from src.models.common import Envelope

logger = logging.getLogger(__name__)

router = APIRouter()

# The branches listing pages by 10 rather than the service default.
BRANCH_PAGE_SIZE = 10


def _get_branch_service(db: AsyncSession, current_user: CurrentUser) -> BranchService:
    """Get branch service instance.

    Args:
        db: Database session.
        current_user: Authenticated caller, recorded as the actor.

    Returns:
        Configured BranchService instance.
    """
    return BranchService(db, actor_id=current_user.id)


@router.get(
    "",
    response_model=Envelope[list[BranchResponse]],
    summary="List branches",
    description="List branches with optional search over name, code and city.",
)
async def list_branches(
    page: str | None = Query(None, description="1-based page number"),
    limit: str | None = Query(None, description="Page size (default 10)"),
    search: str | None = Query(None, description="Search name, code or city"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """List branches.

    Args:
        page: Page number; invalid values fall back to 1.
        limit: Page size; invalid values fall back to 10.
        search: Case-insensitive substring to match.
        current_user: Authenticated user.
        db: Database session.

    Returns:
        Envelope with the page of branches and pagination metadata.
    """
    service = _get_branch_service(db, current_user)
    result = await service.list(
        page=page,
        limit=coerce_positive_int(limit, BRANCH_PAGE_SIZE),
        search=search,
    )
    return envelope_response(result)


@router.get(
    "/{branch_id}",
    response_model=Envelope[BranchDetail],
    summary="Get branch",
    description="Get branch details including its users, students and teachers.",
)
async def get_branch(
    branch_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Get a branch by ID.

    Returns:
        Envelope with the branch detail, or 404 when it does not exist.
    """
    service = _get_branch_service(db, current_user)
    return envelope_response(await service.get(branch_id))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[BranchResponse],
    summary="Create branch",
    description="Create a new branch. Name and code are required; codes are unique.",
)
async def create_branch(
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Create a new branch.

    Args:
        payload: Branch fields. Timezone defaults to UTC and currency to USD.
        current_user: Authenticated user.
        db: Database session.

    Returns:
        Envelope with the created branch (201), or 400 on invalid input
        or a duplicate code.
    """
    logger.info("Creating branch: code=%s, by=%s", payload.get("code"), current_user.id)

    service = _get_branch_service(db, current_user)
    result = await service.create(payload)
    return envelope_response(result, status.HTTP_201_CREATED)


@router.put(
    "/{branch_id}",
    response_model=Envelope[BranchResponse],
    summary="Update branch",
    description="Update branch fields. Unknown fields are ignored.",
)
async def update_branch(
    branch_id: str,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Update a branch."""
    service = _get_branch_service(db, current_user)
    return envelope_response(await service.update(branch_id, payload))


@router.delete(
    "/{branch_id}",
    response_model=Envelope,
    summary="Delete branch",
    description="Delete a branch. Refused while users, students, teachers or courses remain.",
)
async def delete_branch(
    branch_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Delete a branch.

    Returns:
        Envelope confirming deletion, 404 if missing, or 400 with the
        count of remaining dependents.
    """
    logger.info("Deleting branch: id=%s, by=%s", branch_id, current_user.id)

    service = _get_branch_service(db, current_user)
    return envelope_response(await service.delete(branch_id))
