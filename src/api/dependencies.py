# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Get authenticated users
- Enforce RBAC permissions
- Read pagination parameters leniently

Example:
    @router.get("/students")
    async def list_students(
        db: AsyncSession = Depends(get_db),
        current_user: CurrentUser = Depends(require_auth),
    ):
        ...
"""

import logging
from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.middleware.auth import CurrentUser, get_current_user
from src.domains.rbac.permissions import has_permission, permission_loader_options
from src.infrastructure.database.connection import get_sessionmaker
from src.infrastructure.database.models.user import User

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for one request.

    Services commit their own work; anything left uncommitted when the
    request ends is rolled back when the session closes.

    Yields:
        AsyncSession bound to the process-wide engine.
    """
    async with get_sessionmaker()() as session:
        yield session


# =========================================================================
# Authentication Dependencies
# =========================================================================


def require_auth(request: Request) -> CurrentUser:
    """Require authenticated user.

    Raises:
        HTTPException: If not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


class RequirePermission:
    """Dependency for requiring a specific RBAC permission.

    The user is loaded with their role assignments and checked with
    ``has_permission``; SuperAdmins always pass.

    Example:
        @router.post("/roles")
        async def create_role(
            user: CurrentUser = Depends(RequirePermission("rbac:manage")),
        ):
            ...
    """

    def __init__(self, permission: str) -> None:
        self.permission = permission

    async def __call__(
        self,
        user: CurrentUser = Depends(require_auth),
        db: AsyncSession = Depends(get_db),
    ) -> CurrentUser:
        """Check the permission and return the user.

        Raises:
            HTTPException: 403 if the permission is not granted.
        """
        if user.is_super_admin:
            return user

        result = await db.execute(
            select(User).where(User.id == user.id).options(*permission_loader_options())
        )
        account = result.scalar_one_or_none()
        if not has_permission(account, self.permission):
            logger.info("Permission %s denied to user %s", self.permission, user.id)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission: {self.permission}",
            )
        return user

