# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Role-based access control API endpoints.

This module provides endpoints for roles, permissions and assignments:
- GET /roles - List roles
- POST /roles - Create role
- GET /roles/{role_id} - Get role with permissions
- PUT /roles/{role_id} - Update role
- DELETE /roles/{role_id} - Delete role (system roles are protected)
- PUT /roles/{role_id}/permissions - Replace a role's permissions
- GET /permissions - List permissions
- POST /permissions - Create permission
- GET /permissions/hierarchy - Permissions grouped by resource
- POST /users/{user_id}/roles - Assign role to user
- DELETE /users/{user_id}/roles/{role_id} - Remove role from user
- GET /users/{user_id}/permissions - Effective permissions of a user

Reads need authentication only; every mutation needs ``rbac:manage``.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import RequirePermission, get_db, require_auth
from src.api.middleware.auth import CurrentUser
from src.api.responses import envelope_response
from src.domains.rbac import RBACService
from src.models.common import Envelope
from src.models.rbac import PermissionResponse, RoleDetail, RoleResponse, UserRoleResponse

logger = logging.getLogger(__name__)

router = APIRouter()

MANAGE_PERMISSION = "rbac:manage"

require_manage = RequirePermission(MANAGE_PERMISSION)


def _get_rbac_service(db: AsyncSession, current_user: CurrentUser) -> RBACService:
    return RBACService(db, actor_id=current_user.id)


# =========================================================================
# Roles
# =========================================================================


@router.get("/roles", response_model=Envelope[list[RoleResponse]], summary="List roles")
async def list_roles(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    search: str | None = Query(None, description="Search role name or description"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_rbac_service(db, current_user)
    return envelope_response(await service.list(page=page, limit=limit, search=search))


@router.post(
    "/roles",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[RoleResponse],
    summary="Create role",
)
async def create_role(
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_manage),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    logger.info("Creating role: name=%s, by=%s", payload.get("role_name"), current_user.id)

    service = _get_rbac_service(db, current_user)
    return envelope_response(await service.create(payload), status.HTTP_201_CREATED)


@router.get("/roles/{role_id}", response_model=Envelope[RoleDetail], summary="Get role")
async def get_role(
    role_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_rbac_service(db, current_user)
    return envelope_response(await service.get(role_id))


@router.put("/roles/{role_id}", response_model=Envelope[RoleResponse], summary="Update role")
async def update_role(
    role_id: str,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_manage),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_rbac_service(db, current_user)
    return envelope_response(await service.update(role_id, payload))


@router.delete("/roles/{role_id}", response_model=Envelope, summary="Delete role")
async def delete_role(
    role_id: str,
    current_user: CurrentUser = Depends(require_manage),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    logger.info("Deleting role: id=%s, by=%s", role_id, current_user.id)

    service = _get_rbac_service(db, current_user)
    return envelope_response(await service.delete(role_id))


@router.put(
    "/roles/{role_id}/permissions",
    response_model=Envelope[RoleDetail],
    summary="Set role permissions",
)
async def set_role_permissions(
    role_id: str,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_manage),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_rbac_service(db, current_user)
    return envelope_response(await service.set_role_permissions(role_id, payload))


# =========================================================================
# Permissions
# =========================================================================


@router.get(
    "/permissions",
    response_model=Envelope[list[PermissionResponse]],
    summary="List permissions",
)
async def list_permissions(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    resource: str | None = Query(None),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_rbac_service(db, current_user)
    return envelope_response(await service.list_permissions(page, limit, resource))


@router.post(
    "/permissions",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[PermissionResponse],
    summary="Create permission",
)
async def create_permission(
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_manage),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_rbac_service(db, current_user)
    result = await service.create_permission(payload)
    return envelope_response(result, status.HTTP_201_CREATED)


@router.get(
    "/permissions/hierarchy",
    response_model=Envelope[dict[str, Any]],
    summary="Permission hierarchy",
)
async def get_permission_hierarchy(
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_rbac_service(db, current_user)
    return envelope_response(await service.permission_hierarchy())


# =========================================================================
# User assignments
# =========================================================================


@router.post(
    "/users/{user_id}/roles",
    response_model=Envelope[UserRoleResponse],
    summary="Assign role",
)
async def assign_role(
    user_id: str,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_manage),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    logger.info(
        "Assigning role %s to user %s, by=%s", payload.get("role_id"), user_id, current_user.id
    )

    service = _get_rbac_service(db, current_user)
    return envelope_response(await service.assign_role(user_id, payload))


@router.delete("/users/{user_id}/roles/{role_id}", response_model=Envelope, summary="Remove role")
async def remove_role(
    user_id: str,
    role_id: str,
    current_user: CurrentUser = Depends(require_manage),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_rbac_service(db, current_user)
    return envelope_response(await service.remove_role(user_id, role_id))


@router.get(
    "/users/{user_id}/permissions",
    response_model=Envelope[dict[str, Any]],
    summary="User permissions",
)
async def get_user_permissions(
    user_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_rbac_service(db, current_user)
    return envelope_response(await service.user_permissions(user_id))
