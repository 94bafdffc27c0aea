# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""RBAC service for roles, permissions and role assignments.

This module provides the RBACService that handles:
- Role CRUD (system roles cannot be deleted or renamed)
- Replacing a role's permission set
- Permission listing, creation and grouping by resource
- Assigning roles to users, optionally until an expiry time
- Reporting a user's effective permissions

Access decisions themselves are made by ``has_permission``.

Example:
    >>> service = RBACService(db_session, actor_id=admin.id)
    >>> await service.assign_role(user_id, {"role_id": role_id})
    >>> (await service.check_permission(user_id, "grades:write")).data.granted
    True
"""

import logging
from collections import defaultdict
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from src.domains.entity.service import (
    ConstraintViolationError,
    EntityService,
    NotFoundError,
    ValidationError,
)
from src.domains.rbac.permissions import (
    active_assignments,
    has_permission,
    permission_loader_options,
    permissions_for,
)
from src.infrastructure.database.models.branch import Branch
from src.infrastructure.database.models.rbac import Permission, RBACRole, UserRole
from src.infrastructure.database.models.user import User
from src.models.common import Envelope
from src.models.rbac import (
    AssignRoleRequest,
    PermissionCheck,
    PermissionCreateRequest,
    PermissionResponse,
    RoleCreateRequest,
    RoleDetail,
    RolePermissionsRequest,
    RoleResponse,
    RoleUpdateRequest,
    UserRoleResponse,
)

logger = logging.getLogger(__name__)

DUPLICATE_ROLE_MESSAGE = "Role name already exists"


class RBACService(EntityService[RBACRole]):
    """Service for RBAC administration. Role deletion is physical."""

    model = RBACRole
    entity_name = "Role"
    search_fields = ("role_name", "description")
    create_schema = RoleCreateRequest
    update_schema = RoleUpdateRequest
    response_schema = RoleResponse
    detail_schema = RoleDetail

    def _detail_options(self) -> tuple:
        return (selectinload(RBACRole.permissions),)

    async def _permissions_by_id(self, permission_ids: list[str]) -> list[Permission]:
        if not permission_ids:
            return []
        wanted = set(permission_ids)
        result = await self._db.execute(select(Permission).where(Permission.id.in_(sorted(wanted))))
        permissions = list(result.scalars().all())
        missing = wanted - {permission.id for permission in permissions}
        if missing:
            raise ValidationError(f"Unknown permission ids: {', '.join(sorted(missing))}")
        return permissions

    # =========================================================================
    # Roles
    # =========================================================================

    async def _before_create(self, request: RoleCreateRequest) -> None:
        if await self._exists(RBACRole, RBACRole.role_name == request.role_name):
            raise ConstraintViolationError(DUPLICATE_ROLE_MESSAGE)
        if request.branch_id is not None:
            await self._find(Branch, request.branch_id, "Branch not found")

    async def _build(self, request: RoleCreateRequest) -> RBACRole:
        role = RBACRole(
            role_name=request.role_name,
            description=request.description,
            branch_id=request.branch_id,
            is_system=False,
        )
        role.permissions = await self._permissions_by_id(request.permission_ids)
        return role

    async def _before_update(self, entity: RBACRole, changes: dict[str, Any]) -> None:
        name = changes.get("role_name")
        if name and name != entity.role_name:
            if entity.is_system:
                raise ConstraintViolationError("System roles cannot be renamed")
            if await self._exists(RBACRole, RBACRole.role_name == name, RBACRole.id != entity.id):
                raise ConstraintViolationError(DUPLICATE_ROLE_MESSAGE)

    async def _before_delete(self, entity: RBACRole) -> None:
        if entity.is_system:
            raise ConstraintViolationError("System roles cannot be deleted")

    async def _set_role_permissions(self, role_id: Any, payload: Any) -> Envelope:
        request = self._validate(RolePermissionsRequest, payload)
        role = await self._load(role_id, self._detail_options())
        role.permissions = await self._permissions_by_id(request.permission_ids)
        await self._db.commit()

        logger.info("Role %s now has %d permissions", role.role_name, len(role.permissions))
        return Envelope.ok(data=RoleDetail.model_validate(role), message="Role permissions updated")

    # =========================================================================
    # Permissions
    # =========================================================================

    async def _list_permissions(self, page: Any, limit: Any, resource: str | None) -> Envelope:
        stmt = select(Permission)
        if resource:
            stmt = stmt.where(Permission.resource == resource)
        return await self._paginate(
            stmt,
            page,
            limit,
            order_by=(Permission.resource, Permission.action),
            convert=PermissionResponse.model_validate,
        )

    async def _create_permission(self, payload: Any) -> Envelope:
        request = self._validate(PermissionCreateRequest, payload)
        name = request.permission_name or f"{request.resource}:{request.action}"
        if await self._exists(Permission, Permission.permission_name == name):
            raise ConstraintViolationError("Permission already exists")

        permission = Permission(
            permission_name=name,
            resource=request.resource,
            action=request.action,
            description=request.description,
        )
        self._db.add(permission)
        await self._db.commit()
        await self._db.refresh(permission)

        logger.info("Permission created: %s", name)
        return Envelope.ok(
            data=PermissionResponse.model_validate(permission),
            message="Permission created",
        )

    async def _permission_hierarchy(self) -> Envelope:
        result = await self._db.execute(
            select(Permission).order_by(Permission.resource, Permission.action)
        )
        grouped: dict[str, list[dict[str, Any]]] = defaultdict(list)
        for permission in result.scalars().all():
            grouped[permission.resource].append(
                PermissionResponse.model_validate(permission).model_dump()
            )
        return Envelope.ok(data=dict(grouped))

    # =========================================================================
    # Assignments
    # =========================================================================

    async def _user_with_permissions(self, user_id: Any) -> User:
        return await self._find(User, user_id, "User not found", permission_loader_options())

    async def _assign_role(self, user_id: Any, payload: Any) -> Envelope:
        request = self._validate(AssignRoleRequest, payload)
        user = await self._find(User, user_id, "User not found")
        role = await self._find(RBACRole, request.role_id, "Role not found")

        result = await self._db.execute(
            select(UserRole).where(UserRole.user_id == user.id, UserRole.rbac_role_id == role.id)
        )
        assignment = result.scalar_one_or_none()
        if assignment is None:
            assignment = UserRole(user_id=user.id, rbac_role_id=role.id)
            self._db.add(assignment)
        assignment.branch_id = request.branch_id or role.branch_id or user.branch_id
        assignment.assigned_by = self._actor_id
        assignment.expires_at = request.expires_at
        await self._db.commit()
        await self._db.refresh(assignment)

        logger.info("Role %s assigned to user %s", role.role_name, user.username)
        return Envelope.ok(
            data=UserRoleResponse.model_validate(assignment),
            message="Role assigned to user",
        )

    async def _remove_role(self, user_id: Any, role_id: Any) -> Envelope:
        user_key = self._coerce_id(user_id, "Role assignment not found")
        role_key = self._coerce_id(role_id, "Role assignment not found")
        result = await self._db.execute(
            select(UserRole).where(UserRole.user_id == user_key, UserRole.rbac_role_id == role_key)
        )
        assignment = result.scalar_one_or_none()
        if assignment is None:
            raise NotFoundError("Role assignment not found")

        await self._db.delete(assignment)
        await self._db.commit()

        logger.info("Role %s removed from user %s", role_key, user_key)
        return Envelope.ok(message="Role removed from user")

    async def _user_permissions(self, user_id: Any) -> Envelope:
        user = await self._user_with_permissions(user_id)
        return Envelope.ok(
            data={
                "user_id": user.id,
                "legacy_role": user.role_name,
                "is_super_admin": user.is_super_admin,
                "roles": sorted(a.rbac_role.role_name for a in active_assignments(user)),
                "permissions": sorted(permissions_for(user)),
            }
        )

    async def _check_permission(self, user_id: Any, permission_name: str) -> Envelope:
        user = await self._user_with_permissions(user_id)
        granted = has_permission(user, permission_name)
        return Envelope.ok(data=PermissionCheck(permission_name=permission_name, granted=granted))

    # =========================================================================
    # Public API
    # =========================================================================

    async def set_role_permissions(self, role_id: str | UUID, payload: Any) -> Envelope:
        """Replace the permission set of a role."""
        return await self._guard(
            "set permissions", lambda: self._set_role_permissions(role_id, payload)
        )

    async def list_permissions(
        self, page: Any = 1, limit: Any = None, resource: str | None = None
    ) -> Envelope:
        return await self._guard(
            "list permissions", lambda: self._list_permissions(page, limit, resource)
        )

    async def create_permission(self, payload: Any) -> Envelope:
        return await self._guard("create permission", lambda: self._create_permission(payload))

    async def permission_hierarchy(self) -> Envelope:
        """All permissions grouped by resource."""
        return await self._guard("permission hierarchy", self._permission_hierarchy)

    async def assign_role(self, user_id: str | UUID, payload: Any) -> Envelope:
        """Assign a role to a user, refreshing the expiry of an existing assignment."""
        return await self._guard("assign", lambda: self._assign_role(user_id, payload))

    async def remove_role(self, user_id: str | UUID, role_id: str | UUID) -> Envelope:
        return await self._guard("remove", lambda: self._remove_role(user_id, role_id))

    async def user_permissions(self, user_id: str | UUID) -> Envelope:
        """Effective roles and permissions of a user."""
        return await self._guard("user permissions", lambda: self._user_permissions(user_id))

    async def check_permission(self, user_id: str | UUID, permission_name: str) -> Envelope:
        return await self._guard(
            "check permission", lambda: self._check_permission(user_id, permission_name)
        )
