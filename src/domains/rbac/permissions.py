# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Permission evaluation.

``has_permission`` is the only place where access is decided. It works
on a user loaded with ``permission_loader_options()`` and performs no
I/O, so the HTTP layer, the RBAC service and the diagnostics script all
agree on the answer.

Rules:
- The legacy ``SuperAdmin`` role is granted everything.
- Otherwise a permission is granted when any of the user's role
  assignments that has not expired carries it.
"""

from datetime import datetime

from sqlalchemy.orm import selectinload

from src.infrastructure.database.models.rbac import RBACRole, UserRole
from src.infrastructure.database.models.user import User
from src.utils.datetime import is_expired


def permission_loader_options() -> tuple:
    """Loader options that make a ``User`` ready for permission checks."""
    return (
        selectinload(User.role),
        selectinload(User.user_roles)
        .selectinload(UserRole.rbac_role)
        .selectinload(RBACRole.permissions),
    )


def active_assignments(user: User, now: datetime | None = None) -> list[UserRole]:
    return [
        assignment
        for assignment in user.user_roles
        if not is_expired(assignment.expires_at, now)
    ]


def permissions_for(user: User, now: datetime | None = None) -> set[str]:
    """Names of the permissions granted through the user's active role assignments."""
    return {
        permission.permission_name
        for assignment in active_assignments(user, now)
        for permission in assignment.rbac_role.permissions
    }


def has_permission(user: User | None, permission_name: str, now: datetime | None = None) -> bool:
    """Whether ``user`` holds ``permission_name``.

    Args:
        user: User with role, assignments and permissions loaded, or None.
        permission_name: Permission such as ``"branches:read"``.
        now: Reference time for assignment expiry, defaults to now.
    """
    if user is None or not user.is_active:
        return False
    if user.is_super_admin:
        return True
    return permission_name in permissions_for(user, now)
