# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial seed data.

This module seeds the reference data every deployment needs:
- Legacy roles: Student, Teacher, Admin, SuperAdmin
- Permissions: ``<resource>:<action>`` for each resource
- RBAC roles: system roles bundling those permissions
- A SuperAdmin account and a first branch

Seeding is idempotent: rows that already exist are reused.

Usage:
    python -m src.infrastructure.database.seeds.initial
"""

import asyncio
import logging
import os

from rich.console import Console
from rich.table import Table
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.config import get_settings
from src.domains.auth import JWTManager, PasswordHasher
from src.infrastructure.database.connection import close_database, get_session, init_database
from src.infrastructure.database.models import (
    SUPER_ADMIN_ROLE,
    Branch,
    Permission,
    RBACRole,
    Role,
    User,
)
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)

LEGACY_ROLES = {
    "Student": "Enrolled learner",
    "Teacher": "Teaching staff",
    "Admin": "Branch administrator",
    SUPER_ADMIN_ROLE: "Unrestricted access to every branch",
}

RESOURCE_ACTIONS = {
    "branches": ("read", "create", "update", "delete"),
    "users": ("read", "create", "update", "delete"),
    "students": ("read", "create", "update", "delete"),
    "teachers": ("read", "create", "update", "delete"),
    "courses": ("read", "create", "update", "delete", "enroll"),
    "attendance": ("read", "mark"),
    "grades": ("read", "record", "delete"),
    "announcements": ("read", "create", "update", "delete"),
    "messages": ("read", "send"),
    "reports": ("read", "generate", "delete"),
    "rbac": ("read", "manage"),
}

RBAC_ROLES = {
    "Admin": ("Branch administration", None),
    "Teacher": (
        "Teaching staff",
        [
            "students:read",
            "courses:read",
            "attendance:read",
            "attendance:mark",
            "grades:read",
            "grades:record",
            "announcements:read",
            "announcements:create",
            "announcements:update",
            "messages:read",
            "messages:send",
        ],
    ),
    "Student": (
        "Enrolled learner",
        ["courses:read", "grades:read", "announcements:read", "messages:read", "messages:send"],
    ),
}


async def seed_legacy_roles(session: AsyncSession) -> dict[str, Role]:
    """Seed the one-per-user legacy roles."""
    result = await session.execute(select(Role))
    roles = {role.name: role for role in result.scalars()}

    for name, description in LEGACY_ROLES.items():
        if name not in roles:
            roles[name] = Role(name=name, description=description, is_system=True)
            session.add(roles[name])

    await session.flush()
    logger.info("Seeded %d legacy roles", len(roles))
    return roles


async def seed_permissions(session: AsyncSession) -> dict[str, Permission]:
    """Seed ``<resource>:<action>`` permissions."""
    result = await session.execute(select(Permission))
    permissions = {p.permission_name: p for p in result.scalars()}

    for resource, actions in RESOURCE_ACTIONS.items():
        for action in actions:
            name = f"{resource}:{action}"
            if name in permissions:
                continue
            permissions[name] = Permission(
                permission_name=name,
                resource=resource,
                action=action,
                description=f"{action.capitalize()} {resource}",
            )
            session.add(permissions[name])

    await session.flush()
    logger.info("Seeded %d permissions", len(permissions))
    return permissions


async def seed_rbac_roles(
    session: AsyncSession, permissions: dict[str, Permission]
) -> dict[str, RBACRole]:
    """Seed the system RBAC roles. ``Admin`` receives every permission."""
    result = await session.execute(
        select(RBACRole).options(selectinload(RBACRole.permissions))
    )
    roles = {role.role_name: role for role in result.scalars()}

    for name, (description, granted) in RBAC_ROLES.items():
        if name in roles:
            continue
        names = granted if granted is not None else list(permissions)
        role = RBACRole(
            role_name=name,
            description=description,
            is_system=True,
            permissions=[permissions[n] for n in names],
        )
        session.add(role)
        roles[name] = role

    await session.flush()
    logger.info("Seeded %d RBAC roles", len(roles))
    return roles


async def seed_super_admin(
    session: AsyncSession,
    roles: dict[str, Role],
    username: str = "superadmin",
    password: str = "ChangeMe2025!",
) -> User:
    """Seed the SuperAdmin account and the main branch it belongs to."""
    result = await session.execute(select(Branch).where(Branch.code == "MAIN"))
    branch = result.scalar_one_or_none()
    if branch is None:
        branch = Branch(name="Main Campus", code="MAIN")
        session.add(branch)
        await session.flush()

    result = await session.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user is None:
        user = User(
            username=username,
            email=f"{username}@koolhub.edu",
            password_hash=PasswordHasher().hash(password),
            first_name="Super",
            last_name="Admin",
            role_id=roles[SUPER_ADMIN_ROLE].id,
            branch_id=branch.id,
            is_active=True,
        )
        session.add(user)
        await session.flush()
        logger.info("Seeded SuperAdmin account %s", username)
    return user


async def seed_database(
    session: AsyncSession,
    admin_username: str | None = None,
    admin_password: str | None = None,
) -> User:
    """Seed reference data and the SuperAdmin account, then commit.

    Returns:
        The SuperAdmin user.
    """
    logger.info("Seeding database...")

    roles = await seed_legacy_roles(session)
    permissions = await seed_permissions(session)
    await seed_rbac_roles(session, permissions)

    admin_kwargs = {}
    if admin_username:
        admin_kwargs["username"] = admin_username
    if admin_password:
        admin_kwargs["password"] = admin_password
    admin = await seed_super_admin(session, roles, **admin_kwargs)

    await session.commit()
    logger.info("Database seeding complete")
    return admin


async def _run(console: Console) -> None:
    settings = get_settings()
    setup_logging(settings)
    await init_database(settings)
    try:
        async with get_session() as session:
            admin = await seed_database(
                session,
                admin_username=os.environ.get("SEED_ADMIN_USERNAME"),
                admin_password=os.environ.get("SEED_ADMIN_PASSWORD"),
            )
    finally:
        await close_database()

    token = JWTManager(settings.jwt).create_access_token(
        user_id=admin.id,
        username=admin.username,
        role=SUPER_ADMIN_ROLE,
        branch_id=admin.branch_id,
    )

    table = Table(title="Seeded SuperAdmin")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("User ID", admin.id)
    table.add_row("Username", admin.username)
    table.add_row("Branch ID", admin.branch_id or "-")
    console.print(table)
    if settings.is_development:
        console.print(f"[bold]Development access token:[/bold]\n{token}")


if __name__ == "__main__":
    asyncio.run(_run(Console()))
