# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""RBAC diagnostics.

Traces the permission chain of one user: legacy role, branch, role
assignments (with expiry), effective permissions, and whether a probe
permission exists, which roles carry it and whether the user is granted it.

Usage:
    python -m src.domains.rbac.diagnostics <username> [permission]
"""

import argparse
import asyncio
import sys
from datetime import datetime

from pydantic import BaseModel, Field
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.config import get_settings
from src.domains.rbac.permissions import has_permission, permission_loader_options, permissions_for
from src.infrastructure.database.connection import close_database, get_session, init_database
from src.infrastructure.database.models.rbac import Permission, RBACRole
from src.infrastructure.database.models.user import User
from src.utils.datetime import is_expired, utc_now

DEFAULT_PROBE = "branches:read"


class AssignmentInfo(BaseModel):
    role_name: str
    branch_id: str | None = None
    expires_at: datetime | None = None
    expired: bool
    permission_count: int


class UserDiagnosis(BaseModel):
    """Everything that decides a user's access, in one place."""

    username: str
    found: bool
    is_active: bool = False
    legacy_role: str | None = None
    branch: str | None = None
    assignments: list[AssignmentInfo] = Field(default_factory=list)
    permissions: list[str] = Field(default_factory=list)
    probe: str
    probe_exists: bool = False
    probe_roles: list[str] = Field(default_factory=list)
    granted: bool = False


async def diagnose_user(
    session: AsyncSession,
    username: str,
    probe: str = DEFAULT_PROBE,
    now: datetime | None = None,
) -> UserDiagnosis:
    """Collect the RBAC state of ``username`` and evaluate ``probe`` for them."""
    now = now or utc_now()

    result = await session.execute(
        select(Permission.id).where(Permission.permission_name == probe)
    )
    probe_exists = result.scalar_one_or_none() is not None

    result = await session.execute(
        select(RBACRole.role_name)
        .join(RBACRole.permissions)
        .where(Permission.permission_name == probe)
        .order_by(RBACRole.role_name)
    )
    probe_roles = list(result.scalars().all())

    result = await session.execute(
        select(User)
        .where(User.username == username)
        .options(*permission_loader_options(), selectinload(User.branch))
    )
    user = result.scalar_one_or_none()
    if user is None:
        return UserDiagnosis(
            username=username,
            found=False,
            probe=probe,
            probe_exists=probe_exists,
            probe_roles=probe_roles,
        )

    assignments = [
        AssignmentInfo(
            role_name=assignment.rbac_role.role_name,
            branch_id=assignment.branch_id,
            expires_at=assignment.expires_at,
            expired=is_expired(assignment.expires_at, now),
            permission_count=len(assignment.rbac_role.permissions),
        )
        for assignment in user.user_roles
    ]
    return UserDiagnosis(
        username=username,
        found=True,
        is_active=bool(user.is_active),
        legacy_role=user.role_name,
        branch=user.branch.name if user.branch is not None else None,
        assignments=assignments,
        permissions=sorted(permissions_for(user, now)),
        probe=probe,
        probe_exists=probe_exists,
        probe_roles=probe_roles,
        granted=has_permission(user, probe, now),
    )


def render(diagnosis: UserDiagnosis, console: Console) -> None:
    if not diagnosis.found:
        console.print(f"[red]✗[/red] User [bold]{diagnosis.username}[/bold] not found")
    else:
        console.print(Panel.fit(
            f"[bold cyan]{diagnosis.username}[/bold cyan]\n"
            f"Legacy role: [yellow]{diagnosis.legacy_role or '-'}[/yellow] | "
            f"Branch: [green]{diagnosis.branch or '-'}[/green] | "
            f"Active: {'yes' if diagnosis.is_active else 'no'}",
            border_style="blue",
        ))

        table = Table(title="Role assignments")
        table.add_column("RBAC role")
        table.add_column("Branch")
        table.add_column("Expires")
        table.add_column("Permissions", justify="right")
        for assignment in diagnosis.assignments:
            expires = assignment.expires_at.isoformat() if assignment.expires_at else "never"
            if assignment.expired:
                expires = f"[red]{expires} (expired)[/red]"
            table.add_row(
                assignment.role_name,
                assignment.branch_id or "-",
                expires,
                str(assignment.permission_count),
            )
        console.print(table)
        granted = ", ".join(diagnosis.permissions) or "-"
        console.print(f"Effective permissions ({len(diagnosis.permissions)}): {granted}")

    if diagnosis.probe_exists:
        console.print(f"[green]✓[/green] Permission [bold]{diagnosis.probe}[/bold] exists")
    else:
        console.print(f"[red]✗[/red] Permission [bold]{diagnosis.probe}[/bold] does not exist")
    console.print(f"  Roles carrying it: {', '.join(diagnosis.probe_roles) or 'none'}")
    if diagnosis.found:
        mark = "[green]✓ granted[/green]" if diagnosis.granted else "[red]✗ denied[/red]"
        console.print(f"  {diagnosis.username}: {mark}")


async def _run(username: str, probe: str) -> UserDiagnosis:
    settings = get_settings()
    await init_database(settings)
    try:
        async with get_session() as session:
            return await diagnose_user(session, username, probe)
    finally:
        await close_database()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Trace the RBAC permission chain of a user.")
    parser.add_argument("username")
    parser.add_argument("permission", nargs="?", default=DEFAULT_PROBE)
    args = parser.parse_args(argv)

    console = Console()
    diagnosis = asyncio.run(_run(args.username, args.permission))
    render(diagnosis, console)
    return 0 if diagnosis.found else 1


if __name__ == "__main__":
    sys.exit(main())
