# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for permission evaluation, RBAC administration and diagnostics."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest
from rich.console import Console

from src.domains.rbac.diagnostics import AssignmentInfo, UserDiagnosis, render
from src.domains.rbac.permissions import has_permission, permissions_for
from src.domains.rbac.service import RBACService
from src.infrastructure.database.models.rbac import Permission, UserRole
from src.models.common import ErrorKind

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
ROLE_ID = "550e8400-e29b-41d4-a716-446655440070"
PERMISSION_ID = "550e8400-e29b-41d4-a716-446655440071"


def make_assignment(role_name: str, permissions: list[str], expires_at: Any = None) -> Any:
    role = SimpleNamespace(
        role_name=role_name,
        permissions=[SimpleNamespace(permission_name=name) for name in permissions],
    )
    return SimpleNamespace(rbac_role=role, expires_at=expires_at, branch_id=None)


def make_user(
    assignments: list[Any] | None = None,
    super_admin: bool = False,
    is_active: bool = True,
) -> Any:
    return SimpleNamespace(
        id="550e8400-e29b-41d4-a716-446655440072",
        username="jdoe",
        is_active=is_active,
        is_super_admin=super_admin,
        role_name="SuperAdmin" if super_admin else "Teacher",
        user_roles=assignments or [],
    )


class TestHasPermission:
    """Tests for the access decision."""

    def test_super_admin_has_everything(self) -> None:
        assert has_permission(make_user(super_admin=True), "anything:at_all", NOW) is True

    def test_granted_through_role(self) -> None:
        user = make_user([make_assignment("Teacher", ["grades:write", "attendance:write"])])

        assert has_permission(user, "grades:write", NOW) is True
        assert has_permission(user, "branches:delete", NOW) is False

    def test_expired_assignment_grants_nothing(self) -> None:
        user = make_user(
            [make_assignment("Teacher", ["grades:write"], expires_at=NOW - timedelta(days=1))]
        )

        assert has_permission(user, "grades:write", NOW) is False

    def test_future_expiry_still_grants(self) -> None:
        user = make_user(
            [make_assignment("Teacher", ["grades:write"], expires_at=NOW + timedelta(days=1))]
        )

        assert has_permission(user, "grades:write", NOW) is True

    def test_inactive_user_is_denied(self) -> None:
        assert has_permission(make_user(super_admin=True, is_active=False), "x:y", NOW) is False

    def test_missing_user_is_denied(self) -> None:
        assert has_permission(None, "branches:read", NOW) is False

    def test_permissions_union_over_roles(self) -> None:
        user = make_user(
            [
                make_assignment("Teacher", ["grades:write", "courses:read"]),
                make_assignment("Librarian", ["courses:read", "books:lend"]),
            ]
        )

        assert permissions_for(user, NOW) == {"grades:write", "courses:read", "books:lend"}


class TestRBACService:
    """Tests for RBAC administration."""

    @pytest.fixture
    def service(self, mock_db: AsyncMock, sample_user_id: str) -> RBACService:
        return RBACService(mock_db, actor_id=sample_user_id)

    @pytest.mark.asyncio
    async def test_create_role(
        self, service: RBACService, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        mock_db.execute.return_value = mock_result(None)

        result = await service.create({"role_name": "Librarian", "description": "Books"})

        assert result.success is True
        assert result.data.role_name == "Librarian"
        assert result.data.is_system is False

    @pytest.mark.asyncio
    async def test_create_role_with_unknown_permission(
        self, service: RBACService, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        mock_db.execute.side_effect = [mock_result(None), mock_result(rows=[])]

        result = await service.create(
            {"role_name": "Librarian", "permission_ids": [PERMISSION_ID]}
        )

        assert result.error_kind == ErrorKind.VALIDATION_ERROR
        assert result.message == f"Unknown permission ids: {PERMISSION_ID}"
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_system_role_cannot_be_deleted(
        self, service: RBACService, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        mock_db.execute.return_value = mock_result(SimpleNamespace(id=ROLE_ID, is_system=True))

        result = await service.delete(ROLE_ID)

        assert result.error_kind == ErrorKind.CONSTRAINT_VIOLATION
        assert result.message == "System roles cannot be deleted"
        mock_db.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_permission_derives_name(
        self, service: RBACService, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        mock_db.execute.return_value = mock_result(None)

        result = await service.create_permission({"resource": "books", "action": "lend"})

        assert result.success is True
        assert result.data.permission_name == "books:lend"
        assert isinstance(mock_db.add.call_args[0][0], Permission)

    @pytest.mark.asyncio
    async def test_permission_hierarchy_groups_by_resource(
        self, service: RBACService, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        rows = [
            SimpleNamespace(
                id=f"p{i}", permission_name=f"{res}:{act}", resource=res, action=act,
                description=None,
            )
            for i, (res, act) in enumerate(
                [("branches", "read"), ("branches", "write"), ("grades", "read")]
            )
        ]
        mock_db.execute.return_value = mock_result(rows=rows)

        result = await service.permission_hierarchy()

        assert sorted(result.data) == ["branches", "grades"]
        assert len(result.data["branches"]) == 2

    @pytest.mark.asyncio
    async def test_assign_role_creates_assignment(
        self,
        service: RBACService,
        mock_db: AsyncMock,
        mock_result: Any,
        sample_user_id: str,
        sample_branch_id: str,
    ) -> None:
        user = SimpleNamespace(id=sample_user_id, username="jdoe", branch_id=sample_branch_id)
        role = SimpleNamespace(id=ROLE_ID, role_name="Teacher", branch_id=None)
        mock_db.execute.side_effect = [mock_result(user), mock_result(role), mock_result(None)]

        result = await service.assign_role(sample_user_id, {"role_id": ROLE_ID})

        assert result.success is True
        assigned = mock_db.add.call_args[0][0]
        assert isinstance(assigned, UserRole)
        assert assigned.branch_id == sample_branch_id
        assert assigned.assigned_by == sample_user_id
        assert result.data.rbac_role_id == ROLE_ID

    @pytest.mark.asyncio
    async def test_remove_missing_assignment(
        self, service: RBACService, mock_db: AsyncMock, mock_result: Any, sample_user_id: str
    ) -> None:
        mock_db.execute.return_value = mock_result(None)

        result = await service.remove_role(sample_user_id, ROLE_ID)

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.message == "Role assignment not found"

    @pytest.mark.asyncio
    async def test_user_permissions(
        self, service: RBACService, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        user = make_user([make_assignment("Teacher", ["grades:write", "courses:read"])])
        mock_db.execute.return_value = mock_result(user)

        result = await service.user_permissions(user.id)

        assert result.data["roles"] == ["Teacher"]
        assert result.data["permissions"] == ["courses:read", "grades:write"]
        assert result.data["is_super_admin"] is False


class TestDiagnosticsRender:
    """Tests for the diagnostics report."""

    def test_render_found_user(self) -> None:
        console = Console(record=True, width=120)
        diagnosis = UserDiagnosis(
            username="jdoe",
            found=True,
            is_active=True,
            legacy_role="Teacher",
            branch="Main Campus",
            assignments=[
                AssignmentInfo(role_name="Teacher", expired=False, permission_count=2),
                AssignmentInfo(
                    role_name="Examiner",
                    expires_at=NOW,
                    expired=True,
                    permission_count=1,
                ),
            ],
            permissions=["courses:read", "grades:write"],
            probe="grades:write",
            probe_exists=True,
            probe_roles=["Teacher"],
            granted=True,
        )

        render(diagnosis, console)
        text = console.export_text()

        assert "jdoe" in text
        assert "Examiner" in text
        assert "(expired)" in text
        assert "Effective permissions (2)" in text
        assert "granted" in text

    def test_render_missing_user(self) -> None:
        console = Console(record=True, width=120)

        render(UserDiagnosis(username="ghost", found=False, probe="branches:read"), console)
        text = console.export_text()

        assert "ghost" in text
        assert "not found" in text
        assert "does not exist" in text
        assert "granted" not in text
