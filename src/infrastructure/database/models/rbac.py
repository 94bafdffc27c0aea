# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""RBAC roles, permissions and user role assignments.

Permissions are named ``<resource>:<action>`` (e.g. ``branches:read``).
A role assignment may expire; expired assignments grant nothing.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Table, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from src.infrastructure.database.models.user import User

role_permissions = Table(
    "rbac_role_permissions",
    Base.metadata,
    Column(
        "rbac_role_id",
        UUID(as_uuid=False),
        ForeignKey("rbac_roles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "permission_id",
        UUID(as_uuid=False),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Permission(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "permissions"

    permission_name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    resource: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    roles: Mapped[list["RBACRole"]] = relationship(
        secondary=role_permissions,
        back_populates="permissions",
    )


class RBACRole(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Named bundle of permissions, optionally scoped to one branch."""

    __tablename__ = "rbac_roles"

    branch_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False), ForeignKey("branches.id", ondelete="CASCADE"), index=True
    )
    role_name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text)
    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    permissions: Mapped[list[Permission]] = relationship(
        secondary=role_permissions,
        back_populates="roles",
        passive_deletes=True,
    )
    assignments: Mapped[list["UserRole"]] = relationship(
        back_populates="rbac_role",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class UserRole(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Assignment of an RBAC role to a user."""

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "rbac_role_id", name="uq_user_roles_user_role"),)

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rbac_role_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("rbac_roles.id", ondelete="CASCADE"), nullable=False
    )
    branch_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("branches.id", ondelete="CASCADE"),
    )
    assigned_by: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    user: Mapped["User"] = relationship(back_populates="user_roles", foreign_keys=[user_id])
    rbac_role: Mapped[RBACRole] = relationship(back_populates="assignments")
