# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User accounts and the legacy single-role model.

Every user may carry one legacy ``Role`` (SuperAdmin, Admin, Teacher,
Student, ...) alongside any number of RBAC role assignments.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from src.infrastructure.database.models.branch import Branch
    from src.infrastructure.database.models.rbac import UserRole

SUPER_ADMIN_ROLE = "SuperAdmin"


class Role(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Legacy role: exactly one per user."""

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(255))
    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    users: Mapped[list["User"]] = relationship(back_populates="role")


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Login account. Deleted physically."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    phone: Mapped[str | None] = mapped_column(String(50))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    branch_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False), ForeignKey("branches.id", ondelete="RESTRICT"), index=True
    )
    role_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("roles.id", ondelete="SET NULL"),
    )

    branch: Mapped[Optional["Branch"]] = relationship(back_populates="users")
    role: Mapped[Role | None] = relationship(back_populates="users")
    user_roles: Mapped[list["UserRole"]] = relationship(
        back_populates="user",
        foreign_keys="UserRole.user_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def role_name(self) -> str | None:
        return self.role.name if self.role is not None else None

    @property
    def is_super_admin(self) -> bool:
        return self.role_name == SUPER_ADMIN_ROLE

    def __repr__(self) -> str:
        return f"<User {self.username}>"
