# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Branch model: the tenant unit every scoped record belongs to."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from src.infrastructure.database.models.course import Course
    from src.infrastructure.database.models.student import Student
    from src.infrastructure.database.models.teacher import Teacher
    from src.infrastructure.database.models.user import User


class Branch(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A school branch (campus).

    Deleting a branch is physical. Dependents are never cascaded; the
    foreign keys pointing here use RESTRICT.
    """

    __tablename__ = "branches"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    address: Mapped[str | None] = mapped_column(Text)
    city: Mapped[str | None] = mapped_column(String(100))
    state: Mapped[str | None] = mapped_column(String(100))
    country: Mapped[str | None] = mapped_column(String(100))
    postal_code: Mapped[str | None] = mapped_column(String(20))
    phone: Mapped[str | None] = mapped_column(String(50))
    email: Mapped[str | None] = mapped_column(String(255))
    website: Mapped[str | None] = mapped_column(String(255))
    principal_name: Mapped[str | None] = mapped_column(String(255))
    principal_email: Mapped[str | None] = mapped_column(String(255))
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    users: Mapped[list["User"]] = relationship(back_populates="branch", passive_deletes="all")
    students: Mapped[list["Student"]] = relationship(back_populates="branch", passive_deletes="all")
    teachers: Mapped[list["Teacher"]] = relationship(back_populates="branch", passive_deletes="all")
    courses: Mapped[list["Course"]] = relationship(back_populates="branch", passive_deletes="all")

    def __repr__(self) -> str:
        return f"<Branch {self.code} {self.name}>"
