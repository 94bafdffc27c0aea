# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models.

Importing this package registers every table on ``Base.metadata``, which
alembic autogeneration and relationship resolution rely on.
"""

from src.infrastructure.database.models.announcement import Announcement
from src.infrastructure.database.models.attendance import Attendance
from src.infrastructure.database.models.base import Base
from src.infrastructure.database.models.branch import Branch
from src.infrastructure.database.models.course import Course, Enrollment
from src.infrastructure.database.models.grade import Grade
from src.infrastructure.database.models.messaging import DirectMessage
from src.infrastructure.database.models.rbac import Permission, RBACRole, UserRole, role_permissions
from src.infrastructure.database.models.report import Report
from src.infrastructure.database.models.student import Student
from src.infrastructure.database.models.teacher import Teacher
from src.infrastructure.database.models.user import SUPER_ADMIN_ROLE, Role, User

__all__ = [
    "Base",
    "Branch",
    "Role",
    "User",
    "SUPER_ADMIN_ROLE",
    "Permission",
    "RBACRole",
    "UserRole",
    "role_permissions",
    "Student",
    "Teacher",
    "Course",
    "Enrollment",
    "Attendance",
    "Grade",
    "Announcement",
    "DirectMessage",
    "Report",
]
