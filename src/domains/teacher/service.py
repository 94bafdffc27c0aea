# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher service for staff records.

This module provides the TeacherService that handles:
- Teacher CRUD over active teachers, searchable by name, email and code
- Employee codes generated per branch (``EMP-<branch code>-0001``)
- Optional login account with the Teacher role and RBAC role
- Soft deletion
- Courses taught by a teacher

Example:
    >>> service = TeacherService(db_session, actor_id=admin.id)
    >>> result = await service.create(
    ...     {"branch_id": branch_id, "first_name": "Alan", "last_name": "Turing"}
    ... )
    >>> result.data.employee_code
    'EMP-MAIN-0001'
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.domains.auth.password import PasswordHasher
from src.domains.entity.service import ConstraintViolationError, EntityService
from src.domains.user.service import provision_account
from src.infrastructure.database.models.branch import Branch
from src.infrastructure.database.models.course import Course
from src.infrastructure.database.models.rbac import RBACRole, UserRole
from src.infrastructure.database.models.teacher import Teacher
from src.infrastructure.database.models.user import User
from src.models.common import Envelope
from src.models.course import CourseResponse
from src.models.teacher import (
    TeacherCreateRequest,
    TeacherDetail,
    TeacherResponse,
    TeacherUpdateRequest,
)
from src.utils.datetime import utc_today

logger = logging.getLogger(__name__)

TEACHER_ROLE = "Teacher"
DUPLICATE_CODE_MESSAGE = "Employee code already exists"


def format_employee_code(branch_code: str, sequence: int) -> str:
    return f"EMP-{branch_code.upper()}-{sequence:04d}"


class TeacherService(EntityService[Teacher]):
    """Service for managing teachers. Lists show active teachers only."""

    model = Teacher
    entity_name = "Teacher"
    search_fields = ("first_name", "last_name", "email", "employee_code")
    create_schema = TeacherCreateRequest
    update_schema = TeacherUpdateRequest
    response_schema = TeacherResponse
    detail_schema = TeacherDetail
    soft_delete = True
    active_only = True

    def __init__(
        self,
        db: AsyncSession,
        timeout: float | None = None,
        actor_id: str | None = None,
        password_hasher: PasswordHasher | None = None,
    ) -> None:
        super().__init__(db, timeout=timeout, actor_id=actor_id)
        self._hasher = password_hasher or PasswordHasher()

    def _detail_options(self) -> tuple:
        return (selectinload(Teacher.branch), selectinload(Teacher.user))

    async def _before_create(self, request: TeacherCreateRequest) -> None:
        if request.employee_code:
            if await self._exists(Teacher, Teacher.employee_code == request.employee_code):
                raise ConstraintViolationError(DUPLICATE_CODE_MESSAGE)

    async def _next_employee_code(self, branch: Branch) -> str:
        sequence = await self._count(Teacher, Teacher.branch_id == branch.id) + 1
        code = format_employee_code(branch.code, sequence)
        while await self._exists(Teacher, Teacher.employee_code == code):
            sequence += 1
            code = format_employee_code(branch.code, sequence)
        return code

    async def _assign_rbac_role(self, user: User, branch_id: str) -> None:
        result = await self._db.execute(
            select(RBACRole).where(RBACRole.role_name == TEACHER_ROLE)
        )
        rbac_role = result.scalar_one_or_none()
        if rbac_role is None:
            logger.warning(
                "RBAC role %s missing; %s gets the legacy role only", TEACHER_ROLE, user.username
            )
            return
        self._db.add(
            UserRole(
                user_id=user.id,
                rbac_role_id=rbac_role.id,
                branch_id=branch_id,
                assigned_by=self._actor_id or user.id,
            )
        )

    async def _build(self, request: TeacherCreateRequest) -> Teacher:
        branch = await self._find(Branch, request.branch_id, "Branch not found")

        user_id = request.user_id
        if request.username and request.password:
            user = await provision_account(
                self._db,
                self._hasher,
                role_name=TEACHER_ROLE,
                username=request.username,
                password=request.password,
                email=request.email,
                first_name=request.first_name,
                last_name=request.last_name,
                phone=request.phone,
                branch_id=branch.id,
            )
            await self._assign_rbac_role(user, branch.id)
            user_id = user.id

        fields = request.model_dump(exclude={"user_id", "username", "password"})
        fields["employee_code"] = request.employee_code or await self._next_employee_code(branch)
        fields["hire_date"] = request.hire_date or utc_today()
        return Teacher(**fields, user_id=user_id)

    async def _before_update(self, entity: Teacher, changes: dict[str, Any]) -> None:
        code = changes.get("employee_code")
        if code and code != entity.employee_code:
            taken = await self._exists(
                Teacher, Teacher.employee_code == code, Teacher.id != entity.id
            )
            if taken:
                raise ConstraintViolationError(DUPLICATE_CODE_MESSAGE)

    async def _courses(self, teacher_id: Any) -> Envelope:
        teacher = await self._load(teacher_id)
        stmt = (
            select(Course)
            .where(Course.teacher_id == teacher.id, Course.is_active.is_(True))
            .order_by(Course.course_name)
        )
        return Envelope.ok(data=await self._all(stmt, CourseResponse.model_validate))

    async def courses(self, teacher_id: str | UUID) -> Envelope:
        """List the active courses taught by a teacher."""
        return await self._guard("courses", lambda: self._courses(teacher_id))
