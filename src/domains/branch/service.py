# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Branch service for campus management.

This module provides the BranchService that handles:
- Branch CRUD with search over name, code and city
- Unique branch codes
- Refusing to delete a branch that still owns records

Example:
    >>> service = BranchService(db_session)
    >>> created = await service.create({"name": "Main Campus", "code": "MAIN"})
    >>> created.data.timezone
    'UTC'
"""

import logging
from typing import Any

from sqlalchemy.orm import selectinload

from src.domains.entity.service import ConstraintViolationError, EntityService
from src.infrastructure.database.models.branch import Branch
from src.infrastructure.database.models.course import Course
from src.infrastructure.database.models.student import Student
from src.infrastructure.database.models.teacher import Teacher
from src.infrastructure.database.models.user import User
from src.models.branch import (
    BranchCreateRequest,
    BranchDetail,
    BranchResponse,
    BranchUpdateRequest,
)

logger = logging.getLogger(__name__)

DUPLICATE_CODE_MESSAGE = "A branch with this code already exists"


class BranchService(EntityService[Branch]):
    """Service for managing branches.

    Deletion is physical and is refused while users, students, teachers or
    courses reference the branch.
    """

    model = Branch
    entity_name = "Branch"
    search_fields = ("name", "code", "city")
    create_schema = BranchCreateRequest
    update_schema = BranchUpdateRequest
    response_schema = BranchResponse
    detail_schema = BranchDetail

    def _detail_options(self) -> tuple:
        return (
            selectinload(Branch.users),
            selectinload(Branch.students),
            selectinload(Branch.teachers),
        )

    async def _before_create(self, request: BranchCreateRequest) -> None:
        if await self._exists(Branch, Branch.code == request.code):
            raise ConstraintViolationError(DUPLICATE_CODE_MESSAGE)

    async def _before_update(self, entity: Branch, changes: dict[str, Any]) -> None:
        code = changes.get("code")
        if code and code != entity.code:
            if await self._exists(Branch, Branch.code == code, Branch.id != entity.id):
                raise ConstraintViolationError(DUPLICATE_CODE_MESSAGE)

    async def _before_delete(self, entity: Branch) -> None:
        dependents = []
        for model, label in (
            (User, "user"),
            (Student, "student"),
            (Teacher, "teacher"),
            (Course, "course"),
        ):
            count = await self._count(model, model.branch_id == entity.id)
            if count:
                dependents.append(f"{count} {label}{'s' if count != 1 else ''}")

        if dependents:
            logger.info("Branch %s delete refused: %s", entity.id, ", ".join(dependents))
            raise ConstraintViolationError(
                f"Cannot delete branch: it still has {', '.join(dependents)}"
            )
