# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User service for login account management.

This module provides the UserService that handles:
- User CRUD with search over username, email and names
- Unique usernames and emails
- bcrypt hashing of passwords on create

Branch scoping is applied by the caller through the ``branch_id`` list
filter; SuperAdmins list every branch.

Example:
    >>> service = UserService(db_session)
    >>> result = await service.create(
    ...     {"username": "jdoe", "email": "jdoe@koolhub.edu", "password": "s3cret"}
    ... )
"""

import logging
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.domains.auth.password import PasswordHasher
from src.domains.entity.service import (
    ConstraintViolationError,
    EntityService,
    ValidationError,
)
from src.infrastructure.database.models.base import new_uuid
from src.infrastructure.database.models.user import Role, User
from src.models.user import UserCreateRequest, UserDetail, UserResponse, UserUpdateRequest

logger = logging.getLogger(__name__)

DUPLICATE_USER_MESSAGE = "Username or email already exists"
ACCOUNT_EMAIL_DOMAIN = "koolhub.edu"


class UserService(EntityService[User]):
    """Service for managing user accounts. Deletion is physical."""

    model = User
    entity_name = "User"
    search_fields = ("username", "email", "first_name", "last_name")
    create_schema = UserCreateRequest
    update_schema = UserUpdateRequest
    response_schema = UserResponse
    detail_schema = UserDetail

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
        return (selectinload(User.role), selectinload(User.branch))

    async def _build(self, request: UserCreateRequest) -> User:
        try:
            password_hash = self._hasher.hash(request.password)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        return User(**request.model_dump(exclude={"password"}), password_hash=password_hash)

    async def _before_create(self, request: UserCreateRequest) -> None:
        taken = await self._exists(
            User,
            or_(User.username == request.username, User.email == request.email),
        )
        if taken:
            raise ConstraintViolationError(DUPLICATE_USER_MESSAGE)

    async def _before_update(self, entity: User, changes: dict[str, Any]) -> None:
        email = changes.get("email")
        if email and email != entity.email:
            if await self._exists(User, User.email == email, User.id != entity.id):
                raise ConstraintViolationError(DUPLICATE_USER_MESSAGE)


async def provision_account(
    db: AsyncSession,
    hasher: PasswordHasher,
    *,
    role_name: str,
    username: str,
    password: str,
    email: str | None,
    first_name: str | None,
    last_name: str | None,
    phone: str | None,
    branch_id: str,
) -> User:
    """Create the login account behind a student or teacher record.

    The user is added and flushed but not committed, so it shares the
    caller's transaction. Without an email the address defaults to
    ``<username>@koolhub.edu``.

    Raises:
        ConstraintViolationError: If the username or email is taken.
        ValidationError: If the role is not configured or the password is unusable.
    """
    existing = await db.execute(select(User.id).where(User.username == username).limit(1))
    if existing.scalar_one_or_none() is not None:
        raise ConstraintViolationError("Username already exists")

    address = email or f"{username}@{ACCOUNT_EMAIL_DOMAIN}"
    existing = await db.execute(select(User.id).where(User.email == address).limit(1))
    if existing.scalar_one_or_none() is not None:
        raise ConstraintViolationError("Email already exists")

    result = await db.execute(select(Role).where(func.lower(Role.name) == role_name.lower()))
    role = result.scalar_one_or_none()
    if role is None:
        logger.error("Legacy role %s is not seeded", role_name)
        raise ValidationError(f"{role_name} role configuration error")

    try:
        password_hash = hasher.hash(password)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    user = User(
        id=new_uuid(),
        username=username,
        email=address,
        password_hash=password_hash,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        role_id=role.id,
        branch_id=branch_id,
        is_active=True,
    )
    db.add(user)
    await db.flush()
    logger.info("Login account %s provisioned with role %s", username, role.name)
    return user
