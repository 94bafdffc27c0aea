# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for UserService and login account provisioning."""

from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import bcrypt
import pytest

from src.domains.auth.password import PasswordHasher
from src.domains.entity.service import ConstraintViolationError, ValidationError
from src.domains.user.service import UserService, provision_account
from src.infrastructure.database.models.user import User
from src.models.common import ErrorKind


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def service(mock_db: AsyncMock, hasher: PasswordHasher) -> UserService:
    return UserService(mock_db, password_hasher=hasher)


class TestCreateUser:
    """Tests for account creation."""

    @pytest.mark.asyncio
    async def test_create_hashes_password(
        self,
        service: UserService,
        mock_db: AsyncMock,
        mock_result: Any,
        hasher: PasswordHasher,
    ) -> None:
        mock_db.execute.return_value = mock_result(None)

        result = await service.create(
            {"username": "jdoe", "email": "jdoe@koolhub.edu", "password": "s3cret!"}
        )

        assert result.success is True
        assert result.message == "User created successfully"
        assert result.data.username == "jdoe"
        assert not hasattr(result.data, "password_hash")
        stored = mock_db.add.call_args[0][0]
        assert isinstance(stored, User)
        assert stored.password_hash != "s3cret!"
        assert bcrypt.checkpw(b"s3cret!", stored.password_hash.encode()) is True

    @pytest.mark.asyncio
    async def test_duplicate_username_or_email(
        self, service: UserService, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        mock_db.execute.return_value = mock_result("existing-id")

        result = await service.create(
            {"username": "jdoe", "email": "jdoe@koolhub.edu", "password": "s3cret!"}
        )

        assert result.error_kind == ErrorKind.CONSTRAINT_VIOLATION
        assert result.message == "Username or email already exists"
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_email(self, service: UserService, mock_db: AsyncMock) -> None:
        result = await service.create(
            {"username": "jdoe", "email": "not-an-email", "password": "s3cret!"}
        )

        assert result.error_kind == ErrorKind.VALIDATION_ERROR
        assert result.message.startswith("email")
        mock_db.execute.assert_not_awaited()


class TestUpdateUser:
    """Tests for account updates."""

    @pytest.mark.asyncio
    async def test_email_taken_by_another_user(
        self,
        service: UserService,
        mock_db: AsyncMock,
        mock_result: Any,
        sample_user_id: str,
    ) -> None:
        user = SimpleNamespace(id=sample_user_id, email="jdoe@koolhub.edu")
        mock_db.execute.side_effect = [mock_result(user), mock_result("other-id")]

        result = await service.update(sample_user_id, {"email": "taken@koolhub.edu"})

        assert result.error_kind == ErrorKind.CONSTRAINT_VIOLATION
        assert user.email == "jdoe@koolhub.edu"
        mock_db.commit.assert_not_awaited()


class TestProvisionAccount:
    """Tests for the login account created with students and teachers."""

    async def _provision(self, db: AsyncMock, hasher: PasswordHasher, **overrides: Any) -> User:
        fields = {
            "role_name": "Student",
            "username": "ada",
            "password": "analytical",
            "email": None,
            "first_name": "Ada",
            "last_name": "Lovelace",
            "phone": None,
            "branch_id": "550e8400-e29b-41d4-a716-446655440000",
        }
        fields.update(overrides)
        return await provision_account(db, hasher, **fields)

    @pytest.mark.asyncio
    async def test_default_email_and_role(
        self, mock_db: AsyncMock, mock_result: Any, hasher: PasswordHasher
    ) -> None:
        role = SimpleNamespace(id="role-1", name="Student")
        mock_db.execute.side_effect = [mock_result(None), mock_result(None), mock_result(role)]

        user = await self._provision(mock_db, hasher)

        assert user.email == "ada@koolhub.edu"
        assert user.role_id == "role-1"
        assert user.is_active is True
        mock_db.flush.assert_awaited_once()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_email_taken(
        self, mock_db: AsyncMock, mock_result: Any, hasher: PasswordHasher
    ) -> None:
        mock_db.execute.side_effect = [mock_result(None), mock_result("other-id")]

        with pytest.raises(ConstraintViolationError, match="Email already exists"):
            await self._provision(mock_db, hasher, email="ada@example.com")

    @pytest.mark.asyncio
    async def test_unseeded_role(
        self, mock_db: AsyncMock, mock_result: Any, hasher: PasswordHasher
    ) -> None:
        mock_db.execute.side_effect = [mock_result(None), mock_result(None), mock_result(None)]

        with pytest.raises(ValidationError, match="Teacher role configuration error"):
            await self._provision(mock_db, hasher, role_name="Teacher")
