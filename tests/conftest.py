# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests (services against a mocked AsyncSession)
- Integration tests (the FastAPI app with the session dependency overridden)
"""

from collections.abc import Callable, Generator
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import inspect as sa_inspect

from src.core.config import clear_settings_cache

# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


# =============================================================================
# Settings Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Re-read settings for every test so env patches never leak."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Database Fixtures
# =============================================================================


def create_mock_result(value: Any = None, rows: list[Any] | None = None) -> MagicMock:
    """Create a mock result object shaped like an SQLAlchemy Result."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar.return_value = value
    result.scalars.return_value.all.return_value = rows if rows is not None else []
    result.all.return_value = rows if rows is not None else []
    return result


@pytest.fixture
def mock_result() -> Callable[..., MagicMock]:
    """Factory for mock query results."""
    return create_mock_result


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create a mock async database session.

    ``refresh`` fills in the id and timestamps the database would have
    generated and applies scalar column defaults, so freshly created ORM
    objects validate into responses.
    """
    db = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    db.delete = AsyncMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.execute = AsyncMock()

    async def refresh(entity: Any, *args: Any, **kwargs: Any) -> None:
        now = datetime.now(timezone.utc)
        mapper = sa_inspect(type(entity), raiseerr=False)
        for attr in mapper.column_attrs if mapper is not None else ():
            default = attr.columns[0].default
            unset = getattr(entity, attr.key, None) is None
            if unset and default is not None and default.is_scalar:
                setattr(entity, attr.key, default.arg)
        if getattr(entity, "id", None) is None:
            entity.id = SAMPLE_IDS["generated"]
        if getattr(entity, "created_at", None) is None:
            entity.created_at = now
        entity.updated_at = now

    db.refresh = AsyncMock(side_effect=refresh)
    return db


# =============================================================================
# Helper Fixtures
# =============================================================================

SAMPLE_IDS = {
    "branch": "550e8400-e29b-41d4-a716-446655440000",
    "student": "550e8400-e29b-41d4-a716-446655440001",
    "teacher": "550e8400-e29b-41d4-a716-446655440002",
    "course": "550e8400-e29b-41d4-a716-446655440003",
    "user": "550e8400-e29b-41d4-a716-446655440004",
    "generated": "550e8400-e29b-41d4-a716-4466554400ff",
}


@pytest.fixture
def sample_branch_id() -> str:
    """Provide a sample branch ID for testing."""
    return SAMPLE_IDS["branch"]


@pytest.fixture
def sample_student_id() -> str:
    """Provide a sample student ID for testing."""
    return SAMPLE_IDS["student"]


@pytest.fixture
def sample_teacher_id() -> str:
    return SAMPLE_IDS["teacher"]


@pytest.fixture
def sample_course_id() -> str:
    return SAMPLE_IDS["course"]


@pytest.fixture
def sample_user_id() -> str:
    return SAMPLE_IDS["user"]


@pytest.fixture
def sample_branch_data() -> dict[str, Any]:
    """Provide a valid branch create payload."""
    return {
        "name": "Main Campus",
        "code": "MAIN",
        "city": "Istanbul",
        "country": "Turkey",
    }
