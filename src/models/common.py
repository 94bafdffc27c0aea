# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared API models: the result envelope, pagination and error kinds.

Every service operation returns an ``Envelope``. Callers branch on
``success`` and, on failure, on ``error_kind``; they never catch
persistence exceptions.

Example:
    >>> Envelope.ok(data={"id": "1"}, message="Branch created successfully")
    >>> Envelope.fail("Branch not found", ErrorKind.NOT_FOUND)
"""

import math
from enum import Enum
from typing import Annotated, Any, Generic, TypeVar
from uuid import UUID

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationInfo,
)

T = TypeVar("T")

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def _canonical_uuid(value: str) -> str:
    try:
        return str(UUID(value))
    except ValueError:
        raise ValueError("must be a valid UUID") from None


UUIDStr = Annotated[str, AfterValidator(_canonical_uuid)]


def default_when_blank(model: type[BaseModel], value: Any, info: ValidationInfo) -> Any:
    """Treat null, a blank string or 0 as if the field had been left out.

    Used as a ``mode="before"`` field validator on create requests, where
    such values fall back to the field default.
    """
    blank = value is None or (isinstance(value, str) and not value.strip())
    if blank or (type(value) is int and value == 0):
        return model.model_fields[info.field_name].default
    return value


class ErrorKind(str, Enum):
    """Closed set of failure categories carried by failed envelopes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"
    PERSISTENCE_UNAVAILABLE = "PERSISTENCE_UNAVAILABLE"


class Pagination(BaseModel):
    """Page metadata attached to every successful list envelope."""

    page: int = Field(..., ge=1, description="1-based page number")
    limit: int = Field(..., ge=1, description="Page size")
    total: int = Field(..., ge=0, description="Rows matching the filter")
    pages: int = Field(..., ge=0, description="ceil(total / limit)")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))


class Envelope(BaseModel, Generic[T]):
    """Uniform result of every service operation.

    Attributes:
        success: Whether the operation succeeded.
        data: Payload on success; always absent on failure.
        message: Human-readable outcome, always present on failure.
        pagination: Present on successful list operations.
        error_kind: Failure category, present on failure.
    """

    success: bool
    data: T | None = None
    message: str | None = None
    pagination: Pagination | None = None
    error_kind: ErrorKind | None = None

    @classmethod
    def ok(
        cls,
        data: Any = None,
        message: str | None = None,
        pagination: Pagination | None = None,
    ) -> "Envelope[Any]":
        return cls(success=True, data=data, message=message, pagination=pagination)

    @classmethod
    def fail(cls, message: str, kind: ErrorKind) -> "Envelope[Any]":
        return cls(success=False, message=message, error_kind=kind)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for an HTTP body, dropping absent keys."""
        return self.model_dump(mode="json", exclude_none=True)


class PersonSummary(BaseModel):
    """Minimal projection of a student or teacher for embedding in other records."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str


class UserBrief(BaseModel):
    """Minimal projection of a user for embedding in other records."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str


class StudentBrief(BaseModel):
    """Student projection used by attendance and grade listings."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    student_code: str
