# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Generic entity service shared by all resource domains."""

from src.domains.entity.service import (
    ConstraintViolationError,
    EntityService,
    EntityServiceError,
    NotFoundError,
    PersistenceUnavailableError,
    ServiceBase,
    ValidationError,
    coerce_positive_int,
    contains_pattern,
    describe_validation_error,
)

__all__ = [
    "EntityService",
    "ServiceBase",
    "EntityServiceError",
    "ValidationError",
    "NotFoundError",
    "ConstraintViolationError",
    "PersistenceUnavailableError",
    "coerce_positive_int",
    "contains_pattern",
    "describe_validation_error",
]
