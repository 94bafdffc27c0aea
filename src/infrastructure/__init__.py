# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer.

This package contains the PostgreSQL connection management, ORM models,
Alembic migrations and development seed data.
"""
