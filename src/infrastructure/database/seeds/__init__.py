# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database seed package.

Seeds legacy roles, permissions, system RBAC roles and the first
SuperAdmin account.
"""

from src.infrastructure.database.seeds.initial import seed_database

__all__ = ["seed_database"]
