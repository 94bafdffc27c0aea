# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Role-based access control domain."""

from src.domains.rbac.permissions import has_permission, permissions_for
from src.domains.rbac.service import RBACService

__all__ = ["RBACService", "has_permission", "permissions_for"]
