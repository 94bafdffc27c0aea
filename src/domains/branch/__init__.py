# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Branch domain."""

from src.domains.branch.service import BranchService

__all__ = ["BranchService"]
