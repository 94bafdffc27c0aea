# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User account domain."""

from src.domains.user.service import UserService, provision_account

__all__ = ["UserService", "provision_account"]
