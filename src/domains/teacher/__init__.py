# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher (staff) domain."""

from src.domains.teacher.service import TeacherService

__all__ = ["TeacherService"]
