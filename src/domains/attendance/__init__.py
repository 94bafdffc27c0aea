# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance domain."""

from src.domains.attendance.service import AttendanceService

__all__ = ["AttendanceService"]
