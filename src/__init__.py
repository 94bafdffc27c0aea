"""KoolHub Backend.

Multi-branch school management platform: branches, user accounts,
students, teachers, courses, attendance, grading, announcements,
direct messaging, reporting and role-based access control.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
