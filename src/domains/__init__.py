# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the KoolHub backend.

Each domain module provides a service built on the generic entity
service; every public operation returns a result envelope.

Domains:
    entity: Generic paginated CRUD with the envelope boundary.
    auth: JWT tokens and password hashing.
    branch, user, student, teacher, course: Core records.
    attendance, grade: Daily attendance and assessment grades.
    announcement, messaging: Course announcements and direct messages.
    reporting: Branch summary reports.
    rbac: Roles, permissions and the permission check.
"""
