# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    branches: Branch (campus) management endpoints.
    users: Login account endpoints.
    students: Student record endpoints.
    teachers: Teacher record endpoints.
    courses: Course and enrollment endpoints.
    attendance: Attendance marking endpoints.
    grades: Grading endpoints.
    announcements: Course announcement endpoints.
    messages: Direct messaging endpoints.
    reports: Report generation endpoints.
    rbac: Roles, permissions and assignments.
"""

from fastapi import APIRouter

from src.api.v1 import (
    announcements,
    attendance,
    branches,
    courses,
    grades,
    messages,
    rbac,
    reports,
    students,
    teachers,
    users,
)

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(branches.router, prefix="/branches", tags=["Branches"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(students.router, prefix="/students", tags=["Students"])
router.include_router(teachers.router, prefix="/teachers", tags=["Teachers"])
router.include_router(courses.router, prefix="/courses", tags=["Courses"])
router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
router.include_router(grades.router, prefix="/grades", tags=["Grades"])
router.include_router(announcements.router, prefix="/announcements", tags=["Announcements"])
router.include_router(messages.router, prefix="/messages", tags=["Messages"])
router.include_router(reports.router, prefix="/reports", tags=["Reports"])
router.include_router(rbac.router, prefix="/rbac", tags=["RBAC"])

__all__ = ["router"]
