# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for ReportingService."""

from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest

from src.domains.reporting.service import ReportingService, attendance_rate
from src.infrastructure.database.models.report import Report
from src.models.common import ErrorKind


@pytest.fixture
def service(mock_db: AsyncMock, sample_user_id: str) -> ReportingService:
    return ReportingService(mock_db, actor_id=sample_user_id)


@pytest.fixture
def branch(sample_branch_id: str) -> SimpleNamespace:
    return SimpleNamespace(id=sample_branch_id, name="Main Campus")


class TestAttendanceRate:
    """Tests for the attendance rate calculation."""

    @pytest.mark.parametrize(
        "present,total,expected",
        [(0, 0, 0.0), (8, 10, 80.0), (1, 3, 33.33), (3, 3, 100.0)],
    )
    def test_rate(self, present: int, total: int, expected: float) -> None:
        assert attendance_rate(present, total) == expected


class TestGenerateReport:
    """Tests for report generation."""

    @pytest.mark.asyncio
    async def test_attendance_summary(
        self,
        service: ReportingService,
        mock_db: AsyncMock,
        mock_result: Any,
        branch: SimpleNamespace,
        sample_user_id: str,
    ) -> None:
        mock_db.execute.side_effect = [
            mock_result(branch),
            mock_result(rows=[("present", 8), ("absent", 1), ("late", 1)]),
        ]

        result = await service.generate(
            {
                "branch_id": branch.id,
                "report_type": "attendance_summary",
                "start_date": "2025-03-01",
                "end_date": "2025-03-31",
            },
            generated_by=sample_user_id,
        )

        assert result.success is True
        assert result.message == "Attendance Report generated"
        assert result.data.title == "Attendance Report - Main Campus (2025-03-01 to 2025-03-31)"
        assert result.data.generated_by == sample_user_id
        summary = result.data.summary
        assert summary["total_records"] == 10
        assert summary["present_count"] == 8
        assert summary["absent_count"] == 1
        assert summary["by_status"]["excused"] == 0
        assert summary["attendance_rate"] == 80.0
        assert isinstance(mock_db.add.call_args[0][0], Report)

    @pytest.mark.asyncio
    async def test_empty_attendance_range_has_zero_rate(
        self,
        service: ReportingService,
        mock_db: AsyncMock,
        mock_result: Any,
        branch: SimpleNamespace,
    ) -> None:
        mock_db.execute.side_effect = [mock_result(branch), mock_result(rows=[])]

        result = await service.generate(
            {
                "branch_id": branch.id,
                "report_type": "attendance_summary",
                "start_date": "2025-03-01",
                "end_date": "2025-03-31",
            }
        )

        assert result.data.summary["total_records"] == 0
        assert result.data.summary["attendance_rate"] == 0.0

    @pytest.mark.asyncio
    async def test_teacher_performance(
        self,
        service: ReportingService,
        mock_db: AsyncMock,
        mock_result: Any,
        branch: SimpleNamespace,
        sample_teacher_id: str,
    ) -> None:
        mock_db.execute.side_effect = [
            mock_result(branch),
            mock_result(rows=[(sample_teacher_id, "Alan", "Turing", 2, 35)]),
        ]

        result = await service.create(
            {"branch_id": branch.id, "report_type": "teacher_performance"}
        )

        assert result.success is True
        assert result.data.report_format == "pdf"
        assert result.data.summary == {
            "teachers": 1,
            "rows": [
                {
                    "teacher_id": sample_teacher_id,
                    "name": "Alan Turing",
                    "courses": 2,
                    "enrollments": 35,
                }
            ],
        }

    @pytest.mark.asyncio
    async def test_student_progress_fills_missing_statuses(
        self,
        service: ReportingService,
        mock_db: AsyncMock,
        mock_result: Any,
        branch: SimpleNamespace,
    ) -> None:
        mock_db.execute.side_effect = [
            mock_result(branch),
            mock_result(rows=[("enrolled", 12), ("dropped", 3)]),
        ]

        result = await service.generate(
            {"branch_id": branch.id, "report_type": "student_progress"}
        )

        assert result.data.summary["enrollments"] == 15
        assert result.data.summary["by_status"] == {"enrolled": 12, "dropped": 3, "completed": 0}

    @pytest.mark.asyncio
    async def test_attendance_summary_needs_dates(
        self, service: ReportingService, branch: SimpleNamespace
    ) -> None:
        result = await service.generate(
            {"branch_id": branch.id, "report_type": "attendance_summary"}
        )

        assert result.error_kind == ErrorKind.VALIDATION_ERROR
        assert "start_date and end_date are required" in result.message

    @pytest.mark.asyncio
    async def test_unknown_report_type(
        self, service: ReportingService, branch: SimpleNamespace
    ) -> None:
        result = await service.generate({"branch_id": branch.id, "report_type": "gossip"})

        assert result.error_kind == ErrorKind.VALIDATION_ERROR
        assert result.message.startswith("report_type")

    @pytest.mark.asyncio
    async def test_unknown_branch(
        self,
        service: ReportingService,
        mock_db: AsyncMock,
        mock_result: Any,
        sample_branch_id: str,
    ) -> None:
        mock_db.execute.return_value = mock_result(None)

        result = await service.generate(
            {"branch_id": sample_branch_id, "report_type": "student_progress"}
        )

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.message == "Branch not found"


class TestReportImmutability:
    """Reports cannot be edited after generation."""

    @pytest.mark.asyncio
    async def test_update_refused(
        self, service: ReportingService, mock_db: AsyncMock, sample_branch_id: str
    ) -> None:
        result = await service.update(sample_branch_id, {"title": "Edited"})

        assert result.success is False
        assert result.error_kind == ErrorKind.VALIDATION_ERROR
        mock_db.execute.assert_not_awaited()
