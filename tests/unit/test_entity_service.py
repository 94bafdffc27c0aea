# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the generic entity service contract.

BranchService is used as the concrete service; the behaviour under test
(envelopes, pagination, validation messages, error mapping) is shared by
every entity service.
"""

import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError, OperationalError

from src.domains.branch.service import BranchService
from src.domains.entity import coerce_positive_int, contains_pattern, describe_validation_error
from src.infrastructure.database.models.branch import Branch
from src.models.common import Envelope, ErrorKind, Pagination

BRANCH_ID = "550e8400-e29b-41d4-a716-446655440000"


def compile_clause(clause: Any) -> Any:
    return clause.compile(dialect=postgresql.dialect())


def make_branch(**overrides: Any) -> SimpleNamespace:
    """Build a branch row as the ORM would return it."""
    now = datetime.now(timezone.utc)
    fields = {
        "id": BRANCH_ID,
        "name": "Main Campus",
        "code": "MAIN",
        "city": "Istanbul",
        "state": None,
        "country": "Turkey",
        "address": None,
        "postal_code": None,
        "phone": None,
        "email": None,
        "website": None,
        "principal_name": None,
        "principal_email": None,
        "timezone": "UTC",
        "currency": "USD",
        "is_active": True,
        "created_at": now,
        "updated_at": now,
        "users": [],
        "students": [],
        "teachers": [],
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestEnvelope:
    """Tests for the result envelope."""

    def test_ok_envelope_serializes_without_absent_keys(self) -> None:
        body = Envelope.ok(data={"id": "1"}).to_dict()

        assert body == {"success": True, "data": {"id": "1"}}

    def test_fail_envelope_has_message_and_kind(self) -> None:
        body = Envelope.fail("Branch not found", ErrorKind.NOT_FOUND).to_dict()

        assert body == {
            "success": False,
            "message": "Branch not found",
            "error_kind": "NOT_FOUND",
        }

    @pytest.mark.parametrize(
        "total,limit,pages",
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 10, 3)],
    )
    def test_pagination_pages(self, total: int, limit: int, pages: int) -> None:
        assert Pagination.build(page=1, limit=limit, total=total).pages == pages


class TestCoercePositiveInt:
    """Tests for lenient query parameter parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, 7),
            ("3", 3),
            (3, 3),
            ("abc", 7),
            ("0", 7),
            ("-5", 7),
            (True, 7),
            ("2.5", 7),
        ],
    )
    def test_coerce(self, value: Any, expected: int) -> None:
        assert coerce_positive_int(value, 7) == expected


class TestDescribeValidationError:
    """Tests for validation message rendering."""

    class Sample(BaseModel):
        name: str = Field(..., min_length=1)
        code: str
        age: int = 0

    def test_missing_fields_listed_together(self) -> None:
        with pytest.raises(SchemaValidationError) as exc_info:
            self.Sample.model_validate({})

        assert describe_validation_error(exc_info.value) == "name, code required"

    def test_null_field_counts_as_missing(self) -> None:
        with pytest.raises(SchemaValidationError) as exc_info:
            self.Sample.model_validate({"name": "x", "code": None})

        assert describe_validation_error(exc_info.value) == "code required"

    def test_invalid_value_is_described_per_field(self) -> None:
        with pytest.raises(SchemaValidationError) as exc_info:
            self.Sample.model_validate({"name": "x", "code": "y", "age": "old"})

        assert describe_validation_error(exc_info.value).startswith("age: ")


class TestEntityServiceCreate:
    """Tests for create through the envelope boundary."""

    @pytest.mark.asyncio
    async def test_create_success(
        self,
        mock_db: AsyncMock,
        mock_result: Any,
        sample_branch_data: dict[str, Any],
    ) -> None:
        mock_db.execute.return_value = mock_result(None)
        service = BranchService(mock_db)

        result = await service.create(sample_branch_data)

        assert result.success is True
        assert result.message == "Branch created successfully"
        assert result.data.code == "MAIN"
        assert result.data.timezone == "UTC"
        assert result.data.currency == "USD"
        mock_db.add.assert_called_once()
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_ignores_unknown_fields(
        self,
        mock_db: AsyncMock,
        mock_result: Any,
        sample_branch_data: dict[str, Any],
    ) -> None:
        mock_db.execute.return_value = mock_result(None)
        service = BranchService(mock_db)

        result = await service.create({**sample_branch_data, "favourite_colour": "blue"})

        assert result.success is True
        added = mock_db.add.call_args[0][0]
        assert not hasattr(added, "favourite_colour")

    @pytest.mark.asyncio
    async def test_create_missing_required_fields(self, mock_db: AsyncMock) -> None:
        service = BranchService(mock_db)

        result = await service.create({"city": "Ankara"})

        assert result.success is False
        assert result.error_kind == ErrorKind.VALIDATION_ERROR
        assert result.message == "name, code required"
        mock_db.execute.assert_not_awaited()
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_blank_name_is_required(self, mock_db: AsyncMock) -> None:
        service = BranchService(mock_db)

        result = await service.create({"name": "   ", "code": "MAIN"})

        assert result.error_kind == ErrorKind.VALIDATION_ERROR
        assert result.message == "name required"

    @pytest.mark.asyncio
    async def test_create_without_payload(self, mock_db: AsyncMock) -> None:
        service = BranchService(mock_db)

        result = await service.create(None)

        assert result.error_kind == ErrorKind.VALIDATION_ERROR

    @pytest.mark.asyncio
    async def test_create_duplicate_code(
        self,
        mock_db: AsyncMock,
        mock_result: Any,
        sample_branch_data: dict[str, Any],
    ) -> None:
        mock_db.execute.return_value = mock_result(BRANCH_ID)
        service = BranchService(mock_db)

        result = await service.create(sample_branch_data)

        assert result.success is False
        assert result.error_kind == ErrorKind.CONSTRAINT_VIOLATION
        assert result.message == "A branch with this code already exists"
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_integrity_error_on_commit(
        self,
        mock_db: AsyncMock,
        mock_result: Any,
        sample_branch_data: dict[str, Any],
    ) -> None:
        mock_db.execute.return_value = mock_result(None)
        mock_db.commit.side_effect = IntegrityError(
            "INSERT INTO branches",
            {},
            Exception('duplicate key value violates unique constraint "uq_branches_code"'),
        )
        service = BranchService(mock_db)

        result = await service.create(sample_branch_data)

        assert result.error_kind == ErrorKind.CONSTRAINT_VIOLATION
        assert result.message.startswith("duplicate key value")
        mock_db.rollback.assert_awaited_once()


class TestEntityServiceGet:
    """Tests for get."""

    @pytest.mark.asyncio
    async def test_get_success(self, mock_db: AsyncMock, mock_result: Any) -> None:
        mock_db.execute.return_value = mock_result(make_branch())
        service = BranchService(mock_db)

        result = await service.get(BRANCH_ID)

        assert result.success is True
        assert result.data.id == BRANCH_ID
        assert result.data.users == []

    @pytest.mark.asyncio
    async def test_get_not_found(self, mock_db: AsyncMock, mock_result: Any) -> None:
        mock_db.execute.return_value = mock_result(None)
        service = BranchService(mock_db)

        result = await service.get(BRANCH_ID)

        assert result.success is False
        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.message == "Branch not found"
        assert result.data is None

    @pytest.mark.asyncio
    async def test_get_malformed_id_is_not_found(self, mock_db: AsyncMock) -> None:
        service = BranchService(mock_db)

        result = await service.get("not-a-uuid")

        assert result.error_kind == ErrorKind.NOT_FOUND
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_database_unavailable(self, mock_db: AsyncMock) -> None:
        mock_db.execute.side_effect = OperationalError(
            "SELECT", {}, Exception("connection refused")
        )
        service = BranchService(mock_db)

        result = await service.get(BRANCH_ID)

        assert result.error_kind == ErrorKind.PERSISTENCE_UNAVAILABLE
        assert result.message == "Database unavailable: connection refused"
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_timeout(self, mock_db: AsyncMock) -> None:
        async def never_answers(*args: Any, **kwargs: Any) -> MagicMock:
            await asyncio.sleep(5)
            return MagicMock()

        mock_db.execute.side_effect = never_answers
        service = BranchService(mock_db, timeout=0.01)

        result = await service.get(BRANCH_ID)

        assert result.success is False
        assert result.error_kind == ErrorKind.PERSISTENCE_UNAVAILABLE
        assert result.message == "Branch get timed out"


class TestEntityServiceList:
    """Tests for paginated listing."""

    @pytest.mark.asyncio
    async def test_list_pagination(self, mock_db: AsyncMock, mock_result: Any) -> None:
        rows = [make_branch(code=f"B{i}") for i in range(10)]
        mock_db.execute.side_effect = [mock_result(25), mock_result(rows=rows)]
        service = BranchService(mock_db)

        result = await service.list(page=2, limit=10)

        assert result.success is True
        assert len(result.data) == 10
        assert result.pagination == Pagination(page=2, limit=10, total=25, pages=3)

    @pytest.mark.asyncio
    async def test_list_empty(self, mock_db: AsyncMock, mock_result: Any) -> None:
        mock_db.execute.side_effect = [mock_result(0), mock_result(rows=[])]
        service = BranchService(mock_db)

        result = await service.list(search="nowhere")

        assert result.success is True
        assert result.data == []
        assert result.pagination.total == 0
        assert result.pagination.pages == 0

    @pytest.mark.asyncio
    async def test_list_invalid_paging_falls_back_to_defaults(
        self, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        mock_db.execute.side_effect = [mock_result(0), mock_result(rows=[])]
        service = BranchService(mock_db)

        result = await service.list(page="abc", limit="-5")

        assert result.pagination.page == 1
        assert result.pagination.limit == 20

    @pytest.mark.asyncio
    async def test_list_caps_page_size(self, mock_db: AsyncMock, mock_result: Any) -> None:
        mock_db.execute.side_effect = [mock_result(0), mock_result(rows=[])]
        service = BranchService(mock_db)

        result = await service.list(limit=5000)

        assert result.pagination.limit == 100


class TestEntityServiceUpdate:
    """Tests for update."""

    @pytest.mark.asyncio
    async def test_update_applies_whitelisted_fields(
        self, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        branch = make_branch()
        mock_db.execute.return_value = mock_result(branch)
        service = BranchService(mock_db)

        result = await service.update(
            BRANCH_ID,
            {"name": "North Campus", "id": "something-else", "created_at": "yesterday"},
        )

        assert result.success is True
        assert result.message == "Branch updated successfully"
        assert branch.name == "North Campus"
        assert branch.id == BRANCH_ID
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_null_required_field_is_ignored(
        self, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        branch = make_branch()
        mock_db.execute.return_value = mock_result(branch)
        service = BranchService(mock_db)

        result = await service.update(BRANCH_ID, {"name": None, "city": None})

        assert result.success is True
        assert branch.name == "Main Campus"
        assert branch.city is None

    @pytest.mark.asyncio
    async def test_update_to_taken_code(self, mock_db: AsyncMock, mock_result: Any) -> None:
        mock_db.execute.side_effect = [mock_result(make_branch()), mock_result("other-id")]
        service = BranchService(mock_db)

        result = await service.update(BRANCH_ID, {"code": "NORTH"})

        assert result.error_kind == ErrorKind.CONSTRAINT_VIOLATION
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_not_found(self, mock_db: AsyncMock, mock_result: Any) -> None:
        mock_db.execute.return_value = mock_result(None)
        service = BranchService(mock_db)

        result = await service.update(BRANCH_ID, {"name": "North"})

        assert result.error_kind == ErrorKind.NOT_FOUND


class TestEntityServiceDelete:
    """Tests for delete."""

    @pytest.mark.asyncio
    async def test_delete_success(self, mock_db: AsyncMock, mock_result: Any) -> None:
        branch = make_branch()
        mock_db.execute.side_effect = [
            mock_result(branch),
            mock_result(0),
            mock_result(0),
            mock_result(0),
            mock_result(0),
        ]
        service = BranchService(mock_db)

        result = await service.delete(BRANCH_ID)

        assert result.success is True
        assert result.message == "Branch deleted successfully"
        mock_db.delete.assert_awaited_once_with(branch)

    @pytest.mark.asyncio
    async def test_delete_refused_while_dependents_exist(
        self, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        mock_db.execute.side_effect = [
            mock_result(make_branch()),
            mock_result(2),
            mock_result(0),
            mock_result(1),
            mock_result(0),
        ]
        service = BranchService(mock_db)

        result = await service.delete(BRANCH_ID)

        assert result.error_kind == ErrorKind.CONSTRAINT_VIOLATION
        assert result.message == "Cannot delete branch: it still has 2 users, 1 teacher"
        mock_db.delete.assert_not_awaited()


class TestSearchPredicate:
    """The list page and its total are filtered by the same predicate."""

    @pytest.mark.parametrize(
        "term,pattern",
        [
            ("Main", "%Main%"),
            ("_", r"%\_%"),
            ("50%", r"%50\%%"),
            ("a\\b", r"%a\\b%"),
        ],
    )
    def test_contains_pattern_escapes_wildcards(self, term: str, pattern: str) -> None:
        assert contains_pattern(term) == pattern

    async def _list_statements(
        self, mock_db: AsyncMock, mock_result: Any, search: str
    ) -> tuple[Any, Any]:
        mock_db.execute.side_effect = [mock_result(0), mock_result(rows=[])]
        service = BranchService(mock_db)

        result = await service.list(page=1, limit=10, search=search)

        assert result.success is True
        count_stmt, page_stmt = (call.args[0] for call in mock_db.execute.await_args_list)
        return count_stmt, page_stmt

    @pytest.mark.asyncio
    async def test_count_and_page_share_where_clause(
        self, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        count_stmt, page_stmt = await self._list_statements(mock_db, mock_result, "Main")

        counted = count_stmt.get_final_froms()[0].element.whereclause
        count_where = compile_clause(counted)
        page_where = compile_clause(page_stmt.whereclause)
        assert str(count_where) == str(page_where)
        assert count_where.params == page_where.params

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_over_name_code_city(
        self, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        _, page_stmt = await self._list_statements(mock_db, mock_result, "Main")

        where = compile_clause(page_stmt.whereclause)
        sql = str(where)
        assert sql.count("ILIKE") == 3
        for column in ("name", "code", "city"):
            assert f"branches.{column} ILIKE" in sql
        assert set(where.params.values()) == {"%Main%"}

    @pytest.mark.asyncio
    async def test_search_wildcards_match_literally(
        self, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        count_stmt, page_stmt = await self._list_statements(mock_db, mock_result, "_")

        where = compile_clause(page_stmt.whereclause)
        assert "ESCAPE" in str(where)
        assert set(where.params.values()) == {r"%\_%"}
        assert r"%\_%" in compile_clause(count_stmt).params.values()

    @pytest.mark.asyncio
    async def test_blank_search_adds_no_filter(
        self, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        _, page_stmt = await self._list_statements(mock_db, mock_result, "   ")

        assert page_stmt.whereclause is None


class TestBranchLifecycle:
    """Create, find, delete, then miss a branch."""

    @pytest.mark.asyncio
    async def test_main_campus_round_trip(self, mock_db: AsyncMock, mock_result: Any) -> None:
        service = BranchService(mock_db)

        mock_db.execute.side_effect = [mock_result(None)]
        created = await service.create({"name": "Main Campus", "code": "MAIN"})
        assert created.success is True
        assert created.data.timezone == "UTC"
        assert created.data.currency == "USD"
        stored = mock_db.add.call_args[0][0]
        assert isinstance(stored, Branch)

        mock_db.execute.side_effect = [mock_result(1), mock_result(rows=[stored])]
        listed = await service.list(1, 10, "Main")
        assert listed.pagination == Pagination(page=1, limit=10, total=1, pages=1)
        assert [branch.code for branch in listed.data] == ["MAIN"]
        assert all("main" in branch.name.lower() for branch in listed.data)

        mock_db.execute.side_effect = [mock_result(stored)] + [mock_result(0)] * 4
        deleted = await service.delete(stored.id)
        assert deleted.message == "Branch deleted successfully"
        mock_db.delete.assert_awaited_once_with(stored)

        mock_db.execute.side_effect = [mock_result(None)]
        missing = await service.get(stored.id)
        assert missing.error_kind == ErrorKind.NOT_FOUND
        assert missing.message == "Branch not found"


class TestCreateDefaults:
    """Null or blank defaulted fields fall back to their defaults."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("blank", [None, "", "  "])
    async def test_blank_timezone_and_currency(
        self, mock_db: AsyncMock, mock_result: Any, blank: Any
    ) -> None:
        mock_db.execute.return_value = mock_result(None)
        service = BranchService(mock_db)

        result = await service.create(
            {"name": "Main Campus", "code": "MAIN", "timezone": blank, "currency": blank}
        )

        assert result.success is True
        assert result.data.timezone == "UTC"
        assert result.data.currency == "USD"

    @pytest.mark.asyncio
    async def test_state_province_is_stored_as_state(
        self, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        mock_db.execute.return_value = mock_result(None)
        service = BranchService(mock_db)

        result = await service.create(
            {"name": "Main Campus", "code": "MAIN", "state_province": "Punjab"}
        )

        assert result.data.state == "Punjab"

    @pytest.mark.asyncio
    async def test_update_accepts_state_province(
        self, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        branch = make_branch()
        mock_db.execute.return_value = mock_result(branch)
        service = BranchService(mock_db)

        result = await service.update(BRANCH_ID, {"state_province": "Sindh"})

        assert result.success is True
        assert branch.state == "Sindh"

    @pytest.mark.asyncio
    async def test_update_null_defaulted_field_is_ignored(
        self, mock_db: AsyncMock, mock_result: Any
    ) -> None:
        branch = make_branch(timezone="Asia/Karachi")
        mock_db.execute.return_value = mock_result(branch)
        service = BranchService(mock_db)

        result = await service.update(BRANCH_ID, {"timezone": None})

        assert result.success is True
        assert branch.timezone == "Asia/Karachi"
