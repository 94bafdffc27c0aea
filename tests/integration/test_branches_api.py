# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the branch API and HTTP envelope mapping.

Requests go through the full application (middleware, routing, error
handlers) with the database session dependency replaced by a mock.
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from src.api.app import create_app
from src.api.dependencies import get_db
from src.core.config import get_settings
from src.domains.auth.jwt import JWTManager

pytestmark = pytest.mark.integration

BRANCH_ID = "550e8400-e29b-41d4-a716-446655440000"


@pytest.fixture
def app(mock_db: AsyncMock) -> FastAPI:
    application = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncMock, None]:
        yield mock_db

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    # Not entered as a context manager, so the lifespan (engine setup) never runs.
    return TestClient(app)


@pytest.fixture
def auth_headers(sample_user_id: str) -> dict[str, str]:
    token = JWTManager(get_settings().jwt).create_access_token(
        sample_user_id, username="root", role="SuperAdmin"
    )
    return {"Authorization": f"Bearer {token}"}


def make_branch(**overrides: Any) -> SimpleNamespace:
    now = datetime.now(timezone.utc)
    fields = {
        "id": BRANCH_ID,
        "name": "Main Campus",
        "code": "MAIN",
        "city": None,
        "state": None,
        "country": None,
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


class TestAuthentication:
    """Protected routes without a valid token."""

    def test_missing_token_is_401_envelope(self, client: TestClient) -> None:
        response = client.get("/api/v1/branches")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Not authenticated",
            "error_kind": "VALIDATION_ERROR",
        }
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_health_is_public(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_readiness_without_database(self, client: TestClient) -> None:
        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["ready"] is False


class TestBranchEndpoints:
    """CRUD through HTTP."""

    def test_list_defaults_to_ten_per_page(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        mock_db: AsyncMock,
        mock_result: Any,
    ) -> None:
        mock_db.execute.side_effect = [mock_result(1), mock_result(rows=[make_branch()])]

        response = client.get("/api/v1/branches?page=abc", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"][0]["code"] == "MAIN"
        assert body["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}

    def test_create_returns_201(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        mock_db: AsyncMock,
        mock_result: Any,
        sample_branch_data: dict[str, Any],
    ) -> None:
        mock_db.execute.return_value = mock_result(None)

        response = client.post("/api/v1/branches", json=sample_branch_data, headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Branch created successfully"
        assert body["data"]["code"] == "MAIN"

    def test_create_missing_fields_is_400(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        response = client.post("/api/v1/branches", json={"city": "Ankara"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "name, code required",
            "error_kind": "VALIDATION_ERROR",
        }

    def test_create_with_non_object_body_is_400(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        response = client.post("/api/v1/branches", json=["MAIN"], headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error_kind"] == "VALIDATION_ERROR"

    def test_duplicate_code_is_400(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        mock_db: AsyncMock,
        mock_result: Any,
        sample_branch_data: dict[str, Any],
    ) -> None:
        mock_db.execute.return_value = mock_result(BRANCH_ID)

        response = client.post("/api/v1/branches", json=sample_branch_data, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error_kind"] == "CONSTRAINT_VIOLATION"

    def test_get_unknown_branch_is_404(
        self, client: TestClient, auth_headers: dict[str, str], mock_db: AsyncMock
    ) -> None:
        response = client.get("/api/v1/branches/not-a-uuid", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "message": "Branch not found",
            "error_kind": "NOT_FOUND",
        }
        mock_db.execute.assert_not_awaited()

    def test_update_branch(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        mock_db: AsyncMock,
        mock_result: Any,
    ) -> None:
        mock_db.execute.return_value = mock_result(make_branch())

        response = client.put(
            f"/api/v1/branches/{BRANCH_ID}", json={"city": "Izmir"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["city"] == "Izmir"

    def test_database_down_is_503(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        mock_db: AsyncMock,
    ) -> None:
        mock_db.execute.side_effect = OperationalError(
            "SELECT", {}, Exception("connection refused")
        )

        response = client.get(f"/api/v1/branches/{BRANCH_ID}", headers=auth_headers)

        assert response.status_code == 503
        assert response.json()["error_kind"] == "PERSISTENCE_UNAVAILABLE"

    def test_unknown_route_is_404_envelope(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        response = client.get("/api/v1/nothing-here", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["success"] is False
        assert response.json()["error_kind"] == "NOT_FOUND"

    def test_create_blank_currency_defaults_to_usd(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        mock_db: AsyncMock,
        mock_result: Any,
    ) -> None:
        mock_db.execute.return_value = mock_result(None)

        response = client.post(
            "/api/v1/branches",
            json={"name": "Main Campus", "code": "MAIN", "timezone": None, "currency": ""},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["timezone"] == "UTC"
        assert data["currency"] == "USD"


class TestOpenAPI:
    """Generated schema documents the envelope payloads."""

    def test_branch_routes_reference_typed_envelopes(self, client: TestClient) -> None:
        schema = client.get("/openapi.json").json()

        detail = schema["paths"]["/api/v1/branches/{branch_id}"]["get"]["responses"]["200"]
        ref = detail["content"]["application/json"]["schema"]["$ref"]
        assert "BranchDetail" in ref
        assert "BranchDetail" in schema["components"]["schemas"]
        assert "Pagination" in schema["components"]["schemas"]
