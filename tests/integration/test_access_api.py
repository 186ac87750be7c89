# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the access check endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.dependencies import get_category_catalog, get_db
from src.api.v1 import router as v1_router
from src.domains.subject.service import SubjectNotFoundError
from src.domains.teacher.service import TeacherRequestNotFoundError
from src.infrastructure.database.connection import StorageUnavailableError

STUDENT_ID = "student-1"
TEACHER_ID = "teacher-1"
SUBJECT_ID = "subject-1"


@pytest.fixture
def mock_session() -> AsyncMock:
    """Create mock database session."""
    session = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def app(mock_session: AsyncMock, catalog) -> FastAPI:
    """Create test FastAPI app."""
    app = FastAPI()
    app.include_router(v1_router)

    async def override_db():
        yield mock_session

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_category_catalog] = lambda: catalog
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def mock_authorizer():
    """Patch the authorizer built by the access router."""
    with patch("src.api.v1.access.AccessAuthorizer") as cls:
        authorizer = MagicMock()
        authorizer.can_student_access = AsyncMock(return_value=True)
        authorizer.can_teacher_manage = AsyncMock(return_value=True)
        cls.return_value = authorizer
        yield authorizer


def _headers(user_id: str, role: str) -> dict[str, str]:
    return {"X-User-Id": user_id, "X-User-Role": role}


class TestAccessAPIRouting:
    """Tests for access API routing."""

    def test_routes_registered(self, app: FastAPI) -> None:
        routes = [route.path for route in app.routes]

        assert "/api/v1/access/students/{student_id}/subjects/{subject_id}" in routes
        assert "/api/v1/access/teachers/{teacher_id}/subjects/{subject_id}" in routes


class TestStudentAccess:
    """Tests for the student access check."""

    def test_allowed(self, client: TestClient, mock_authorizer) -> None:
        response = client.get(
            f"/api/v1/access/students/{STUDENT_ID}/subjects/{SUBJECT_ID}",
            headers=_headers(STUDENT_ID, "student"),
        )

        assert response.status_code == 200
        assert response.json() == {
            "actor_id": STUDENT_ID,
            "actor_role": "student",
            "subject_id": SUBJECT_ID,
            "allowed": True,
        }

    def test_denied_is_not_an_error(self, client: TestClient, mock_authorizer) -> None:
        mock_authorizer.can_student_access.return_value = False

        response = client.get(
            f"/api/v1/access/students/{STUDENT_ID}/subjects/{SUBJECT_ID}",
            headers=_headers(STUDENT_ID, "student"),
        )

        assert response.status_code == 200
        assert response.json()["allowed"] is False

    def test_requires_identity(self, client: TestClient, mock_authorizer) -> None:
        response = client.get(f"/api/v1/access/students/{STUDENT_ID}/subjects/{SUBJECT_ID}")

        assert response.status_code == 401

    def test_other_student_forbidden(self, client: TestClient, mock_authorizer) -> None:
        response = client.get(
            f"/api/v1/access/students/{STUDENT_ID}/subjects/{SUBJECT_ID}",
            headers=_headers("student-2", "student"),
        )

        assert response.status_code == 403

    def test_admin_may_check_any_student(self, client: TestClient, mock_authorizer) -> None:
        response = client.get(
            f"/api/v1/access/students/{STUDENT_ID}/subjects/{SUBJECT_ID}",
            headers=_headers("admin-1", "admin"),
        )

        assert response.status_code == 200

    def test_unknown_subject(self, client: TestClient, mock_authorizer) -> None:
        mock_authorizer.can_student_access.side_effect = SubjectNotFoundError("Subject missing not found")

        response = client.get(
            f"/api/v1/access/students/{STUDENT_ID}/subjects/missing",
            headers=_headers(STUDENT_ID, "student"),
        )

        assert response.status_code == 404

    def test_storage_failure_retried_once(
        self,
        client: TestClient,
        mock_authorizer,
        mock_session: AsyncMock,
    ) -> None:
        mock_authorizer.can_student_access.side_effect = [
            StorageUnavailableError("ledger unavailable"),
            True,
        ]

        response = client.get(
            f"/api/v1/access/students/{STUDENT_ID}/subjects/{SUBJECT_ID}",
            headers=_headers(STUDENT_ID, "student"),
        )

        assert response.status_code == 200
        assert response.json()["allowed"] is True
        assert mock_authorizer.can_student_access.await_count == 2
        mock_session.rollback.assert_awaited_once()

    def test_storage_failure_twice_is_503(self, client: TestClient, mock_authorizer) -> None:
        mock_authorizer.can_student_access.side_effect = StorageUnavailableError("ledger unavailable")

        response = client.get(
            f"/api/v1/access/students/{STUDENT_ID}/subjects/{SUBJECT_ID}",
            headers=_headers(STUDENT_ID, "student"),
        )

        assert response.status_code == 503
        assert mock_authorizer.can_student_access.await_count == 2


class TestTeacherAccess:
    """Tests for the teacher manage check."""

    def test_allowed(self, client: TestClient, mock_authorizer) -> None:
        response = client.get(
            f"/api/v1/access/teachers/{TEACHER_ID}/subjects/{SUBJECT_ID}",
            headers=_headers(TEACHER_ID, "teacher"),
        )

        assert response.status_code == 200
        assert response.json()["actor_role"] == "teacher"
        mock_authorizer.can_teacher_manage.assert_awaited_with(TEACHER_ID, SUBJECT_ID)

    def test_no_request_is_404(self, client: TestClient, mock_authorizer) -> None:
        mock_authorizer.can_teacher_manage.side_effect = TeacherRequestNotFoundError("none")

        response = client.get(
            f"/api/v1/access/teachers/{TEACHER_ID}/subjects/{SUBJECT_ID}",
            headers=_headers(TEACHER_ID, "teacher"),
        )

        assert response.status_code == 404
