"""Tests for the admin certificate listing endpoint."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from planetnine.certificates.models import CertificateType
from planetnine.certificates.schemas import AdminCertificateResponse


@pytest.fixture
def certificate_service() -> Mock:
    service = Mock()
    service.list_certificates = AsyncMock(
        return_value=[
            AdminCertificateResponse(
                certificate_id="CERT-1700000000000-abcdefghi",
                user_id=uuid4(),
                course_id=uuid4(),
                type=CertificateType.COMPLETION,
                certificate_url="/certificates/x",
                issued_at=datetime(2026, 6, 1, tzinfo=UTC),
                student_name="Vera Rubin",
                student_email="vera@planetnine.io",
                course_title="Planetary Science",
            )
        ]
    )
    return service


@pytest.fixture
def client(app: FastAPI, certificate_service: Mock) -> TestClient:
    app.state.certificate_service = certificate_service
    return TestClient(app)


class TestAdminListCertificates:
    def test_admin_lists(
        self, client: TestClient, certificate_service: Mock, admin_headers: dict
    ) -> None:
        response = client.get(
            "/v1/admin/certificates", params={"limit": 20}, headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["student_email"] == "vera@planetnine.io"
        assert data["items"][0]["course_title"] == "Planetary Science"
        certificate_service.list_certificates.assert_awaited_once_with(limit=20)

    def test_tutor_forbidden(self, client: TestClient, tutor_headers: dict) -> None:
        response = client.get("/v1/admin/certificates", headers=tutor_headers)
        assert response.status_code == 403

    def test_anonymous_rejected(self, client: TestClient) -> None:
        response = client.get("/v1/admin/certificates")
        assert response.status_code == 401
