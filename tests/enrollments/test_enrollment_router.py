"""Tests for enrollment endpoints."""

from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from planetnine.auth.models import User
from planetnine.courses.models import Course
from planetnine.enquiries.workflow import EnrollmentRequestResult
from planetnine.enrollments.models import Enrollment
from planetnine.enrollments.service import (
    AlreadyEnrolledError,
    InvalidEnrollmentTransitionError,
)


@pytest.fixture
def course() -> Course:
    return Course(title="Planetary Science", status="PUBLISHED")


@pytest.fixture
def conversion_workflow() -> Mock:
    workflow = Mock()
    workflow.request_enrollment = AsyncMock()
    return workflow


@pytest.fixture
def enrollment_service() -> Mock:
    service = Mock()
    service.list_enrollments = AsyncMock(return_value=[])
    service.update_status = AsyncMock()
    return service


@pytest.fixture
def client(
    app: FastAPI, conversion_workflow: Mock, enrollment_service: Mock
) -> TestClient:
    app.state.conversion_workflow = conversion_workflow
    app.state.enrollment_service = enrollment_service
    return TestClient(app)


@pytest.fixture
def form(course: Course) -> dict:
    return {
        "course_id": str(course.id),
        "name": "Vera Rubin",
        "email": "vera@planetnine.io",
        "phone": "+15550100200",
        "message": "I would like to join the next cohort.",
    }


class TestRequestEnrollment:
    def test_creates_pending_enrollment(
        self, client: TestClient, conversion_workflow: Mock, course: Course, form: dict
    ) -> None:
        user = User(email=form["email"], name=form["name"])
        conversion_workflow.request_enrollment.return_value = EnrollmentRequestResult(
            Enrollment(user_id=user.id, course_id=course.id), course, user
        )

        response = client.post("/v1/enrollments", json=form)

        assert response.status_code == 201
        data = response.json()
        assert data["enrollment"]["status"] == "PENDING"
        assert data["enrollment"]["course_title"] == "Planetary Science"
        assert "user" not in data

    def test_already_enrolled_conflicts(
        self, client: TestClient, conversion_workflow: Mock, form: dict
    ) -> None:
        conversion_workflow.request_enrollment.side_effect = AlreadyEnrolledError

        response = client.post("/v1/enrollments", json=form)

        assert response.status_code == 409
        assert response.json()["code"] == "already_enrolled"

    def test_script_in_name_rejected(
        self, client: TestClient, conversion_workflow: Mock, form: dict
    ) -> None:
        form["name"] = "<script>alert(1)</script>"

        response = client.post("/v1/enrollments", json=form)

        assert response.status_code == 422
        conversion_workflow.request_enrollment.assert_not_awaited()


class TestAdminEnrollments:
    def test_requires_admin(self, client: TestClient, tutor_headers: dict) -> None:
        response = client.get("/v1/admin/enrollments", headers=tutor_headers)
        assert response.status_code == 403

    def test_admin_lists(self, client: TestClient, admin_headers: dict) -> None:
        response = client.get("/v1/admin/enrollments", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"items": [], "total": 0}

    def test_invalid_transition_is_bad_request(
        self, client: TestClient, enrollment_service: Mock, admin_headers: dict
    ) -> None:
        enrollment_service.update_status.side_effect = InvalidEnrollmentTransitionError

        response = client.patch(
            f"/v1/admin/enrollments/{uuid4()}/{uuid4()}",
            json={"status": "PENDING"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] is True
