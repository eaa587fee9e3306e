"""Tests for catalog endpoints."""

from unittest.mock import AsyncMock, Mock
from uuid import UUID, uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from planetnine.courses.models import Course, Module
from planetnine.courses.service import ModuleOrderConflictError


@pytest.fixture
def course() -> Course:
    return Course(title="Planetary Science", status="PUBLISHED", tutor_id=uuid4())


@pytest.fixture
def course_service(course: Course) -> Mock:
    service = Mock()
    service.get_course = AsyncMock(return_value=course)
    service.require_course = AsyncMock(return_value=course)
    service.list_course_modules = AsyncMock(
        return_value=[
            Module(course_id=course.id, title="Intro", order=0),
            Module(course_id=course.id, title="Orbits", order=1),
        ]
    )
    service.add_module = AsyncMock(
        side_effect=lambda course_id, data: Module(
            course_id=course_id, title=data.title, order=data.order
        )
    )
    service.update_course = AsyncMock(side_effect=lambda course_id, data: course)
    service.delete_course = AsyncMock()
    return service


@pytest.fixture
def client(app: FastAPI, course_service: Mock) -> TestClient:
    app.state.course_service = course_service
    return TestClient(app)


class TestGetCourse:
    def test_published_course_with_modules(
        self, client: TestClient, course: Course
    ) -> None:
        response = client.get(f"/v1/courses/{course.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Planetary Science"
        assert [m["order"] for m in data["modules"]] == [0, 1]

    def test_draft_course_hidden(
        self, client: TestClient, course: Course
    ) -> None:
        course.status = "DRAFT"

        response = client.get(f"/v1/courses/{course.id}")

        assert response.status_code == 404
        assert response.json()["code"] == "course_not_found"


class TestAddModule:
    def test_other_tutor_forbidden(
        self, client: TestClient, course: Course, tutor_headers: dict
    ) -> None:
        response = client.post(
            f"/v1/courses/{course.id}/modules",
            json={"title": "Moons", "order": 2},
            headers=tutor_headers,
        )
        assert response.status_code == 403

    def test_admin_adds(
        self, client: TestClient, course: Course, admin_headers: dict
    ) -> None:
        response = client.post(
            f"/v1/courses/{course.id}/modules",
            json={"title": "Moons", "order": 2},
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["order"] == 2

    def test_order_taken(
        self,
        client: TestClient,
        course: Course,
        course_service: Mock,
        admin_headers: dict,
    ) -> None:
        course_service.add_module.side_effect = ModuleOrderConflictError

        response = client.post(
            f"/v1/courses/{course.id}/modules",
            json={"title": "Moons", "order": 1},
            headers=admin_headers,
        )

        assert response.status_code == 409

    def test_student_forbidden(
        self, client: TestClient, course: Course, student_headers: dict
    ) -> None:
        response = client.post(
            f"/v1/courses/{course.id}/modules",
            json={"title": "Moons", "order": 2},
            headers=student_headers,
        )
        assert response.status_code == 403


class TestUpdateCourse:
    def test_admin_publishes_draft(
        self,
        client: TestClient,
        course: Course,
        course_service: Mock,
        admin_headers: dict,
    ) -> None:
        course.status = "DRAFT"

        def publish(course_id, data):
            course.status = data.status.value
            return course

        course_service.update_course.side_effect = publish

        response = client.patch(
            f"/v1/courses/{course.id}",
            json={"status": "PUBLISHED"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "PUBLISHED"
        data = course_service.update_course.await_args.args[1]
        assert data.title is None

    def test_owner_updates(
        self,
        client: TestClient,
        course: Course,
        course_service: Mock,
        tutor_id: UUID,
        tutor_headers: dict,
    ) -> None:
        course.tutor_id = tutor_id

        response = client.patch(
            f"/v1/courses/{course.id}",
            json={"price": "49.90"},
            headers=tutor_headers,
        )

        assert response.status_code == 200
        course_service.update_course.assert_awaited_once()

    def test_other_tutor_forbidden(
        self,
        client: TestClient,
        course: Course,
        course_service: Mock,
        tutor_headers: dict,
    ) -> None:
        response = client.patch(
            f"/v1/courses/{course.id}",
            json={"status": "ARCHIVED"},
            headers=tutor_headers,
        )

        assert response.status_code == 403
        course_service.update_course.assert_not_awaited()

    def test_student_forbidden(
        self, client: TestClient, course: Course, student_headers: dict
    ) -> None:
        response = client.patch(
            f"/v1/courses/{course.id}",
            json={"status": "PUBLISHED"},
            headers=student_headers,
        )
        assert response.status_code == 403

    def test_unknown_status_rejected(
        self, client: TestClient, course: Course, admin_headers: dict
    ) -> None:
        response = client.patch(
            f"/v1/courses/{course.id}",
            json={"status": "LIVE"},
            headers=admin_headers,
        )
        assert response.status_code == 422


class TestDeleteCourse:
    def test_admin_deletes(
        self,
        client: TestClient,
        course: Course,
        course_service: Mock,
        admin_headers: dict,
    ) -> None:
        response = client.delete(f"/v1/courses/{course.id}", headers=admin_headers)

        assert response.status_code == 204
        course_service.delete_course.assert_awaited_once_with(course.id)

    def test_other_tutor_forbidden(
        self,
        client: TestClient,
        course: Course,
        course_service: Mock,
        tutor_headers: dict,
    ) -> None:
        response = client.delete(f"/v1/courses/{course.id}", headers=tutor_headers)

        assert response.status_code == 403
        course_service.delete_course.assert_not_awaited()
