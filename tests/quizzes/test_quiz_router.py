"""Tests for quiz endpoints (auth, gating and response shapes)."""

from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from planetnine.courses.models import Module
from planetnine.progress.service import ModuleLockedError
from planetnine.quizzes.models import AttemptStatus, Question, Quiz, QuizAttempt
from planetnine.quizzes.workflow import SubmissionResult


@pytest.fixture
def quiz() -> Quiz:
    quiz = Quiz(module_id=uuid4(), course_id=uuid4(), title="Orbits quiz")
    quiz.questions = [
        Question(
            quiz_id=quiz.id,
            text="Closest planet?",
            options=["Mercury", "Venus"],
            correct_answer="Mercury",
        )
    ]
    return quiz


@pytest.fixture
def quiz_service(quiz: Quiz) -> Mock:
    service = Mock()
    service.get_quiz_for_module = AsyncMock(return_value=quiz)
    service.create_quiz = AsyncMock(return_value=quiz)
    service.list_attempts = AsyncMock(return_value=[])
    return service


@pytest.fixture
def quiz_workflow() -> Mock:
    workflow = Mock()
    workflow.submit_quiz_attempt = AsyncMock()
    return workflow


@pytest.fixture
def client(app: FastAPI, quiz_service: Mock, quiz_workflow: Mock) -> TestClient:
    app.state.quiz_service = quiz_service
    app.state.quiz_workflow = quiz_workflow
    return TestClient(app)


class TestGetModuleQuiz:
    def test_requires_token(self, client: TestClient, quiz: Quiz) -> None:
        response = client.get(f"/v1/quizzes/modules/{quiz.module_id}")

        assert response.status_code == 401
        body = response.json()
        assert body["error"] is True
        assert body["status_code"] == 401

    def test_returns_quiz_without_answers(
        self, client: TestClient, quiz: Quiz, student_headers: dict, student_id
    ) -> None:
        response = client.get(
            f"/v1/quizzes/modules/{quiz.module_id}", headers=student_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(quiz.id)
        assert data["questions"][0]["options"] == ["Mercury", "Venus"]
        assert "correct_answer" not in data["questions"][0]

    def test_locked_module_is_forbidden(
        self, client: TestClient, quiz: Quiz, quiz_service: Mock, student_headers: dict
    ) -> None:
        quiz_service.get_quiz_for_module.side_effect = ModuleLockedError(
            "Module not unlocked"
        )

        response = client.get(
            f"/v1/quizzes/modules/{quiz.module_id}", headers=student_headers
        )

        assert response.status_code == 403
        body = response.json()
        assert body["message"] == "Module not unlocked"
        assert body["code"] == "module_locked"


class TestCreateQuiz:
    def payload(self) -> dict:
        return {
            "module_id": str(uuid4()),
            "title": "Orbits quiz",
            "questions": [
                {
                    "text": "Closest planet?",
                    "options": ["Mercury", "Venus"],
                    "correct_answer": "Mercury",
                }
            ],
        }

    def test_student_forbidden(self, client: TestClient, student_headers: dict) -> None:
        response = client.post("/v1/quizzes", json=self.payload(), headers=student_headers)
        assert response.status_code == 403

    def test_tutor_creates(
        self, client: TestClient, tutor_headers: dict, quiz_service: Mock
    ) -> None:
        response = client.post("/v1/quizzes", json=self.payload(), headers=tutor_headers)

        assert response.status_code == 201
        quiz_service.create_quiz.assert_awaited_once()

    def test_invalid_body_returns_details(
        self, client: TestClient, tutor_headers: dict
    ) -> None:
        payload = self.payload()
        payload["questions"] = []

        response = client.post("/v1/quizzes", json=payload, headers=tutor_headers)

        assert response.status_code == 422
        assert response.json()["details"]


class TestSubmitQuiz:
    def test_submit_pass_with_next_module(
        self,
        client: TestClient,
        quiz: Quiz,
        quiz_workflow: Mock,
        student_headers: dict,
        student_id,
    ) -> None:
        attempt = QuizAttempt(
            user_id=student_id,
            quiz_id=quiz.id,
            score=100,
            status=AttemptStatus.COMPLETED.value,
        )
        next_module = Module(course_id=quiz.course_id, title="Rings", order=2)
        quiz_workflow.submit_quiz_attempt.return_value = SubmissionResult(
            100, True, attempt, next_module=next_module
        )
        answers = {str(quiz.questions[0].id): "Mercury"}

        response = client.post(
            "/v1/quizzes/submit",
            json={"quiz_id": str(quiz.id), "answers": answers},
            headers=student_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["score"] == 100
        assert data["passed"] is True
        assert data["attempt"]["status"] == "COMPLETED"
        assert data["next_module_id"] == str(next_module.id)
        assert data["certificate_id"] is None
        quiz_workflow.submit_quiz_attempt.assert_awaited_once_with(
            student_id, quiz.id, answers
        )

    def test_submit_requires_token(self, client: TestClient, quiz: Quiz) -> None:
        response = client.post("/v1/quizzes/submit", json={"quiz_id": str(quiz.id)})
        assert response.status_code == 401


def test_list_attempts(
    client: TestClient, quiz: Quiz, quiz_service: Mock, student_headers: dict, student_id
) -> None:
    response = client.get(f"/v1/quizzes/{quiz.id}/attempts", headers=student_headers)

    assert response.status_code == 200
    assert response.json() == {"items": [], "total": 0}
    quiz_service.list_attempts.assert_awaited_once_with(student_id, quiz.id)
