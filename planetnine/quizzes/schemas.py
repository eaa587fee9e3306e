"""Pydantic schemas for quizzes.

Request and response models for:
- Quiz authoring (tutor/admin)
- Quiz delivery to learners (correct answers withheld)
- Attempt submission and history
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from planetnine.quizzes.models import AttemptStatus


if TYPE_CHECKING:
    from planetnine.quizzes.models import Quiz, QuizAttempt


# ==============================================================================
# Authoring Schemas
# ==============================================================================


class CreateQuestionRequest(BaseModel):
    """A question to add to a new quiz."""

    text: str = Field(..., min_length=1, max_length=1000)
    options: list[str] = Field(..., min_length=2, max_length=10)
    correct_answer: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_correct_answer_in_options(self) -> "CreateQuestionRequest":
        if self.correct_answer not in self.options:
            msg = "correct_answer must be one of the options"
            raise ValueError(msg)
        return self


class CreateQuizRequest(BaseModel):
    """Quiz creation request. Question order follows list order."""

    module_id: UUID
    title: str = Field(..., min_length=3, max_length=200)
    questions: list[CreateQuestionRequest] = Field(..., min_length=1, max_length=100)


# ==============================================================================
# Delivery Schemas
# ==============================================================================


class QuestionResponse(BaseModel):
    """Question as shown to a learner."""

    id: UUID
    text: str
    options: list[str]
    order: int


class QuizResponse(BaseModel):
    """Quiz as shown to a learner."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    module_id: UUID
    course_id: UUID
    title: str
    questions: list[QuestionResponse]

    @classmethod
    def from_quiz(cls, quiz: "Quiz") -> "QuizResponse":
        return cls(
            id=quiz.id,
            module_id=quiz.module_id,
            course_id=quiz.course_id,
            title=quiz.title,
            questions=[
                QuestionResponse(
                    id=q.id, text=q.text, options=q.options, order=q.order
                )
                for q in quiz.questions
            ],
        )


# ==============================================================================
# Attempt Schemas
# ==============================================================================


class SubmitQuizRequest(BaseModel):
    """Quiz submission. Unanswered questions count as incorrect."""

    quiz_id: UUID
    answers: dict[str, str] = Field(
        default_factory=dict, description="Answers keyed by question id"
    )


class QuizAttemptResponse(BaseModel):
    """Recorded attempt."""

    id: UUID
    quiz_id: UUID
    score: int
    status: AttemptStatus
    attempted_at: datetime

    @classmethod
    def from_attempt(cls, attempt: "QuizAttempt") -> "QuizAttemptResponse":
        return cls(
            id=attempt.id,
            quiz_id=attempt.quiz_id,
            score=attempt.score,
            status=AttemptStatus(attempt.status),
            attempted_at=attempt.attempted_at,
        )


class QuizSubmissionResponse(BaseModel):
    """Outcome of a submission."""

    score: int
    passed: bool
    attempt: QuizAttemptResponse
    next_module_id: UUID | None = None
    certificate_id: str | None = None


class QuizAttemptListResponse(BaseModel):
    """Attempt history, newest first."""

    items: list[QuizAttemptResponse]
    total: int
