"""Database models for quizzes.

Cassandra table definitions for:
- Quizzes: one per module, the 1:1 link claimed in ``quizzes_by_module``
- Quiz questions: clustered by position within the quiz
- Quiz attempts: append-only, newest first per (user, quiz)
"""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from planetnine.core.timeutils import ensure_utc_aware, utcnow


class AttemptStatus(str, Enum):
    """Quiz attempt outcome."""

    COMPLETED = "COMPLETED"  # Passed
    FAILED = "FAILED"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

QUIZZES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quizzes (
    id UUID PRIMARY KEY,
    module_id UUID,
    course_id UUID,
    title TEXT,
    created_at TIMESTAMP
)
"""

QUIZZES_BY_MODULE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quizzes_by_module (
    module_id UUID PRIMARY KEY,
    quiz_id UUID
)
"""

QUIZ_QUESTIONS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quiz_questions (
    quiz_id UUID,
    position INT,
    question_id UUID,
    text TEXT,
    options LIST<TEXT>,
    correct_answer TEXT,
    PRIMARY KEY (quiz_id, position)
) WITH CLUSTERING ORDER BY (position ASC)
"""

QUIZ_ATTEMPTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quiz_attempts (
    user_id UUID,
    quiz_id UUID,
    attempted_at TIMESTAMP,
    id UUID,
    score INT,
    status TEXT,
    answers MAP<TEXT, TEXT>,
    PRIMARY KEY ((user_id, quiz_id), attempted_at, id)
) WITH CLUSTERING ORDER BY (attempted_at DESC, id ASC)
"""

QUIZZES_TABLES_CQL = [
    QUIZZES_TABLE_CQL,
    QUIZZES_BY_MODULE_TABLE_CQL,
    QUIZ_QUESTIONS_TABLE_CQL,
    QUIZ_ATTEMPTS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class Question:
    """A multiple-choice question.

    Attributes:
        id: Unique identifier, the key learners answer against
        quiz_id: Owning quiz
        text: Question text
        options: Answer choices shown to the learner
        correct_answer: The option that scores
        order: Position within the quiz
    """

    def __init__(
        self,
        quiz_id: UUID,
        text: str,
        correct_answer: str,
        options: list[str] | None = None,
        order: int = 0,
        id: UUID | None = None,
    ):
        self.id = id or uuid4()
        self.quiz_id = quiz_id
        self.text = text
        self.options = list(options or [])
        self.correct_answer = correct_answer
        self.order = order

    @classmethod
    def from_row(cls, row: Any) -> "Question":
        """Create Question instance from Cassandra row."""
        return cls(
            id=row.question_id,
            quiz_id=row.quiz_id,
            text=row.text or "",
            options=row.options,
            correct_answer=row.correct_answer or "",
            order=row.position,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (includes the correct answer)."""
        return {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "text": self.text,
            "options": self.options,
            "correct_answer": self.correct_answer,
            "order": self.order,
        }

    def __repr__(self) -> str:
        return f"<Question {self.order}: {self.text[:30]}>"


class Quiz:
    """Quiz bound to exactly one module.

    Attributes:
        id: Unique identifier (UUID)
        module_id: Module the quiz gates
        course_id: Course of that module
        title: Quiz title
        questions: Questions in order (loaded separately)
        created_at: Creation timestamp
    """

    def __init__(
        self,
        module_id: UUID,
        course_id: UUID,
        title: str = "",
        id: UUID | None = None,
        questions: list[Question] | None = None,
        created_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.module_id = module_id
        self.course_id = course_id
        self.title = title
        self.questions = list(questions or [])
        self.created_at = ensure_utc_aware(created_at) or utcnow()

    @classmethod
    def from_row(cls, row: Any) -> "Quiz":
        """Create Quiz instance from Cassandra row (without questions)."""
        return cls(
            id=row.id,
            module_id=row.module_id,
            course_id=row.course_id,
            title=row.title or "",
            created_at=row.created_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "module_id": self.module_id,
            "course_id": self.course_id,
            "title": self.title,
            "questions": [q.to_dict() for q in self.questions],
            "created_at": self.created_at,
        }

    def __repr__(self) -> str:
        return f"<Quiz {self.title} ({len(self.questions)} questions)>"


class QuizAttempt:
    """One scored submission. Attempts are never updated.

    Attributes:
        id: Unique identifier (UUID)
        user_id: Learner
        quiz_id: Quiz answered
        score: Percentage of correct answers, 0-100
        status: COMPLETED (passed) or FAILED
        answers: Submitted answers keyed by question id
        attempted_at: Submission timestamp
    """

    def __init__(
        self,
        user_id: UUID,
        quiz_id: UUID,
        score: int,
        status: str,
        answers: dict[str, str] | None = None,
        id: UUID | None = None,
        attempted_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.user_id = user_id
        self.quiz_id = quiz_id
        self.score = score
        self.status = status
        self.answers = dict(answers or {})
        self.attempted_at = ensure_utc_aware(attempted_at) or utcnow()

    @property
    def passed(self) -> bool:
        return self.status == AttemptStatus.COMPLETED.value

    @classmethod
    def from_row(cls, row: Any) -> "QuizAttempt":
        """Create QuizAttempt instance from Cassandra row."""
        return cls(
            id=row.id,
            user_id=row.user_id,
            quiz_id=row.quiz_id,
            score=row.score or 0,
            status=row.status,
            answers=dict(row.answers or {}),
            attempted_at=row.attempted_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "quiz_id": self.quiz_id,
            "score": self.score,
            "status": self.status,
            "answers": self.answers,
            "attempted_at": self.attempted_at,
        }

    def __repr__(self) -> str:
        return f"<QuizAttempt {self.score} ({self.status})>"
