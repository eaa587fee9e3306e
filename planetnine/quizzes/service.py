"""Quiz service layer.

Business logic for:
- Quiz authoring, one quiz per module
- Quiz delivery gated on the learner's module progress
- Attempt persistence and history
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from planetnine.core.exceptions import ConflictError, NotFoundError
from planetnine.courses.service import ModuleNotFoundError
from planetnine.progress.service import ModuleLockedError
from planetnine.quizzes.models import Question, Quiz, QuizAttempt
from planetnine.quizzes.schemas import CreateQuizRequest


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from planetnine.courses.service import CourseService
    from planetnine.progress.service import ProgressService

logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class QuizNotFoundError(NotFoundError):
    """Quiz does not exist or has no questions."""

    default_message = "Quiz not found"
    default_code = "quiz_not_found"


class QuizExistsError(ConflictError):
    """Module already has a quiz."""

    default_message = "Module already has a quiz"
    default_code = "quiz_exists"


# ==============================================================================
# Quiz Service
# ==============================================================================


class QuizService:
    """Service for quizzes, questions and attempts."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        course_service: "CourseService",
        progress_service: "ProgressService",
    ):
        """Initialize with Cassandra session.

        Args:
            session: Cassandra session with aexecute() support
            keyspace: Keyspace name for queries
            course_service: Module lookups
            progress_service: Learner progress for quiz gating
        """
        self.session = session
        self.keyspace = keyspace
        self.course_service = course_service
        self.progress_service = progress_service
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._insert_quiz = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quizzes
            (id, module_id, course_id, title, created_at)
            VALUES (?, ?, ?, ?, ?)
        """)
        self._claim_module_quiz = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quizzes_by_module (module_id, quiz_id)
            VALUES (?, ?)
            IF NOT EXISTS
        """)
        self._get_quiz = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quizzes WHERE id = ?
        """)
        self._get_quiz_id_by_module = self.session.prepare(f"""
            SELECT quiz_id FROM {self.keyspace}.quizzes_by_module
            WHERE module_id = ?
        """)
        self._insert_question = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quiz_questions
            (quiz_id, position, question_id, text, options, correct_answer)
            VALUES (?, ?, ?, ?, ?, ?)
        """)
        self._get_questions = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quiz_questions WHERE quiz_id = ?
        """)
        self._insert_attempt = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quiz_attempts
            (user_id, quiz_id, attempted_at, id, score, status, answers)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)
        self._get_attempts = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quiz_attempts
            WHERE user_id = ? AND quiz_id = ?
            LIMIT ?
        """)

    # ==========================================================================
    # Authoring
    # ==========================================================================

    async def create_quiz(self, data: CreateQuizRequest) -> Quiz:
        """Create the quiz for a module.

        Raises:
            ModuleNotFoundError: If the module does not exist
            QuizExistsError: If the module already has a quiz
        """
        module = await self.course_service.get_module(data.module_id)
        if module is None:
            raise ModuleNotFoundError

        quiz = Quiz(module_id=module.id, course_id=module.course_id, title=data.title)
        result = await self.session.aexecute(
            self._claim_module_quiz, [quiz.module_id, quiz.id]
        )
        if not result.was_applied:
            raise QuizExistsError

        for position, item in enumerate(data.questions):
            question = Question(
                quiz_id=quiz.id,
                text=item.text,
                options=item.options,
                correct_answer=item.correct_answer,
                order=position,
            )
            await self.session.aexecute(
                self._insert_question,
                [
                    question.quiz_id,
                    question.order,
                    question.id,
                    question.text,
                    question.options,
                    question.correct_answer,
                ],
            )
            quiz.questions.append(question)

        # Quiz row last so a partially written quiz is never visible by id
        await self.session.aexecute(
            self._insert_quiz,
            [quiz.id, quiz.module_id, quiz.course_id, quiz.title, quiz.created_at],
        )

        logger.info(
            "quiz_created",
            quiz_id=str(quiz.id),
            module_id=str(quiz.module_id),
            questions=len(quiz.questions),
        )
        return quiz

    # ==========================================================================
    # Queries
    # ==========================================================================

    async def get_quiz(self, quiz_id: UUID) -> Quiz | None:
        """Get quiz with its questions in order."""
        result = await self.session.aexecute(self._get_quiz, [quiz_id])
        row = result.one()
        if not row:
            return None

        quiz = Quiz.from_row(row)
        rows = await self.session.aexecute(self._get_questions, [quiz_id])
        quiz.questions = [Question.from_row(r) for r in rows]
        return quiz

    async def require_quiz(self, quiz_id: UUID) -> Quiz:
        """Get a gradeable quiz.

        Raises:
            QuizNotFoundError: If the quiz is missing or has no questions
        """
        quiz = await self.get_quiz(quiz_id)
        if quiz is None or not quiz.questions:
            raise QuizNotFoundError
        return quiz

    async def get_quiz_by_module(self, module_id: UUID) -> Quiz | None:
        result = await self.session.aexecute(
            self._get_quiz_id_by_module, [module_id]
        )
        row = result.one()
        return await self.get_quiz(row.quiz_id) if row else None

    async def get_quiz_for_module(self, user_id: UUID, module_id: UUID) -> Quiz:
        """Get a module's quiz for a learner who has unlocked the module.

        Raises:
            QuizNotFoundError: If the module has no quiz
            ModuleLockedError: If the learner has no progress on the module
        """
        quiz = await self.get_quiz_by_module(module_id)
        if quiz is None:
            raise QuizNotFoundError

        progress = await self.progress_service.get_module_progress(
            user_id, quiz.course_id, module_id
        )
        if progress is None:
            raise ModuleLockedError("Module not unlocked")
        return quiz

    # ==========================================================================
    # Attempts
    # ==========================================================================

    async def record_attempt(self, attempt: QuizAttempt) -> QuizAttempt:
        """Persist a scored attempt."""
        await self.session.aexecute(
            self._insert_attempt,
            [
                attempt.user_id,
                attempt.quiz_id,
                attempt.attempted_at,
                attempt.id,
                attempt.score,
                attempt.status,
                attempt.answers,
            ],
        )
        return attempt

    async def list_attempts(
        self, user_id: UUID, quiz_id: UUID, limit: int = 100
    ) -> list[QuizAttempt]:
        """List a learner's attempts on a quiz, newest first."""
        rows = await self.session.aexecute(
            self._get_attempts, [user_id, quiz_id, limit]
        )
        return [QuizAttempt.from_row(row) for row in rows]
