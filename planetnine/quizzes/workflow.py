"""Quiz submission workflow.

Grading a quiz drives the learner through the course:

1. Score the answers and record the attempt (COMPLETED when passed,
   FAILED otherwise).
2. Mark the module's progress COMPLETED, pass or fail.
3. On a pass, unlock the next module by order or, after the last module,
   issue the course completion certificate.

Steps run sequentially; a storage failure part-way leaves earlier writes in
place and propagates. Progress transitions are monotonic, so repeating a
submission never moves a module backwards, and certificate issuance is
claimed per (user, course, type), so a repeated final pass reuses the
existing certificate.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, NamedTuple
from uuid import UUID

import structlog

from planetnine.config.settings import get_settings
from planetnine.courses.service import ModuleNotFoundError
from planetnine.quizzes.models import AttemptStatus, QuizAttempt
from planetnine.quizzes.scoring import score_answers


if TYPE_CHECKING:
    from planetnine.certificates.models import Certificate
    from planetnine.certificates.service import CertificateService
    from planetnine.courses.models import Module
    from planetnine.courses.service import CourseService
    from planetnine.progress.service import ProgressService
    from planetnine.quizzes.service import QuizService

logger = structlog.get_logger(__name__)


class SubmissionResult(NamedTuple):
    """Outcome of a quiz submission."""

    score: int
    passed: bool
    attempt: QuizAttempt
    next_module: "Module | None" = None
    certificate: "Certificate | None" = None


class QuizWorkflow:
    """Coordinates quizzes, progress and certificates on submission."""

    def __init__(
        self,
        quiz_service: "QuizService",
        course_service: "CourseService",
        progress_service: "ProgressService",
        certificate_service: "CertificateService",
    ):
        self.quiz_service = quiz_service
        self.course_service = course_service
        self.progress_service = progress_service
        self.certificate_service = certificate_service

    async def submit_quiz_attempt(
        self,
        user_id: UUID,
        quiz_id: UUID,
        answers: Mapping[str, str],
    ) -> SubmissionResult:
        """Grade a submission and advance the learner.

        Args:
            user_id: Submitting learner
            quiz_id: Quiz answered
            answers: Answers keyed by question id; may be partial or empty

        Returns:
            SubmissionResult with the score, pass flag, recorded attempt and
            either the unlocked next module or the completion certificate

        Raises:
            QuizNotFoundError: If the quiz is missing or has no questions
            ModuleNotFoundError: If the quiz's module no longer exists
        """
        quiz = await self.quiz_service.require_quiz(quiz_id)
        module = await self.course_service.get_module(quiz.module_id)
        if module is None:
            raise ModuleNotFoundError

        result = score_answers(
            quiz.questions, answers, get_settings().quiz_pass_threshold
        )
        status = AttemptStatus.COMPLETED if result.passed else AttemptStatus.FAILED
        attempt = await self.quiz_service.record_attempt(
            QuizAttempt(
                user_id=user_id,
                quiz_id=quiz.id,
                score=result.score,
                status=status.value,
                answers=dict(answers),
            )
        )

        logger.info(
            "quiz_submitted",
            user_id=str(user_id),
            quiz_id=str(quiz.id),
            score=result.score,
            passed=result.passed,
        )

        # Completed on failure too; a retake stays possible
        await self.progress_service.complete_module(
            user_id, module.course_id, module.id
        )

        if not result.passed:
            return SubmissionResult(result.score, False, attempt)

        next_module = await self.course_service.find_next_module(
            module.course_id, module.order
        )
        if next_module is not None:
            await self.progress_service.unlock_module(
                user_id, module.course_id, next_module.id
            )
            return SubmissionResult(result.score, True, attempt, next_module=next_module)

        certificate, _ = await self.certificate_service.issue_completion_certificate(
            user_id, module.course_id
        )
        logger.info(
            "course_completed",
            user_id=str(user_id),
            course_id=str(module.course_id),
            certificate_id=certificate.certificate_id,
        )
        return SubmissionResult(result.score, True, attempt, certificate=certificate)
