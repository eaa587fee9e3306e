"""Quiz API endpoints.

Provides routes for:
- Fetching the quiz of an unlocked module
- Quiz authoring (tutor/admin)
- Submitting answers and listing past attempts
"""

from uuid import UUID

from fastapi import APIRouter, status

from planetnine.auth.dependencies import CurrentUser, TutorUser

from .dependencies import QuizServiceDep, QuizWorkflowDep
from .schemas import (
    CreateQuizRequest,
    QuizAttemptListResponse,
    QuizAttemptResponse,
    QuizResponse,
    QuizSubmissionResponse,
    SubmitQuizRequest,
)


router = APIRouter(prefix="/v1/quizzes", tags=["quizzes"])


@router.get(
    "/modules/{module_id}",
    response_model=QuizResponse,
    summary="Get quiz for a module",
)
async def get_module_quiz(
    module_id: UUID,
    quiz_service: QuizServiceDep,
    user: CurrentUser,
) -> QuizResponse:
    """Get the quiz of a module the current learner has unlocked."""
    quiz = await quiz_service.get_quiz_for_module(user.id, module_id)
    return QuizResponse.from_quiz(quiz)


@router.post(
    "",
    response_model=QuizResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a quiz",
)
async def create_quiz(
    data: CreateQuizRequest,
    quiz_service: QuizServiceDep,
    user: TutorUser,
) -> QuizResponse:
    """Create the quiz for a module (one per module)."""
    quiz = await quiz_service.create_quiz(data)
    return QuizResponse.from_quiz(quiz)


@router.post(
    "/submit",
    response_model=QuizSubmissionResponse,
    summary="Submit quiz answers",
)
async def submit_quiz(
    data: SubmitQuizRequest,
    workflow: QuizWorkflowDep,
    user: CurrentUser,
) -> QuizSubmissionResponse:
    """Grade answers, complete the module and unlock what comes next."""
    result = await workflow.submit_quiz_attempt(user.id, data.quiz_id, data.answers)
    return QuizSubmissionResponse(
        score=result.score,
        passed=result.passed,
        attempt=QuizAttemptResponse.from_attempt(result.attempt),
        next_module_id=result.next_module.id if result.next_module else None,
        certificate_id=(
            result.certificate.certificate_id if result.certificate else None
        ),
    )


@router.get(
    "/{quiz_id}/attempts",
    response_model=QuizAttemptListResponse,
    summary="List my attempts",
)
async def list_my_attempts(
    quiz_id: UUID,
    quiz_service: QuizServiceDep,
    user: CurrentUser,
) -> QuizAttemptListResponse:
    attempts = await quiz_service.list_attempts(user.id, quiz_id)
    return QuizAttemptListResponse(
        items=[QuizAttemptResponse.from_attempt(a) for a in attempts],
        total=len(attempts),
    )
