"""FastAPI dependencies for quizzes."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import QuizService
from .workflow import QuizWorkflow


async def get_quiz_service(request: Request) -> QuizService:
    """Get quiz service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "quiz_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Quiz service unavailable",
        )
    return app_state.quiz_service


async def get_quiz_workflow(request: Request) -> QuizWorkflow:
    app_state = request.app.state
    if not getattr(app_state, "quiz_workflow", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Quiz service unavailable",
        )
    return app_state.quiz_workflow


QuizServiceDep = Annotated[QuizService, Depends(get_quiz_service)]
QuizWorkflowDep = Annotated[QuizWorkflow, Depends(get_quiz_workflow)]
