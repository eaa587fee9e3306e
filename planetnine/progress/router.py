"""Learner progress API endpoints.

Provides routes for:
- Course progress summary (per-module status, completion percent)
- Starting an unlocked module
"""

from uuid import UUID

from fastapi import APIRouter

from planetnine.auth.dependencies import CurrentUser
from planetnine.courses.dependencies import CourseServiceDep
from planetnine.courses.service import ModuleNotFoundError

from .dependencies import ProgressServiceDep
from .schemas import CourseProgressResponse, ModuleProgressSummary


router = APIRouter(prefix="/v1/progress", tags=["progress"])


@router.get(
    "/courses/{course_id}",
    response_model=CourseProgressResponse,
    summary="Get course progress",
)
async def get_course_progress(
    course_id: UUID,
    progress_service: ProgressServiceDep,
    course_service: CourseServiceDep,
    user: CurrentUser,
) -> CourseProgressResponse:
    """Get the current learner's status for every module of a course."""
    await course_service.require_course(course_id)
    return await progress_service.get_course_progress(user.id, course_id)


@router.post(
    "/courses/{course_id}/modules/{module_id}/start",
    response_model=ModuleProgressSummary,
    summary="Start an unlocked module",
)
async def start_module(
    course_id: UUID,
    module_id: UUID,
    progress_service: ProgressServiceDep,
    course_service: CourseServiceDep,
    user: CurrentUser,
) -> ModuleProgressSummary:
    """Mark an unlocked module as in progress for the current learner."""
    module = await course_service.get_module(module_id)
    if module is None or module.course_id != course_id:
        raise ModuleNotFoundError

    progress = await progress_service.start_module(user.id, course_id, module_id)
    return ModuleProgressSummary(
        module_id=module.id,
        title=module.title,
        order=module.order,
        status=progress.status,
        completed_at=progress.completed_at,
    )
