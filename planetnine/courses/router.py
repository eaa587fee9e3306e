"""Course catalog API endpoints.

Provides routes for:
- Public catalog: published courses and course detail with modules
- Authoring: course create, update and delete, module creation (TUTOR or ADMIN)
"""

from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from planetnine.auth.dependencies import TutorUser
from planetnine.auth.permissions import is_admin
from planetnine.core.exceptions import PermissionDeniedError
from planetnine.courses.dependencies import CourseServiceDep
from planetnine.courses.schemas import (
    CourseDetailResponse,
    CourseListResponse,
    CourseResponse,
    CreateCourseRequest,
    CreateModuleRequest,
    ModuleResponse,
    UpdateCourseRequest,
)
from planetnine.courses.service import CourseNotFoundError


router = APIRouter(prefix="/v1/courses", tags=["courses"])


@router.get(
    "",
    response_model=CourseListResponse,
    summary="List published courses",
)
async def list_courses(
    course_service: CourseServiceDep,
    limit: int = Query(50, ge=1, le=100),
) -> CourseListResponse:
    """List the public catalog, newest first."""
    courses = await course_service.list_published_courses(limit=limit)
    return CourseListResponse(
        items=[CourseResponse.from_course(c) for c in courses],
        total=len(courses),
    )


@router.get(
    "/{course_id}",
    response_model=CourseDetailResponse,
    summary="Get course with modules",
)
async def get_course(
    course_id: UUID,
    course_service: CourseServiceDep,
) -> CourseDetailResponse:
    """Get a published course and its modules in sequence order."""
    course = await course_service.get_course(course_id)
    if course is None or not course.is_published:
        raise CourseNotFoundError

    modules = await course_service.list_course_modules(course_id)
    return CourseDetailResponse(
        **CourseResponse.from_course(course).model_dump(),
        modules=[ModuleResponse.from_module(m) for m in modules],
    )


@router.post(
    "",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create course",
)
async def create_course(
    data: CreateCourseRequest,
    course_service: CourseServiceDep,
    user: TutorUser,
) -> CourseResponse:
    """Create a new course (TUTOR or ADMIN only)."""
    course = await course_service.create_course(data, tutor_id=user.id)
    return CourseResponse.from_course(course)


@router.patch(
    "/{course_id}",
    response_model=CourseResponse,
    summary="Update course",
)
async def update_course(
    course_id: UUID,
    data: UpdateCourseRequest,
    course_service: CourseServiceDep,
    user: TutorUser,
) -> CourseResponse:
    """Update course fields or publication status (course owner or ADMIN)."""
    course = await course_service.require_course(course_id)
    if not is_admin(user.role) and course.tutor_id != user.id:
        raise PermissionDeniedError("Only the course tutor can edit this course")

    updated = await course_service.update_course(course_id, data)
    return CourseResponse.from_course(updated)


@router.delete(
    "/{course_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete course",
)
async def delete_course(
    course_id: UUID,
    course_service: CourseServiceDep,
    user: TutorUser,
) -> None:
    """Delete a course and its modules (course owner or ADMIN)."""
    course = await course_service.require_course(course_id)
    if not is_admin(user.role) and course.tutor_id != user.id:
        raise PermissionDeniedError("Only the course tutor can delete this course")

    await course_service.delete_course(course_id)


@router.post(
    "/{course_id}/modules",
    response_model=ModuleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add module to course",
)
async def add_module(
    course_id: UUID,
    data: CreateModuleRequest,
    course_service: CourseServiceDep,
    user: TutorUser,
) -> ModuleResponse:
    """Add a module at a free position (course owner or ADMIN)."""
    course = await course_service.require_course(course_id)
    if not is_admin(user.role) and course.tutor_id != user.id:
        raise PermissionDeniedError("Only the course tutor can add modules")

    module = await course_service.add_module(course_id, data)
    return ModuleResponse.from_module(module)
