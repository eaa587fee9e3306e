"""Enrollment API endpoints.

Provides routes for:
- Public enrollment requests (rate limited per client IP)
- The current learner's enrollments
- Admin overview and status updates
- Tutor views of their courses and learners
- Admin dashboard counts
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from planetnine.auth.dependencies import (
    AdminUser,
    AuthServiceDep,
    CurrentUser,
    TutorUser,
)
from planetnine.auth.permissions import UserRole
from planetnine.config.settings import get_settings
from planetnine.courses.dependencies import CourseServiceDep
from planetnine.courses.models import CourseStatus
from planetnine.courses.schemas import CourseResponse
from planetnine.enquiries.dependencies import (
    ClientIp,
    ConversionWorkflowDep,
    EnquiryServiceDep,
    RateLimiterDep,
)
from planetnine.progress.dependencies import ProgressServiceDep

from .dependencies import EnrollmentServiceDep
from .models import EnrollmentStatus
from .schemas import (
    AdminStatsResponse,
    CourseEnrollmentResponse,
    EnrollmentListResponse,
    EnrollmentRequest,
    EnrollmentRequestResponse,
    EnrollmentResponse,
    TutorCourseListResponse,
    TutorCourseResponse,
    TutorStudentListResponse,
    TutorStudentResponse,
    UpdateEnrollmentRequest,
)


router = APIRouter(prefix="/v1/enrollments", tags=["enrollments"])
admin_router = APIRouter(prefix="/v1/admin/enrollments", tags=["admin"])
tutor_router = APIRouter(prefix="/v1/tutor", tags=["tutor"])
dashboard_router = APIRouter(prefix="/v1/admin", tags=["admin"])

# Enrollments whose learner has course access
LEARNING_STATUSES = frozenset(
    {
        EnrollmentStatus.APPROVED.value,
        EnrollmentStatus.ACTIVE.value,
        EnrollmentStatus.COMPLETED.value,
    }
)


@router.post(
    "",
    response_model=EnrollmentRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request enrollment in a course",
)
async def request_enrollment(
    data: EnrollmentRequest,
    workflow: ConversionWorkflowDep,
    rate_limiter: RateLimiterDep,
    client_ip: ClientIp,
) -> EnrollmentRequestResponse:
    """Create a PENDING enrollment, registering the visitor as a student if new."""
    await rate_limiter.hit(
        "enrollment_form",
        client_ip or "unknown",
        limit=get_settings().enrollment_rate_limit_per_minute,
    )

    result = await workflow.request_enrollment(data)
    return EnrollmentRequestResponse(
        enrollment=EnrollmentResponse.from_enrollment(
            result.enrollment, course_title=result.course.title
        )
    )


@router.get(
    "/me",
    response_model=EnrollmentListResponse,
    summary="List my enrollments",
)
async def list_my_enrollments(
    enrollment_service: EnrollmentServiceDep,
    course_service: CourseServiceDep,
    user: CurrentUser,
) -> EnrollmentListResponse:
    """List the current user's enrollments with course titles."""
    enrollments = await enrollment_service.list_user_enrollments(user.id)

    items = []
    for enrollment in enrollments:
        course = await course_service.get_course(enrollment.course_id)
        items.append(
            EnrollmentResponse.from_enrollment(
                enrollment, course_title=course.title if course else None
            )
        )
    return EnrollmentListResponse(items=items, total=len(items))


# ==============================================================================
# Admin Endpoints
# ==============================================================================


@admin_router.get(
    "",
    response_model=EnrollmentListResponse,
    summary="List all enrollments",
)
async def list_enrollments(
    enrollment_service: EnrollmentServiceDep,
    admin: AdminUser,
    limit: int = Query(200, ge=1, le=1000),
) -> EnrollmentListResponse:
    """Admin overview of enrollments, newest first."""
    enrollments = await enrollment_service.list_enrollments(limit=limit)
    return EnrollmentListResponse(
        items=[EnrollmentResponse.from_enrollment(e) for e in enrollments],
        total=len(enrollments),
    )


@admin_router.patch(
    "/{user_id}/{course_id}",
    response_model=EnrollmentResponse,
    summary="Update enrollment status",
)
async def update_enrollment_status(
    user_id: UUID,
    course_id: UUID,
    data: UpdateEnrollmentRequest,
    enrollment_service: EnrollmentServiceDep,
    admin: AdminUser,
) -> EnrollmentResponse:
    """Approve, activate, complete, cancel or reject an enrollment."""
    enrollment = await enrollment_service.update_status(
        user_id, course_id, data.status, data.payment_status
    )
    return EnrollmentResponse.from_enrollment(enrollment)


@dashboard_router.get(
    "/stats",
    response_model=AdminStatsResponse,
    summary="Admin dashboard stats",
)
async def get_admin_stats(
    auth_service: AuthServiceDep,
    course_service: CourseServiceDep,
    enquiry_service: EnquiryServiceDep,
    enrollment_service: EnrollmentServiceDep,
    admin: AdminUser,
) -> AdminStatsResponse:
    """Headline counts: students, courses, open enquiries and completions."""
    return AdminStatsResponse(
        total_students=await auth_service.count_users(UserRole.STUDENT),
        total_courses=await course_service.count_courses(),
        active_courses=await course_service.count_courses(CourseStatus.PUBLISHED),
        pending_enquiries=await enquiry_service.count_pending_enquiries(),
        completed_enrollments=await enrollment_service.count_by_status(
            EnrollmentStatus.COMPLETED
        ),
    )


# ==============================================================================
# Tutor Endpoints
# ==============================================================================


@tutor_router.get(
    "/courses",
    response_model=TutorCourseListResponse,
    summary="List my authored courses",
)
async def list_tutor_courses(
    auth_service: AuthServiceDep,
    course_service: CourseServiceDep,
    enrollment_service: EnrollmentServiceDep,
    user: TutorUser,
) -> TutorCourseListResponse:
    """The current tutor's courses in any status, each with its enrollments."""
    courses = await course_service.list_tutor_courses(user.id)

    users = {}
    items = []
    for course in courses:
        enrollments = []
        for enrollment in await enrollment_service.list_course_enrollments(course.id):
            if enrollment.user_id not in users:
                users[enrollment.user_id] = await auth_service.get_user_by_id(
                    enrollment.user_id
                )
            learner = users[enrollment.user_id]
            enrollments.append(
                CourseEnrollmentResponse(
                    user_id=enrollment.user_id,
                    name=learner.name if learner else "",
                    email=learner.email if learner else "",
                    status=EnrollmentStatus(enrollment.status),
                    created_at=enrollment.created_at,
                )
            )
        items.append(
            TutorCourseResponse(
                **CourseResponse.from_course(course).model_dump(),
                enrollments=enrollments,
            )
        )
    return TutorCourseListResponse(items=items, total=len(items))


@tutor_router.get(
    "/students",
    response_model=TutorStudentListResponse,
    summary="List learners in my courses",
)
async def list_tutor_students(
    auth_service: AuthServiceDep,
    course_service: CourseServiceDep,
    enrollment_service: EnrollmentServiceDep,
    progress_service: ProgressServiceDep,
    user: TutorUser,
) -> TutorStudentListResponse:
    """Learners with course access, with progress and latest activity."""
    items = []
    for course in await course_service.list_tutor_courses(user.id):
        for enrollment in await enrollment_service.list_course_enrollments(course.id):
            if enrollment.status not in LEARNING_STATUSES:
                continue
            learner = await auth_service.get_user_by_id(enrollment.user_id)
            if learner is None:
                continue

            progress = await progress_service.get_course_progress(
                enrollment.user_id, course.id
            )
            completions = [m.completed_at for m in progress.modules if m.completed_at]
            items.append(
                TutorStudentResponse(
                    user_id=learner.id,
                    name=learner.name,
                    email=learner.email,
                    course_id=course.id,
                    course_title=course.title,
                    status=EnrollmentStatus(enrollment.status),
                    completed_modules=progress.completed_modules,
                    total_modules=progress.total_modules,
                    progress_percent=progress.progress_percent,
                    last_activity=max(completions, default=enrollment.created_at),
                )
            )

    items.sort(key=lambda s: s.last_activity, reverse=True)
    return TutorStudentListResponse(items=items, total=len(items))
