"""Enquiry conversion workflow.

Turns an interested visitor into an enrolled student:

- ``convert_enquiry``: an admin converts a stored enquiry into a PENDING
  enrollment, creating the student account if needed
- ``request_enrollment``: the public enrollment form does the same in one
  step and optionally files the visitor's note as an enquiry

Both resolve the account with ``AuthService.get_or_create_student``, so a
repeated conversion never creates a second user, and both rely on the
enrollment insert being ``IF NOT EXISTS`` for (user, course) uniqueness.
Steps run sequentially; a storage failure part-way leaves earlier writes in
place and propagates.
"""

from typing import TYPE_CHECKING, NamedTuple
from uuid import UUID

import structlog

from planetnine.enquiries.models import EnquiryStatus
from planetnine.enquiries.service import EnquiryNotFoundError
from planetnine.enrollments.service import AlreadyEnrolledError


if TYPE_CHECKING:
    from planetnine.auth.models import User
    from planetnine.auth.service import AuthService
    from planetnine.courses.models import Course
    from planetnine.courses.service import CourseService
    from planetnine.enquiries.service import EnquiryService
    from planetnine.enrollments.models import Enrollment
    from planetnine.enrollments.schemas import EnrollmentRequest
    from planetnine.enrollments.service import EnrollmentService

logger = structlog.get_logger(__name__)


class ConversionResult(NamedTuple):
    """Outcome of converting an enquiry."""

    enrollment: "Enrollment"
    user: "User"
    user_created: bool
    enrollment_created: bool


class EnrollmentRequestResult(NamedTuple):
    """Outcome of a public enrollment request."""

    enrollment: "Enrollment"
    course: "Course"
    user: "User"


class EnquiryConversionWorkflow:
    """Coordinates users, enrollments and enquiries for conversions."""

    def __init__(
        self,
        auth_service: "AuthService",
        course_service: "CourseService",
        enrollment_service: "EnrollmentService",
        enquiry_service: "EnquiryService",
    ):
        self.auth_service = auth_service
        self.course_service = course_service
        self.enrollment_service = enrollment_service
        self.enquiry_service = enquiry_service

    async def convert_enquiry(self, enquiry_id: UUID, course_id: UUID) -> ConversionResult:
        """Convert an enquiry into a PENDING enrollment for ``course_id``.

        Steps:
            1. Load the enquiry and the course (nothing is written if either
               is missing).
            2. Find the user by the enquiry email, or create a STUDENT with a
               hashed temporary password. An existing user's empty phone/name
               is backfilled; non-empty values are never overwritten.
            3. Create the enrollment (PENDING/PENDING). If one already exists
               it is returned unchanged.
            4. Mark the enquiry CONVERTED.

        Raises:
            EnquiryNotFoundError: If the enquiry does not exist
            CourseNotFoundError: If the course does not exist
        """
        enquiry = await self.enquiry_service.get_enquiry(enquiry_id)
        if enquiry is None:
            raise EnquiryNotFoundError
        await self.course_service.require_course(course_id)

        user, user_created = await self.auth_service.get_or_create_student(
            email=enquiry.email,
            name=enquiry.name,
            phone=enquiry.phone,
        )

        enrollment, enrollment_created = await self.enrollment_service.create_enrollment(
            user.id, course_id
        )

        await self.enquiry_service.update_status(enquiry.id, EnquiryStatus.CONVERTED)

        logger.info(
            "enquiry_converted",
            enquiry_id=str(enquiry_id),
            course_id=str(course_id),
            user_id=str(user.id),
            user_created=user_created,
            enrollment_created=enrollment_created,
        )
        return ConversionResult(enrollment, user, user_created, enrollment_created)

    async def request_enrollment(
        self, data: "EnrollmentRequest"
    ) -> EnrollmentRequestResult:
        """Handle the public enrollment form.

        Raises:
            CourseNotFoundError: If the course does not exist
            AlreadyEnrolledError: If the user already has an enrollment
        """
        course = await self.course_service.require_course(data.course_id)

        user, _ = await self.auth_service.get_or_create_student(
            email=data.email,
            name=data.name,
            phone=data.phone,
        )

        enrollment, created = await self.enrollment_service.create_enrollment(
            user.id, course.id
        )
        if not created:
            raise AlreadyEnrolledError

        if data.message:
            await self.enquiry_service.create_enquiry(
                name=data.name,
                email=data.email,
                phone=data.phone,
                course_interest=course.title,
                message=data.message,
            )

        logger.info(
            "enrollment_requested",
            user_id=str(user.id),
            course_id=str(course.id),
        )
        return EnrollmentRequestResult(enrollment, course, user)
