"""Enrollment service layer.

Business logic for:
- Creating enrollments, unique per (user, course)
- Admin status updates with validated transitions
- Listing a learner's enrollments, a course's enrollments and the admin overview
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from planetnine.core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from planetnine.core.timeutils import utcnow
from planetnine.enrollments.models import (
    Enrollment,
    EnrollmentStatus,
    PaymentStatus,
    can_transition,
)


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from planetnine.progress.service import ProgressService

logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class EnrollmentNotFoundError(NotFoundError):
    """Enrollment not found."""

    default_message = "Enrollment not found"
    default_code = "enrollment_not_found"


class AlreadyEnrolledError(ConflictError):
    """User already has an enrollment for the course."""

    default_message = "You have already enrolled in this course"
    default_code = "already_enrolled"


class InvalidEnrollmentTransitionError(ValidationFailedError):
    """Requested status change is not allowed from the current status."""

    default_message = "Invalid enrollment status transition"
    default_code = "invalid_enrollment_transition"


# ==============================================================================
# Enrollment Service
# ==============================================================================


class EnrollmentService:
    """Service for course enrollments."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        progress_service: "ProgressService",
    ):
        """Initialize with Cassandra session.

        Args:
            session: Cassandra session with aexecute() support
            keyspace: Keyspace name for queries
            progress_service: Unlocks the first module on approval
        """
        self.session = session
        self.keyspace = keyspace
        self.progress_service = progress_service
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements."""
        self._get_enrollment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments
            WHERE user_id = ? AND course_id = ?
        """)
        self._get_user_enrollments = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.enrollments WHERE user_id = ?"
        )
        self._list_enrollments = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.enrollments LIMIT ?"
        )
        self._insert_enrollment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments
            (user_id, course_id, status, payment_status, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)
        self._update_enrollment = self.session.prepare(f"""
            UPDATE {self.keyspace}.enrollments
            SET status = ?, payment_status = ?, updated_at = ?
            WHERE user_id = ? AND course_id = ?
        """)
        self._upsert_enrollment_by_course = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments_by_course
            (course_id, user_id, status, created_at)
            VALUES (?, ?, ?, ?)
        """)
        self._get_course_enrollments = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.enrollments_by_course WHERE course_id = ?"
        )
        # Admin dashboard only
        self._count_by_status = self.session.prepare(f"""
            SELECT COUNT(*) FROM {self.keyspace}.enrollments
            WHERE status = ?
            ALLOW FILTERING
        """)

    # ==========================================================================
    # Queries
    # ==========================================================================

    async def get_enrollment(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        """Get enrollment by user and course."""
        result = await self.session.aexecute(self._get_enrollment, [user_id, course_id])
        row = result.one()
        return Enrollment.from_row(row) if row else None

    async def list_user_enrollments(self, user_id: UUID) -> list[Enrollment]:
        """Get all enrollments for a user, newest first."""
        rows = await self.session.aexecute(self._get_user_enrollments, [user_id])
        enrollments = [Enrollment.from_row(row) for row in rows]
        return sorted(enrollments, key=lambda e: e.created_at, reverse=True)

    async def list_enrollments(self, limit: int = 200) -> list[Enrollment]:
        """Admin overview of enrollments, newest first."""
        rows = await self.session.aexecute(self._list_enrollments, [limit])
        enrollments = [Enrollment.from_row(row) for row in rows]
        return sorted(enrollments, key=lambda e: e.created_at, reverse=True)

    async def list_course_enrollments(self, course_id: UUID) -> list[Enrollment]:
        """Get every enrollment in a course, newest first.

        Reads the ``enrollments_by_course`` lookup, so payment status is not
        populated.
        """
        rows = await self.session.aexecute(self._get_course_enrollments, [course_id])
        enrollments = [Enrollment.from_course_row(row) for row in rows]
        return sorted(enrollments, key=lambda e: e.created_at, reverse=True)

    async def count_by_status(self, status: EnrollmentStatus) -> int:
        """Count enrollments in a status across all courses."""
        result = await self.session.aexecute(self._count_by_status, [status.value])
        row = result.one()
        return row.count if row else 0

    # ==========================================================================
    # Mutations
    # ==========================================================================

    async def create_enrollment(
        self, user_id: UUID, course_id: UUID
    ) -> tuple[Enrollment, bool]:
        """Create a PENDING/PENDING enrollment unless one already exists.

        The insert is a lightweight transaction, so concurrent requests for
        the same (user, course) produce a single row; the loser gets the
        existing one back.

        Returns:
            Tuple of (enrollment, created)
        """
        enrollment = Enrollment(
            user_id=user_id,
            course_id=course_id,
            status=EnrollmentStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
        )

        result = await self.session.aexecute(
            self._insert_enrollment,
            [
                enrollment.user_id,
                enrollment.course_id,
                enrollment.status,
                enrollment.payment_status,
                enrollment.created_at,
                enrollment.updated_at,
            ],
        )

        if not result.was_applied:
            existing = await self.get_enrollment(user_id, course_id)
            if existing is None:
                raise EnrollmentNotFoundError
            return existing, False

        await self.session.aexecute(
            self._upsert_enrollment_by_course,
            [
                enrollment.course_id,
                enrollment.user_id,
                enrollment.status,
                enrollment.created_at,
            ],
        )

        logger.info(
            "enrollment_created",
            user_id=str(user_id),
            course_id=str(course_id),
        )
        return enrollment, True

    async def update_status(
        self,
        user_id: UUID,
        course_id: UUID,
        status: EnrollmentStatus,
        payment_status: PaymentStatus | None = None,
    ) -> Enrollment:
        """Move an enrollment to a new status.

        Approving an enrollment unlocks the course's first module for the
        learner. Setting the current status again only updates the payment
        status.

        Raises:
            EnrollmentNotFoundError: If the enrollment does not exist
            InvalidEnrollmentTransitionError: If the transition is not allowed
        """
        enrollment = await self.get_enrollment(user_id, course_id)
        if enrollment is None:
            raise EnrollmentNotFoundError

        previous = enrollment.status
        if status.value != previous and not can_transition(previous, status):
            raise InvalidEnrollmentTransitionError(
                f"Cannot change enrollment from {previous} to {status.value}"
            )

        enrollment.status = status.value
        if payment_status is not None:
            enrollment.payment_status = payment_status.value
        enrollment.updated_at = utcnow()

        await self.session.aexecute(
            self._update_enrollment,
            [
                enrollment.status,
                enrollment.payment_status,
                enrollment.updated_at,
                enrollment.user_id,
                enrollment.course_id,
            ],
        )
        await self.session.aexecute(
            self._upsert_enrollment_by_course,
            [
                enrollment.course_id,
                enrollment.user_id,
                enrollment.status,
                enrollment.created_at,
            ],
        )

        logger.info(
            "enrollment_status_updated",
            user_id=str(user_id),
            course_id=str(course_id),
            previous=previous,
            status=enrollment.status,
        )

        if status == EnrollmentStatus.APPROVED and previous != status.value:
            await self.progress_service.unlock_first_module(user_id, course_id)

        return enrollment
