"""Certificate service layer.

Business logic for:
- Issuing COMPLETION certificates when the final module's quiz is passed
- Generating STUDENT certificates for completed enrollments
- Public verification, per-user listing and the admin overview

Issuance is at most once per (user, course, type): the ``certificates_by_user``
row is claimed with ``IF NOT EXISTS`` and the loser of a race returns the
winner's certificate.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from planetnine.certificates.models import (
    Certificate,
    CertificateType,
    completion_certificate_url,
    generate_certificate_id,
    student_certificate_url,
)
from planetnine.certificates.schemas import (
    AdminCertificateResponse,
    CertificateResponse,
    CertificateVerificationResponse,
)
from planetnine.config.settings import get_settings
from planetnine.core.exceptions import ConflictError, NotFoundError
from planetnine.enrollments.models import EnrollmentStatus


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from planetnine.auth.service import AuthService
    from planetnine.courses.service import CourseService
    from planetnine.enrollments.service import EnrollmentService

logger = structlog.get_logger(__name__)

# Fresh ids per attempt; a collision needs the same millisecond and suffix
MAX_ID_ATTEMPTS = 3


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CertificateNotFoundError(NotFoundError):
    """Certificate not found."""

    default_message = "Certificate not found"
    default_code = "certificate_not_found"


class CourseNotCompletedError(NotFoundError):
    """No completed enrollment for the course."""

    default_message = "Course not completed or not found"
    default_code = "course_not_completed"


class CertificateIdCollisionError(ConflictError):
    """Could not allocate a unique certificate id."""

    default_message = "Could not allocate a certificate id"
    default_code = "certificate_id_collision"


# ==============================================================================
# Certificate Service
# ==============================================================================


class CertificateService:
    """Service for certificate issuance and lookup."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        auth_service: "AuthService",
        course_service: "CourseService",
        enrollment_service: "EnrollmentService",
    ):
        """Initialize with Cassandra session and collaborating services."""
        self.session = session
        self.keyspace = keyspace
        self.auth_service = auth_service
        self.course_service = course_service
        self.enrollment_service = enrollment_service
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements."""
        self._get_certificate = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.certificates WHERE certificate_id = ?"
        )
        self._insert_certificate = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.certificates
            (certificate_id, user_id, course_id, type, certificate_url, issued_at)
            VALUES (?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)
        self._delete_certificate = self.session.prepare(
            f"DELETE FROM {self.keyspace}.certificates WHERE certificate_id = ? "
            "IF EXISTS"
        )
        self._claim_user_certificate = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.certificates_by_user
            (user_id, course_id, type, certificate_id, certificate_url, issued_at)
            VALUES (?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)
        self._get_user_certificate = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.certificates_by_user
            WHERE user_id = ? AND course_id = ? AND type = ?
        """)
        self._get_user_certificates = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.certificates_by_user WHERE user_id = ?"
        )
        self._list_certificates = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.certificates LIMIT ?"
        )

    # ==========================================================================
    # Issuance
    # ==========================================================================

    async def _store_new_certificate(
        self,
        user_id: UUID,
        course_id: UUID,
        certificate_type: CertificateType,
        url_for: Callable[[str], str],
    ) -> Certificate:
        prefix = get_settings().certificate_id_prefix
        for _ in range(MAX_ID_ATTEMPTS):
            certificate_id = generate_certificate_id(prefix)
            certificate = Certificate(
                certificate_id=certificate_id,
                user_id=user_id,
                course_id=course_id,
                type=certificate_type.value,
                certificate_url=url_for(certificate_id),
            )
            result = await self.session.aexecute(
                self._insert_certificate,
                [
                    certificate.certificate_id,
                    certificate.user_id,
                    certificate.course_id,
                    certificate.type,
                    certificate.certificate_url,
                    certificate.issued_at,
                ],
            )
            if result.was_applied:
                return certificate
            logger.warning("certificate_id_collision", certificate_id=certificate_id)
        raise CertificateIdCollisionError

    async def issue_certificate(
        self,
        user_id: UUID,
        course_id: UUID,
        certificate_type: CertificateType,
        url_for: Callable[[str], str],
    ) -> tuple[Certificate, bool]:
        """Issue a certificate unless the user already holds one of this type.

        Args:
            user_id: Certificate holder
            course_id: Completed course
            certificate_type: COMPLETION or STUDENT
            url_for: Builds the display URL from the new certificate id

        Returns:
            Tuple of (certificate, created)
        """
        existing = await self.get_user_certificate(user_id, course_id, certificate_type)
        if existing:
            return existing, False

        certificate = await self._store_new_certificate(
            user_id, course_id, certificate_type, url_for
        )
        result = await self.session.aexecute(
            self._claim_user_certificate,
            [
                certificate.user_id,
                certificate.course_id,
                certificate.type,
                certificate.certificate_id,
                certificate.certificate_url,
                certificate.issued_at,
            ],
        )

        if not result.was_applied:
            # Concurrent issuance won the claim; drop our unreferenced row
            await self.session.aexecute(
                self._delete_certificate, [certificate.certificate_id]
            )
            winner = await self.get_user_certificate(
                user_id, course_id, certificate_type
            )
            logger.info(
                "certificate_already_issued",
                user_id=str(user_id),
                course_id=str(course_id),
                certificate_id=winner.certificate_id if winner else None,
            )
            if winner is None:
                raise CertificateNotFoundError
            return winner, False

        logger.info(
            "certificate_issued",
            user_id=str(user_id),
            course_id=str(course_id),
            certificate_id=certificate.certificate_id,
            type=certificate.type,
        )
        return certificate, True

    async def issue_completion_certificate(
        self, user_id: UUID, course_id: UUID
    ) -> tuple[Certificate, bool]:
        """Issue the course COMPLETION certificate (at most one per user/course)."""
        return await self.issue_certificate(
            user_id,
            course_id,
            CertificateType.COMPLETION,
            lambda _cid: completion_certificate_url(user_id, course_id),
        )

    async def generate_student_certificate(
        self, user_id: UUID, course_id: UUID
    ) -> tuple[Certificate, bool]:
        """Generate a STUDENT certificate for a completed enrollment.

        Raises:
            CourseNotCompletedError: If the enrollment is missing or not COMPLETED
        """
        enrollment = await self.enrollment_service.get_enrollment(user_id, course_id)
        if enrollment is None or enrollment.status != EnrollmentStatus.COMPLETED.value:
            raise CourseNotCompletedError

        return await self.issue_certificate(
            user_id, course_id, CertificateType.STUDENT, student_certificate_url
        )

    # ==========================================================================
    # Queries
    # ==========================================================================

    async def get_certificate(self, certificate_id: str) -> Certificate | None:
        """Get certificate by its public id."""
        result = await self.session.aexecute(self._get_certificate, [certificate_id])
        row = result.one()
        return Certificate.from_row(row) if row else None

    async def get_user_certificate(
        self,
        user_id: UUID,
        course_id: UUID,
        certificate_type: CertificateType,
    ) -> Certificate | None:
        """Get the user's certificate of a given type for a course."""
        result = await self.session.aexecute(
            self._get_user_certificate,
            [user_id, course_id, certificate_type.value],
        )
        row = result.one()
        return Certificate.from_row(row) if row else None

    async def list_user_certificates(self, user_id: UUID) -> list[Certificate]:
        """List all certificates held by a user, newest first."""
        rows = await self.session.aexecute(self._get_user_certificates, [user_id])
        certificates = [Certificate.from_row(row) for row in rows]
        return sorted(certificates, key=lambda c: c.issued_at, reverse=True)

    async def verify_certificate(
        self, certificate_id: str
    ) -> CertificateVerificationResponse:
        """Resolve a certificate id for public verification.

        Raises:
            CertificateNotFoundError: If no certificate has this id
        """
        certificate = await self.get_certificate(certificate_id)
        if certificate is None:
            raise CertificateNotFoundError

        user = await self.auth_service.get_user_by_id(certificate.user_id)
        course = await self.course_service.get_course(certificate.course_id)

        return CertificateVerificationResponse(
            certificate=CertificateResponse.from_certificate(certificate),
            student_name=user.name if user else "",
            course_title=course.title if course else "",
        )

    async def list_certificates(self, limit: int = 500) -> list[AdminCertificateResponse]:
        """Admin overview: every certificate with holder and course, newest first."""
        rows = await self.session.aexecute(self._list_certificates, [limit])
        certificates = sorted(
            (Certificate.from_row(row) for row in rows),
            key=lambda c: c.issued_at,
            reverse=True,
        )

        users = {}
        courses = {}
        items = []
        for certificate in certificates:
            if certificate.user_id not in users:
                users[certificate.user_id] = await self.auth_service.get_user_by_id(
                    certificate.user_id
                )
            if certificate.course_id not in courses:
                courses[certificate.course_id] = await self.course_service.get_course(
                    certificate.course_id
                )
            user = users[certificate.user_id]
            course = courses[certificate.course_id]
            items.append(
                AdminCertificateResponse(
                    **CertificateResponse.from_certificate(certificate).model_dump(),
                    student_name=user.name if user else "",
                    student_email=user.email if user else "",
                    course_title=course.title if course else "",
                )
            )
        return items
