"""Enquiry service layer.

Business logic for:
- Storing public contact form submissions
- Admin inbox listing and status updates
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from planetnine.core.exceptions import NotFoundError
from planetnine.core.timeutils import utcnow
from planetnine.enquiries.models import Enquiry, EnquiryStatus


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class EnquiryNotFoundError(NotFoundError):
    """Enquiry not found."""

    default_message = "Enquiry not found"
    default_code = "enquiry_not_found"


# ==============================================================================
# Enquiry Service
# ==============================================================================


class EnquiryService:
    """Service for contact enquiries."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements."""
        self._get_enquiry = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.enquiries WHERE id = ?"
        )
        self._list_enquiries = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.enquiries LIMIT ?"
        )
        self._insert_enquiry = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enquiries
            (id, name, email, phone, course_interest, message, status,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._update_status = self.session.prepare(f"""
            UPDATE {self.keyspace}.enquiries
            SET status = ?, updated_at = ?
            WHERE id = ?
        """)
        # Admin dashboard only
        self._get_enquiries_by_status = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enquiries
            WHERE status = ?
            ALLOW FILTERING
        """)

    async def create_enquiry(
        self,
        name: str,
        email: str,
        message: str | None,
        phone: str | None = None,
        course_interest: str | None = None,
    ) -> Enquiry:
        """Store a PENDING enquiry. Inputs are expected to be sanitized."""
        enquiry = Enquiry(
            name=name,
            email=email,
            phone=phone or None,
            course_interest=course_interest,
            message=message,
            status=EnquiryStatus.PENDING.value,
        )

        await self.session.aexecute(
            self._insert_enquiry,
            [
                enquiry.id,
                enquiry.name,
                enquiry.email,
                enquiry.phone,
                enquiry.course_interest,
                enquiry.message,
                enquiry.status,
                enquiry.created_at,
                enquiry.updated_at,
            ],
        )

        logger.info("enquiry_created", enquiry_id=str(enquiry.id))
        return enquiry

    async def get_enquiry(self, enquiry_id: UUID) -> Enquiry | None:
        """Get enquiry by ID."""
        result = await self.session.aexecute(self._get_enquiry, [enquiry_id])
        row = result.one()
        return Enquiry.from_row(row) if row else None

    async def list_enquiries(self, limit: int = 500) -> list[Enquiry]:
        """Admin inbox: newest first, without enrollment-form notes."""
        rows = await self.session.aexecute(self._list_enquiries, [limit])
        enquiries = [
            enquiry
            for enquiry in (Enquiry.from_row(row) for row in rows)
            if not enquiry.is_enrollment_request
        ]
        return sorted(enquiries, key=lambda e: e.created_at, reverse=True)

    async def count_pending_enquiries(self) -> int:
        """Count PENDING inbox enquiries, excluding enrollment-form notes."""
        rows = await self.session.aexecute(
            self._get_enquiries_by_status, [EnquiryStatus.PENDING.value]
        )
        return sum(
            1 for row in rows if not Enquiry.from_row(row).is_enrollment_request
        )

    async def update_status(self, enquiry_id: UUID, status: EnquiryStatus) -> Enquiry:
        """Set an enquiry's status.

        Raises:
            EnquiryNotFoundError: If the enquiry does not exist
        """
        enquiry = await self.get_enquiry(enquiry_id)
        if enquiry is None:
            raise EnquiryNotFoundError

        enquiry.status = status.value
        enquiry.updated_at = utcnow()
        await self.session.aexecute(
            self._update_status, [enquiry.status, enquiry.updated_at, enquiry.id]
        )

        logger.info(
            "enquiry_status_updated",
            enquiry_id=str(enquiry_id),
            status=enquiry.status,
        )
        return enquiry
