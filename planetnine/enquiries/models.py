"""Database models for contact enquiries."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from planetnine.core.timeutils import ensure_utc_aware, utcnow


class EnquiryStatus(str, Enum):
    """Enquiry status.

    PENDING enquiries are either converted into an enrollment or closed by an
    admin as RESOLVED or REJECTED.
    """

    PENDING = "PENDING"
    CONVERTED = "CONVERTED"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"


# Messages auto-generated by the course enrollment form; hidden from the inbox
ENROLLMENT_REQUEST_PREFIX = "Enrollment request"

DEFAULT_SUBJECT = "General Inquiry"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

ENQUIRIES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enquiries (
    id UUID PRIMARY KEY,
    name TEXT,
    email TEXT,
    phone TEXT,
    course_interest TEXT,
    message TEXT,
    status TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

ENQUIRIES_TABLES_CQL = [
    ENQUIRIES_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class Enquiry:
    """Contact or interest record submitted through a public form.

    Attributes:
        id: Unique identifier (UUID)
        name: Sender name
        email: Sender email (lower-cased)
        phone: Sender phone (may be empty)
        course_interest: Subject line or course title
        message: Free-text message (HTML-escaped)
        status: EnquiryStatus value
        created_at: Submission timestamp
        updated_at: Last status change
    """

    def __init__(
        self,
        id: UUID | None = None,
        name: str = "",
        email: str = "",
        phone: str | None = None,
        course_interest: str | None = None,
        message: str | None = None,
        status: str = EnquiryStatus.PENDING.value,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.name = name
        self.email = email.lower().strip()
        self.phone = phone
        self.course_interest = course_interest
        self.message = message
        self.status = status
        self.created_at = ensure_utc_aware(created_at) or utcnow()
        self.updated_at = ensure_utc_aware(updated_at)

    @property
    def is_enrollment_request(self) -> bool:
        return bool(self.message) and self.message.startswith(ENROLLMENT_REQUEST_PREFIX)

    @classmethod
    def from_row(cls, row: Any) -> "Enquiry":
        """Create Enquiry instance from Cassandra row."""
        return cls(
            id=row.id,
            name=row.name or "",
            email=row.email or "",
            phone=row.phone,
            course_interest=row.course_interest,
            message=row.message,
            status=row.status or EnquiryStatus.PENDING.value,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "course_interest": self.course_interest,
            "message": self.message,
            "status": self.status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return f"<Enquiry {self.email} ({self.status})>"
