"""Database models for course enrollments.

Cassandra table definitions for:
- Enrollments: partitioned by user (a learner's enrollments are one read);
  one row per (user, course), inserted with ``IF NOT EXISTS``
- Enrollments by course: reverse lookup for admin views

Architecture: Dual-write pattern, the same as the rest of the catalog.
"""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from planetnine.core.timeutils import ensure_utc_aware, utcnow


class EnrollmentStatus(str, Enum):
    """Enrollment lifecycle status."""

    PENDING = "PENDING"  # Requested, awaiting admin review
    APPROVED = "APPROVED"  # Accepted, first module unlocked
    ACTIVE = "ACTIVE"  # Learner is taking the course
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"


class PaymentStatus(str, Enum):
    """Enrollment payment status."""

    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


ALLOWED_TRANSITIONS: dict[EnrollmentStatus, frozenset[EnrollmentStatus]] = {
    EnrollmentStatus.PENDING: frozenset(
        {
            EnrollmentStatus.APPROVED,
            EnrollmentStatus.REJECTED,
            EnrollmentStatus.CANCELLED,
        }
    ),
    EnrollmentStatus.APPROVED: frozenset(
        {
            EnrollmentStatus.ACTIVE,
            EnrollmentStatus.COMPLETED,
            EnrollmentStatus.CANCELLED,
        }
    ),
    EnrollmentStatus.ACTIVE: frozenset(
        {EnrollmentStatus.COMPLETED, EnrollmentStatus.CANCELLED}
    ),
    EnrollmentStatus.COMPLETED: frozenset(),
    EnrollmentStatus.CANCELLED: frozenset(),
    EnrollmentStatus.REJECTED: frozenset(),
}


def can_transition(current: EnrollmentStatus | str, new: EnrollmentStatus | str) -> bool:
    """Check whether an enrollment may move from ``current`` to ``new``.

    Examples:
        >>> can_transition("PENDING", "APPROVED")
        True
        >>> can_transition("COMPLETED", "PENDING")
        False
    """
    return EnrollmentStatus(new) in ALLOWED_TRANSITIONS[EnrollmentStatus(current)]


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

ENROLLMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments (
    user_id UUID,
    course_id UUID,
    status TEXT,
    payment_status TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY (user_id, course_id)
)
"""

ENROLLMENTS_BY_COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments_by_course (
    course_id UUID,
    user_id UUID,
    status TEXT,
    created_at TIMESTAMP,
    PRIMARY KEY (course_id, user_id)
)
"""

ENROLLMENTS_TABLES_CQL = [
    ENROLLMENTS_TABLE_CQL,
    ENROLLMENTS_BY_COURSE_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class Enrollment:
    """A learner's registration in a course.

    Attributes:
        user_id: Learner
        course_id: Course
        status: EnrollmentStatus value
        payment_status: PaymentStatus value
        created_at: Request timestamp
        updated_at: Last status change
    """

    def __init__(
        self,
        user_id: UUID,
        course_id: UUID,
        status: str = EnrollmentStatus.PENDING.value,
        payment_status: str = PaymentStatus.PENDING.value,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.user_id = user_id
        self.course_id = course_id
        self.status = status
        self.payment_status = payment_status
        self.created_at = ensure_utc_aware(created_at) or utcnow()
        self.updated_at = ensure_utc_aware(updated_at)

    @classmethod
    def from_row(cls, row: Any) -> "Enrollment":
        """Create Enrollment instance from an ``enrollments`` row."""
        return cls(
            user_id=row.user_id,
            course_id=row.course_id,
            status=row.status or EnrollmentStatus.PENDING.value,
            payment_status=row.payment_status or PaymentStatus.PENDING.value,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @classmethod
    def from_course_row(cls, row: Any) -> "Enrollment":
        """Create Enrollment instance from an ``enrollments_by_course`` row.

        The lookup table carries no payment columns; ``payment_status`` is
        left at its PENDING default.
        """
        return cls(
            user_id=row.user_id,
            course_id=row.course_id,
            status=row.status or EnrollmentStatus.PENDING.value,
            created_at=row.created_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "user_id": self.user_id,
            "course_id": self.course_id,
            "status": self.status,
            "payment_status": self.payment_status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return f"<Enrollment {self.user_id}/{self.course_id} ({self.status})>"
