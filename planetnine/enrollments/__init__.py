"""Course enrollments.

Note: Router is not exported here to avoid circular imports.
Import directly from planetnine.enrollments.router when needed.
"""

from .models import (
    ENROLLMENTS_TABLES_CQL,
    Enrollment,
    EnrollmentStatus,
    PaymentStatus,
)


__all__ = [
    "ENROLLMENTS_TABLES_CQL",
    "Enrollment",
    "EnrollmentStatus",
    "PaymentStatus",
]
