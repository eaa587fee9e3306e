"""Contact enquiries and their conversion into enrollments.

Note: Router is not exported here to avoid circular imports.
Import directly from planetnine.enquiries.router when needed.
"""

from .models import ENQUIRIES_TABLES_CQL, Enquiry, EnquiryStatus
from .service import EnquiryService
from .workflow import EnquiryConversionWorkflow


__all__ = [
    "ENQUIRIES_TABLES_CQL",
    "Enquiry",
    "EnquiryConversionWorkflow",
    "EnquiryService",
    "EnquiryStatus",
]
