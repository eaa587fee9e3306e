"""Public testimonials.

Note: Router is not exported here to avoid circular imports.
Import directly from planetnine.testimonials.router when needed.
"""

from .models import TESTIMONIALS_TABLES_CQL, Testimonial
from .service import TestimonialService


__all__ = [
    "TESTIMONIALS_TABLES_CQL",
    "Testimonial",
    "TestimonialService",
]
