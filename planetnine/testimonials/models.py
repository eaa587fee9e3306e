"""Database models for testimonials."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from planetnine.core.timeutils import ensure_utc_aware, utcnow


TESTIMONIALS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.testimonials (
    id UUID PRIMARY KEY,
    name TEXT,
    course TEXT,
    rating INT,
    content TEXT,
    image_url TEXT,
    is_active BOOLEAN,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

TESTIMONIALS_TABLES_CQL = [
    TESTIMONIALS_TABLE_CQL,
]


class Testimonial:
    """Student testimonial shown on the public site.

    Attributes:
        id: Unique identifier (UUID)
        name: Author name
        course: Course the author took (free text)
        rating: 1 to 5
        content: Testimonial text
        image_url: Optional author photo
        is_active: Only active testimonials are listed publicly
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    def __init__(
        self,
        name: str,
        course: str,
        rating: int,
        content: str,
        image_url: str | None = None,
        is_active: bool = True,
        id: UUID | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.name = name
        self.course = course
        self.rating = rating
        self.content = content
        self.image_url = image_url
        self.is_active = is_active
        self.created_at = ensure_utc_aware(created_at) or utcnow()
        self.updated_at = ensure_utc_aware(updated_at) or self.created_at

    @classmethod
    def from_row(cls, row: Any) -> "Testimonial":
        """Create Testimonial instance from Cassandra row."""
        return cls(
            id=row.id,
            name=row.name or "",
            course=row.course or "",
            rating=row.rating or 0,
            content=row.content or "",
            image_url=row.image_url,
            is_active=bool(row.is_active),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "course": self.course,
            "rating": self.rating,
            "content": self.content,
            "image_url": self.image_url,
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return f"<Testimonial {self.name} ({self.rating})>"
