"""Testimonial service layer."""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from planetnine.core.exceptions import NotFoundError
from planetnine.core.timeutils import utcnow
from planetnine.testimonials.models import Testimonial
from planetnine.testimonials.schemas import CreateTestimonialRequest


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


class TestimonialNotFoundError(NotFoundError):
    """Testimonial not found."""

    default_message = "Testimonial not found"
    default_code = "testimonial_not_found"


class TestimonialService:
    """Service for public testimonials."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements."""
        self._get_testimonial = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.testimonials WHERE id = ?"
        )
        self._list_testimonials = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.testimonials LIMIT ?"
        )
        self._insert_testimonial = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.testimonials
            (id, name, course, rating, content, image_url, is_active,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._set_active = self.session.prepare(f"""
            UPDATE {self.keyspace}.testimonials
            SET is_active = ?, updated_at = ?
            WHERE id = ?
        """)

    async def create_testimonial(self, data: CreateTestimonialRequest) -> Testimonial:
        """Store a testimonial. Inputs are expected to be sanitized."""
        testimonial = Testimonial(
            name=data.name,
            course=data.course,
            rating=data.rating,
            content=data.content,
            image_url=data.image_url,
            is_active=data.is_active,
        )
        await self.session.aexecute(
            self._insert_testimonial,
            [
                testimonial.id,
                testimonial.name,
                testimonial.course,
                testimonial.rating,
                testimonial.content,
                testimonial.image_url,
                testimonial.is_active,
                testimonial.created_at,
                testimonial.updated_at,
            ],
        )

        logger.info("testimonial_created", testimonial_id=str(testimonial.id))
        return testimonial

    async def get_testimonial(self, testimonial_id: UUID) -> Testimonial | None:
        result = await self.session.aexecute(self._get_testimonial, [testimonial_id])
        row = result.one()
        return Testimonial.from_row(row) if row else None

    async def list_testimonials(
        self, active_only: bool = True, limit: int = 500
    ) -> list[Testimonial]:
        """List testimonials, newest first."""
        rows = await self.session.aexecute(self._list_testimonials, [limit])
        testimonials = [Testimonial.from_row(row) for row in rows]
        if active_only:
            testimonials = [t for t in testimonials if t.is_active]
        return sorted(testimonials, key=lambda t: t.created_at, reverse=True)

    async def set_active(self, testimonial_id: UUID, is_active: bool) -> Testimonial:
        """Show or hide a testimonial.

        Raises:
            TestimonialNotFoundError: If the testimonial does not exist
        """
        testimonial = await self.get_testimonial(testimonial_id)
        if testimonial is None:
            raise TestimonialNotFoundError

        testimonial.is_active = is_active
        testimonial.updated_at = utcnow()
        await self.session.aexecute(
            self._set_active,
            [testimonial.is_active, testimonial.updated_at, testimonial.id],
        )

        logger.info(
            "testimonial_updated",
            testimonial_id=str(testimonial_id),
            is_active=is_active,
        )
        return testimonial
