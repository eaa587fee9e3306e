"""Database models for the course catalog.

Cassandra table definitions for:
- Courses: Main course table plus status and tutor lookups
- Modules: Main module table plus ``modules_by_course`` clustered by position

A module's ``order`` is stored in the ``position`` column (``ORDER`` is a
reserved CQL keyword). Positions are unique per course, enforced with a
lightweight transaction on ``modules_by_course``.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from planetnine.core.timeutils import ensure_utc_aware, utcnow


class CourseStatus(str, Enum):
    """Course publication status."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    id UUID PRIMARY KEY,
    title TEXT,
    description TEXT,
    price DECIMAL,
    status TEXT,
    tutor_id UUID,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

COURSES_BY_STATUS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses_by_status (
    status TEXT,
    created_at TIMESTAMP,
    course_id UUID,
    PRIMARY KEY (status, created_at, course_id)
) WITH CLUSTERING ORDER BY (created_at DESC, course_id ASC)
"""

# Authoring lookup: a tutor's courses, drafts included
COURSES_BY_TUTOR_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses_by_tutor (
    tutor_id UUID,
    created_at TIMESTAMP,
    course_id UUID,
    PRIMARY KEY (tutor_id, created_at, course_id)
) WITH CLUSTERING ORDER BY (created_at DESC, course_id ASC)
"""

MODULE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.modules (
    id UUID PRIMARY KEY,
    course_id UUID,
    title TEXT,
    description TEXT,
    position INT,
    created_at TIMESTAMP
)
"""

# Sequence lookup: "next module" is a single clustering-range read
MODULES_BY_COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.modules_by_course (
    course_id UUID,
    position INT,
    module_id UUID,
    title TEXT,
    description TEXT,
    created_at TIMESTAMP,
    PRIMARY KEY (course_id, position)
) WITH CLUSTERING ORDER BY (position ASC)
"""

COURSES_TABLES_CQL = [
    COURSE_TABLE_CQL,
    COURSES_BY_STATUS_TABLE_CQL,
    COURSES_BY_TUTOR_TABLE_CQL,
    MODULE_TABLE_CQL,
    MODULES_BY_COURSE_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class Course:
    """Course entity.

    Attributes:
        id: Unique identifier (UUID)
        title: Course title
        description: Course description
        price: Course price (None = free)
        status: Publication status (DRAFT, PUBLISHED, ARCHIVED)
        tutor_id: User who authored the course
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    def __init__(
        self,
        id: UUID | None = None,
        title: str = "",
        description: str | None = None,
        price: Decimal | None = None,
        status: str = CourseStatus.DRAFT.value,
        tutor_id: UUID | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.title = title.strip()
        self.description = description
        self.price = price
        self.status = status
        self.tutor_id = tutor_id
        self.created_at = ensure_utc_aware(created_at) or utcnow()
        self.updated_at = ensure_utc_aware(updated_at)

    @property
    def is_published(self) -> bool:
        return self.status == CourseStatus.PUBLISHED.value

    @classmethod
    def from_row(cls, row: Any) -> "Course":
        """Create Course instance from Cassandra row."""
        return cls(
            id=row.id,
            title=row.title or "",
            description=row.description,
            price=row.price,
            status=row.status or CourseStatus.DRAFT.value,
            tutor_id=row.tutor_id,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "status": self.status,
            "tutor_id": self.tutor_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return f"<Course {self.title} ({self.status})>"


class Module:
    """Module entity: an ordered unit of a course that gates a quiz.

    Attributes:
        id: Unique identifier (UUID)
        course_id: Owning course
        title: Module title
        description: Module description
        order: Sequence position within the course (unique per course)
        created_at: Creation timestamp
    """

    def __init__(
        self,
        id: UUID | None = None,
        course_id: UUID | None = None,
        title: str = "",
        description: str | None = None,
        order: int = 0,
        created_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.course_id = course_id
        self.title = title.strip()
        self.description = description
        self.order = order
        self.created_at = ensure_utc_aware(created_at) or utcnow()

    @classmethod
    def from_row(cls, row: Any) -> "Module":
        """Create Module instance from a ``modules`` row."""
        return cls(
            id=row.id,
            course_id=row.course_id,
            title=row.title or "",
            description=row.description,
            order=row.position,
            created_at=row.created_at,
        )

    @classmethod
    def from_course_row(cls, row: Any) -> "Module":
        """Create Module instance from a ``modules_by_course`` row."""
        return cls(
            id=row.module_id,
            course_id=row.course_id,
            title=row.title or "",
            description=row.description,
            order=row.position,
            created_at=row.created_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "course_id": self.course_id,
            "title": self.title,
            "description": self.description,
            "order": self.order,
            "created_at": self.created_at,
        }

    def __repr__(self) -> str:
        return f"<Module {self.order}: {self.title}>"
