"""Database models for users.

Uses cassandra-driver directly (no ORM). Tables are created from the CQL
statements below by ``planetnine.core.database``.
"""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from planetnine.auth.permissions import UserRole
from planetnine.core.timeutils import ensure_utc_aware, utcnow


USER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.users (
    id UUID PRIMARY KEY,
    email TEXT,
    name TEXT,
    phone TEXT,
    password_hash TEXT,
    role TEXT,
    is_active BOOLEAN,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

USER_EMAIL_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS users_email_idx ON {keyspace}.users (email)
"""

AUTH_TABLES_CQL = [
    USER_TABLE_CQL,
    USER_EMAIL_INDEX_CQL,
]


class User:
    """User entity for authentication and authorization.

    Attributes:
        id: Unique identifier (UUID)
        email: Lower-cased email address (lookup key)
        name: Full name
        phone: Phone number (may be empty)
        password_hash: Argon2id hashed password
        role: STUDENT, TUTOR or ADMIN
        is_active: Account status
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """

    def __init__(
        self,
        id: UUID | None = None,
        email: str = "",
        name: str = "",
        phone: str | None = None,
        password_hash: str = "",
        role: str = UserRole.STUDENT.value,
        is_active: bool = True,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.email = email.lower().strip()
        self.name = name
        self.phone = phone
        self.password_hash = password_hash
        self.role = role
        self.is_active = is_active
        self.created_at = ensure_utc_aware(created_at) or utcnow()
        self.updated_at = ensure_utc_aware(updated_at)

    @classmethod
    def from_row(cls, row: Any) -> "User":
        """Create User instance from Cassandra row."""
        return cls(
            id=row.id,
            email=row.email or "",
            name=row.name or "",
            phone=row.phone,
            password_hash=row.password_hash or "",
            role=row.role or UserRole.STUDENT.value,
            is_active=bool(row.is_active),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (never includes password_hash)."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
