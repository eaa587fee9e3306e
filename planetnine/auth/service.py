"""Authentication service layer.

Business logic for:
- Login and access token issuance
- User lookup and creation
- Find-or-create of student accounts from public forms and enquiries
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from planetnine.auth.models import User
from planetnine.auth.permissions import UserRole
from planetnine.auth.schemas import TokenResponse
from planetnine.auth.security import (
    create_access_token,
    generate_temporary_password,
    hash_password,
    verify_password,
)
from planetnine.config.settings import get_settings
from planetnine.core.exceptions import ConflictError, LmsError, NotFoundError
from planetnine.core.timeutils import utcnow


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class InvalidCredentialsError(LmsError):
    """Email/password pair did not match an active account."""

    default_message = "Invalid email or password"
    default_code = "invalid_credentials"


class UserExistsError(ConflictError):
    """Email already registered."""

    default_message = "Email already registered"
    default_code = "user_exists"


class UserNotFoundError(NotFoundError):
    """User not found."""

    default_message = "User not found"
    default_code = "user_not_found"


# ==============================================================================
# Auth Service
# ==============================================================================


class AuthService:
    """User management and token operations."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session.

        Args:
            session: Cassandra session with aexecute() support
            keyspace: Keyspace name for queries
        """
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for better performance."""
        self._get_user_by_email = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.users WHERE email = ?"
        )
        self._get_user_by_id = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.users WHERE id = ?"
        )
        self._insert_user = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.users
            (id, email, name, phone, password_hash, role, is_active,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._update_user_contact = self.session.prepare(f"""
            UPDATE {self.keyspace}.users
            SET name = ?, phone = ?, updated_at = ?
            WHERE id = ?
        """)
        # Admin-only, low-frequency
        self._count_users_by_role = self.session.prepare(f"""
            SELECT COUNT(*) FROM {self.keyspace}.users
            WHERE role = ?
            ALLOW FILTERING
        """)

    # ==========================================================================
    # User Operations
    # ==========================================================================

    async def get_user_by_email(self, email: str) -> User | None:
        """Find user by email address (case-insensitive)."""
        result = await self.session.aexecute(
            self._get_user_by_email, [email.lower().strip()]
        )
        row = result.one()
        return User.from_row(row) if row else None

    async def get_user_by_id(self, user_id: UUID) -> User | None:
        """Find user by ID."""
        result = await self.session.aexecute(self._get_user_by_id, [user_id])
        row = result.one()
        return User.from_row(row) if row else None

    async def count_users(self, role: UserRole) -> int:
        """Count users holding a role."""
        result = await self.session.aexecute(self._count_users_by_role, [role.value])
        row = result.one()
        return row.count if row else 0

    async def create_user(
        self,
        email: str,
        name: str,
        password: str,
        role: UserRole = UserRole.STUDENT,
        phone: str | None = None,
    ) -> User:
        """Create a user with a hashed password.

        Raises:
            UserExistsError: If the email is already registered
        """
        if await self.get_user_by_email(email):
            raise UserExistsError

        user = User(
            email=email,
            name=name,
            phone=phone or None,
            password_hash=hash_password(password),
            role=role.value,
            is_active=True,
        )

        await self.session.aexecute(
            self._insert_user,
            [
                user.id,
                user.email,
                user.name,
                user.phone,
                user.password_hash,
                user.role,
                user.is_active,
                user.created_at,
                user.updated_at,
            ],
        )
        logger.info("user_created", user_id=str(user.id), role=user.role)
        return user

    async def update_contact(
        self,
        user: User,
        name: str | None = None,
        phone: str | None = None,
    ) -> User:
        """Overwrite name and/or phone. Callers decide what may be overwritten."""
        user.name = name if name is not None else user.name
        user.phone = phone if phone is not None else user.phone
        user.updated_at = utcnow()

        await self.session.aexecute(
            self._update_user_contact,
            [user.name, user.phone, user.updated_at, user.id],
        )
        return user

    async def get_or_create_student(
        self,
        email: str,
        name: str,
        phone: str | None = None,
    ) -> tuple[User, bool]:
        """Resolve the account behind an enquiry or public enrollment form.

        Missing accounts are created as STUDENT with a random temporary
        password (only its hash is stored). For existing accounts an empty
        phone or name is backfilled from the form; non-empty values are kept.

        Returns:
            Tuple of (user, created)
        """
        user = await self.get_user_by_email(email)

        if user is None:
            user = await self.create_user(
                email=email,
                name=name,
                password=generate_temporary_password(),
                role=UserRole.STUDENT,
                phone=phone,
            )
            return user, True

        backfill_phone = phone if not user.phone and phone else None
        backfill_name = name if not user.name and name else None
        if backfill_phone or backfill_name:
            user = await self.update_contact(
                user, name=backfill_name, phone=backfill_phone
            )
            logger.info(
                "user_contact_backfilled",
                user_id=str(user.id),
                phone=bool(backfill_phone),
                name=bool(backfill_name),
            )

        return user, False

    # ==========================================================================
    # Authentication
    # ==========================================================================

    async def authenticate_user(self, email: str, password: str) -> User:
        """Authenticate with email and password.

        Raises:
            InvalidCredentialsError: Unknown email, wrong password or inactive
        """
        user = await self.get_user_by_email(email)
        if user is None or not user.is_active:
            raise InvalidCredentialsError
        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError
        return user

    def create_token(self, user: User) -> TokenResponse:
        """Issue an access token carrying the principal {sub, email, role}."""
        settings = get_settings()
        token = create_access_token(
            {"sub": str(user.id), "email": user.email, "role": user.role}
        )
        return TokenResponse(
            access_token=token,
            expires_in=settings.auth_access_token_expire_minutes * 60,
        )
