"""Role-based access control (RBAC).

Hierarchical permission system:
- ADMIN (level 2): Full system access (enquiries, enrollments, testimonials)
- TUTOR (level 1): Author courses, modules and quizzes
- STUDENT (level 0): Take quizzes and track own progress

Authorization is decided once, in the router dependencies. Workflow and
service code never branches on role.
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles with hierarchical levels."""

    STUDENT = "STUDENT"
    TUTOR = "TUTOR"
    ADMIN = "ADMIN"


ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.STUDENT: 0,
    UserRole.TUTOR: 1,
    UserRole.ADMIN: 2,
}


def get_role_level(role: UserRole | str) -> int:
    """Get the permission level for a role.

    Unknown role strings get level -1 so they never satisfy any check.
    """
    if isinstance(role, str):
        try:
            role = UserRole(role.upper())
        except ValueError:
            return -1
    return ROLE_HIERARCHY.get(role, -1)


def has_permission(user_role: UserRole | str, required_role: UserRole | str) -> bool:
    """Check if user has at least the required permission level.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.TUTOR)
        True
        >>> has_permission(UserRole.STUDENT, UserRole.TUTOR)
        False
        >>> has_permission("ADMIN", "STUDENT")
        True
    """
    return get_role_level(user_role) >= get_role_level(required_role) >= 0


def is_admin(role: UserRole | str) -> bool:
    """Check if role is ADMIN."""
    return get_role_level(role) == ROLE_HIERARCHY[UserRole.ADMIN]


def is_at_least_tutor(role: UserRole | str) -> bool:
    """Check if role is TUTOR or higher (ADMIN)."""
    return has_permission(role, UserRole.TUTOR)
