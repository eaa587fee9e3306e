"""Authentication API endpoints.

Provides routes for:
- Login (access token issuance)
- Current user profile
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from planetnine.auth.dependencies import AuthServiceDep, CurrentUser
from planetnine.auth.schemas import LoginRequest, TokenResponse, UserResponse
from planetnine.auth.service import InvalidCredentialsError, UserNotFoundError


router = APIRouter(prefix="/v1/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with email and password",
)
async def login(
    data: LoginRequest,
    auth_service: AuthServiceDep,
) -> TokenResponse:
    """Authenticate user and return an access token."""
    try:
        user = await auth_service.authenticate_user(data.email, data.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    return auth_service.create_token(user)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
)
async def get_me(
    user: CurrentUser,
    auth_service: AuthServiceDep,
) -> UserResponse:
    """Get current authenticated user profile.

    Returns full user data from database (not just token claims).
    """
    db_user = await auth_service.get_user_by_id(UUID(str(user.id)))
    if not db_user:
        raise UserNotFoundError

    return UserResponse.from_user(db_user)
