"""
Authentication Routes

POST /auth/login - Login and get JWT token
POST /auth/logout - Revoke the current token
GET /auth/me - Get current user's profile

There is no self-registration: accounts are provisioned by staff
(POST /users, POST /users/import).
"""

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials

from campus_portal.core.auth import bearer_scheme, decode_token, get_current_session
from campus_portal.core.errors import AuthenticationError, NotFoundError
from campus_portal.core.scopes import Session
from campus_portal.services.identity_service import get_identity_service
from campus_portal.services.user_service import get_user_service
from campus_portal.schemas.schemas import LoginRequest, TokenResponse, UserResponse, MessageResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    token = get_identity_service().sign_in(request.email, request.password)
    uid = decode_token(token)["sub"]
    try:
        profile = get_user_service().get_profile(uid)
    except NotFoundError:
        raise AuthenticationError("User profile not found. Please contact the administrator.")

    return TokenResponse(
        access_token=token,
        uid=uid,
        role=profile["role"],
        profile_completed=profile.get("profile_completed", False),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: Session = Depends(get_current_session),
):
    """Sign out: the token is rejected from now on."""
    get_identity_service().sign_out(credentials.credentials)
    return MessageResponse(message="Signed out")


@router.get("/me", response_model=UserResponse)
async def get_me(session: Session = Depends(get_current_session)):
    """Get current authenticated user's profile."""
    return UserResponse(**session.profile)
