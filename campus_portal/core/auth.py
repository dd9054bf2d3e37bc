"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependencies that resolve the caller into a Session
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from campus_portal.core.config import get_settings
from campus_portal.core.errors import AuthenticationError, NotFoundError, PermissionDeniedError
from campus_portal.core.scopes import Session, require
from campus_portal.schemas.schemas import UserRole

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor
bearer_scheme = HTTPBearer()


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token. Each token carries a jti so it can be revoked."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_session(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> Session:
    """
    FastAPI dependency - resolve the bearer token into a Session.

    Usage:
        @router.get("/protected")
        async def route(session: Session = Depends(get_current_session)):
            ...
    """
    # Imported here: the services import this module for hashing and tokens
    from campus_portal.services.identity_service import get_identity_service
    from campus_portal.services.user_service import get_user_service

    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise AuthenticationError("Invalid or expired token")
    if get_identity_service().is_revoked(payload.get("jti", "")):
        raise AuthenticationError("Token has been signed out")

    try:
        profile = get_user_service().get_profile(payload["sub"])
    except NotFoundError:
        raise AuthenticationError("User profile not found. Please contact the administrator.")

    return Session(
        uid=profile["uid"],
        email=profile["email"],
        role=UserRole(profile["role"]),
        department=profile.get("department"),
        section=profile.get("section"),
        profile=profile,
    )


def require_capability(permission: str):
    """Dependency factory: the session must hold `permission` (a Capability flag)."""
    async def dependency(session: Session = Depends(get_current_session)) -> Session:
        require(session, permission)
        return session
    return dependency


async def get_current_student(session: Session = Depends(get_current_session)) -> Session:
    """Dependency - Require student role."""
    if not session.is_student:
        raise PermissionDeniedError("Students only")
    return session
