"""Authentication routes.

This module handles HTTP endpoints for user authentication and registration,
plus the token and role dependencies used by every other router.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

import pytz
from fastapi import APIRouter, Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from config import Settings, get_settings
from core.dependencies import SettingsDep, UserManagerDep
from core.exceptions import ForbiddenError, UnauthorizedError
from schemas.common import MessageResponse
from schemas.user import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    User,
    UserInfo,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# HTTP Bearer token security; a missing header is reported as 401 below
security = HTTPBearer(auto_error=False)


def create_access_token(
    data: dict, settings: Optional[Settings] = None, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token.
        settings: Settings holding the signing key; process settings by default.
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token string.
    """
    settings = settings or get_settings()
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(pytz.utc) + expires_delta
    else:
        expire = datetime.now(pytz.utc) + timedelta(
            minutes=settings.access_token_expire_minutes
        )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(
    settings: SettingsDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """Verify JWT token from Authorization header.

    Args:
        settings: Application settings.
        credentials: HTTP Bearer token credentials.

    Returns:
        Decoded token payload.

    Raises:
        UnauthorizedError: If the token is missing, invalid or expired.
    """
    if credentials is None:
        raise UnauthorizedError("Not authenticated")
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise UnauthorizedError("Invalid authentication credentials")
    if payload.get("sub") is None:
        raise UnauthorizedError("Invalid authentication credentials")
    return payload


def get_current_user(
    user_manager: UserManagerDep,
    token_payload: dict = Depends(verify_token),
) -> User:
    """Get current authenticated user.

    Args:
        user_manager: Injected UserManager instance.
        token_payload: Decoded JWT token payload.

    Returns:
        Current User object.

    Raises:
        UnauthorizedError: If the user no longer exists or is inactive.
    """
    user = user_manager.get_user_by_id(token_payload["sub"])
    if user is None:
        raise UnauthorizedError("User not found")
    if user.status != "active":
        raise UnauthorizedError("Account is inactive")
    return user


def require_roles(*roles: str) -> Callable[..., User]:
    """Build a dependency admitting only users with one of ``roles``."""

    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            logger.warning(
                "User %s with role %s denied (requires %s)",
                current_user.id,
                current_user.role,
                ", ".join(roles),
            )
            raise ForbiddenError("Insufficient permissions")
        return current_user

    return checker


@router.post("/register", response_model=RegisterResponse, summary="Register as guest")
def register(req: RegisterRequest, user_manager: UserManagerDep) -> RegisterResponse:
    """Register a new guest account for a faculty.

    Args:
        req: Registration request with email, password, name and faculty.
        user_manager: Injected UserManager instance.

    Returns:
        RegisterResponse with the created user.
    """
    user = user_manager.register(req.email, req.password, req.name, req.faculty_id)
    return RegisterResponse(user=user)


@router.post("/login", response_model=LoginResponse, summary="Log in")
def login(
    req: LoginRequest,
    user_manager: UserManagerDep,
    settings: SettingsDep,
    user_agent: Optional[str] = Header(default=None),
) -> LoginResponse:
    """Login with email and password.

    Returns:
        LoginResponse with user information and JWT token.
    """
    user = user_manager.authenticate(req.email, req.password, user_agent)
    token = create_access_token(
        data={"sub": user.id, "email": user.email, "role": user.role},
        settings=settings,
    )
    return LoginResponse(user=user, token=token)


@router.post("/logout", response_model=MessageResponse, summary="Log out")
def logout() -> MessageResponse:
    """Logout endpoint.

    Note: Since we're using stateless JWT tokens, logout is handled
    client-side by removing the token.
    """
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserInfo, summary="Current user")
def get_current_user_info(
    user_manager: UserManagerDep,
    current_user: User = Depends(get_current_user),
) -> UserInfo:
    return user_manager.get_user_info(current_user.id, current_user)
