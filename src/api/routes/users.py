"""User directory and login statistics routes."""

from typing import List

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_user, require_roles
from core.dependencies import UserManagerDep
from core.exceptions import ValidationError
from schemas.user import ActiveUser, BrowserUsage, User, UserInfo

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=List[UserInfo], summary="List all users")
def list_users(
    user_manager: UserManagerDep,
    current_user: User = Depends(require_roles("admin")),
) -> List[UserInfo]:
    return user_manager.list_users()


@router.get("/students", response_model=List[UserInfo], summary="Students of my faculty")
def list_faculty_students(
    user_manager: UserManagerDep,
    current_user: User = Depends(require_roles("marketing_coordinator")),
) -> List[UserInfo]:
    if not current_user.faculty_id:
        raise ValidationError("User is not assigned to a faculty")
    return user_manager.list_users_by_faculty(current_user.faculty_id, "student")


@router.get("/guests", response_model=List[UserInfo], summary="Guests of my faculty")
def list_faculty_guests(
    user_manager: UserManagerDep,
    current_user: User = Depends(require_roles("marketing_coordinator")),
) -> List[UserInfo]:
    if not current_user.faculty_id:
        raise ValidationError("User is not assigned to a faculty")
    return user_manager.list_users_by_faculty(current_user.faculty_id, "guest")


@router.get("/most-active", response_model=List[ActiveUser], summary="Most active users")
def most_active_users(
    user_manager: UserManagerDep,
    current_user: User = Depends(require_roles("admin", "marketing_manager")),
) -> List[ActiveUser]:
    return user_manager.most_active_users()


@router.get("/browsers", response_model=List[BrowserUsage], summary="Browser usage")
def browser_usage(
    user_manager: UserManagerDep,
    current_user: User = Depends(require_roles("admin", "marketing_manager")),
) -> List[BrowserUsage]:
    return user_manager.browser_usage()


@router.get("/{user_id}", response_model=UserInfo, summary="Get user by id")
def get_user(
    user_id: str,
    user_manager: UserManagerDep,
    current_user: User = Depends(get_current_user),
) -> UserInfo:
    """Read a user; non-admins may only read themselves."""
    return user_manager.get_user_info(user_id, current_user)
