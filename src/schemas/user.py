"""User schema definitions.

This module defines request and response models for registration, login and
user listings.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from schemas.common import ApiModel

Role = Literal["guest", "student", "marketing_coordinator", "marketing_manager", "admin"]
UserStatus = Literal["active", "inactive"]


class RegisterRequest(ApiModel):
    email: str = Field(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=1, max_length=200)
    faculty_id: str


class LoginRequest(ApiModel):
    email: str
    password: str


class User(ApiModel):
    """Authenticated user as seen by routes and managers."""

    id: str
    email: str
    name: str
    role: Role
    faculty_id: Optional[str] = None
    status: UserStatus = "active"


class UserInfo(User):
    faculty_name: Optional[str] = None
    last_login: Optional[datetime] = None
    total_logins: int = 0
    browser: Optional[str] = None


class LoginResponse(ApiModel):
    user: User
    token: str


class RegisterResponse(ApiModel):
    user: UserInfo
    message: str = "User registered successfully"


class ActiveUser(ApiModel):
    id: str
    email: str
    name: str
    faculty_id: Optional[str] = None
    total_logins: int


class BrowserUsage(ApiModel):
    browser: Optional[str] = None
    count: int
