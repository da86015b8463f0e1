"""User management utilities.

This module provides user management functionality including registration,
password hashing, authentication with login tracking, user listings and the
admin operations on user accounts.
"""

import logging
from typing import List, Optional

import bcrypt
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from core.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from models.academic import FacultyModel
from models.user import LoginAuditLogModel, UserModel
from schemas.user import ActiveUser, BrowserUsage, User, UserInfo
from utils.converters import model_to_user, model_to_user_info
from utils.formatters import utcnow

logger = logging.getLogger(__name__)

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS = 12

# Checked in order: Opera and Brave user agents also contain "Chrome"
_BROWSER_MARKERS = (
    ("opera", ("opr/", "opera")),
    ("brave", ("brave",)),
    ("firefox", ("firefox", "fxios")),
    ("chrome", ("chrome", "crios", "chromium")),
    ("safari", ("safari",)),
)


def detect_browser(user_agent: Optional[str]) -> str:
    """Map a User-Agent header to one of the tracked browser tags."""
    ua = (user_agent or "").lower()
    for tag, markers in _BROWSER_MARKERS:
        if any(marker in ua for marker in markers):
            return tag
    return "other"


class UserManager:
    """Manages user persistence and authentication using SQLAlchemy."""

    def __init__(self, db: Session, bcrypt_rounds: int = BCRYPT_ROUNDS):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
            bcrypt_rounds: Cost factor for new password hashes.
        """
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        # bcrypt only looks at the first 72 bytes
        password_bytes = password.encode("utf-8")[:72]
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(password_bytes, salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to verify.
            hashed_password: Bcrypt hash string to verify against.

        Returns:
            True if password matches, False otherwise.
        """
        try:
            return bcrypt.checkpw(
                plain_password.encode("utf-8")[:72], hashed_password.encode("utf-8")
            )
        except ValueError as e:
            logger.error("Password verification error: %s", e)
            return False

    def _get_model(self, user_id: str) -> UserModel:
        model = (
            self.db.query(UserModel)
            .options(joinedload(UserModel.faculty))
            .filter(UserModel.id == user_id)
            .first()
        )
        if not model:
            raise NotFoundError("User not found")
        return model

    def _require_faculty(self, faculty_id: Optional[str]) -> None:
        if faculty_id is None:
            return
        exists = self.db.query(FacultyModel.id).filter(FacultyModel.id == faculty_id).first()
        if not exists:
            raise ValidationError("Faculty does not exist")

    def create_user(
        self,
        email: str,
        password: str,
        name: str,
        role: str = "guest",
        faculty_id: Optional[str] = None,
    ) -> UserInfo:
        """Create a new user.

        Args:
            email: Login email, unique.
            password: Plain text password.
            name: Display name.
            role: User role; self-registration always uses 'guest'.
            faculty_id: Optional faculty reference.

        Returns:
            Created user.

        Raises:
            ValidationError: If the email is taken or the faculty does not exist.
        """
        email = email.strip().lower()
        existing = self.db.query(UserModel).filter(UserModel.email == email).first()
        if existing:
            raise ValidationError("Email already registered")
        self._require_faculty(faculty_id)

        model = UserModel(
            email=email,
            password_hash=self.hash_password(password),
            name=name,
            role=role,
            faculty_id=faculty_id,
        )
        # The unique constraint still catches two concurrent registrations
        try:
            self.db.add(model)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ValidationError("Email already registered") from e

        logger.info("Created user: %s (role=%s)", email, role)
        return model_to_user_info(self._get_model(model.id))

    def register(self, email: str, password: str, name: str, faculty_id: str) -> UserInfo:
        """Self-registration; new accounts are guests of the chosen faculty."""
        if faculty_id is None:
            raise ValidationError("Faculty not found")
        return self.create_user(email, password, name, role="guest", faculty_id=faculty_id)

    def authenticate(
        self, email: str, password: str, user_agent: Optional[str] = None
    ) -> User:
        """Check credentials and record the login.

        Updates the last login time, the login counter and the browser tag,
        and appends a login audit entry.

        Raises:
            UnauthorizedError: On unknown email, wrong password or inactive account.
        """
        model = (
            self.db.query(UserModel)
            .filter(UserModel.email == email.strip().lower())
            .first()
        )
        if model is None or not self.verify_password(password, model.password_hash):
            raise UnauthorizedError("Invalid email or password")
        if model.status != "active":
            raise UnauthorizedError("Account is inactive")

        now = utcnow()
        model.last_login = now
        model.total_logins = (model.total_logins or 0) + 1
        model.browser = detect_browser(user_agent)
        self.db.add(LoginAuditLogModel(user_id=model.id, login_time=now))
        self.db.commit()
        logger.info("User logged in: %s", model.email)
        return model_to_user(model)

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by ID, or None if it does not exist."""
        model = self.db.query(UserModel).filter(UserModel.id == user_id).first()
        if model:
            return model_to_user(model)
        return None

    def get_user_info(self, user_id: str, caller: User) -> UserInfo:
        """Read a user profile; callers see themselves, admins see anyone.

        Raises:
            ForbiddenError: If the caller may not view this user.
            NotFoundError: If the user does not exist.
        """
        if caller.id != user_id and caller.role != "admin":
            raise ForbiddenError("Unauthorized to view user")
        return model_to_user_info(self._get_model(user_id))

    def list_users(self) -> List[UserInfo]:
        models = (
            self.db.query(UserModel)
            .options(joinedload(UserModel.faculty))
            .order_by(UserModel.created_at.desc())
            .all()
        )
        return [model_to_user_info(m) for m in models]

    def list_users_by_faculty(self, faculty_id: str, role: str) -> List[UserInfo]:
        models = (
            self.db.query(UserModel)
            .options(joinedload(UserModel.faculty))
            .filter(UserModel.faculty_id == faculty_id, UserModel.role == role)
            .order_by(UserModel.name)
            .all()
        )
        return [model_to_user_info(m) for m in models]

    def most_active_users(self, limit: int = 10) -> List[ActiveUser]:
        models = (
            self.db.query(UserModel)
            .order_by(UserModel.total_logins.desc())
            .limit(limit)
            .all()
        )
        return [ActiveUser.model_validate(m) for m in models]

    def browser_usage(self) -> List[BrowserUsage]:
        rows = (
            self.db.query(UserModel.browser, func.count(UserModel.id))
            .group_by(UserModel.browser)
            .all()
        )
        return [BrowserUsage(browser=browser, count=count) for browser, count in rows]

    # --- Admin operations ---

    def update_user(
        self,
        user_id: str,
        role: str,
        faculty_id: Optional[str],
        status: str,
        password: Optional[str] = None,
    ) -> UserInfo:
        model = self._get_admin_target(user_id)
        self._require_faculty(faculty_id)
        model.role = role
        model.faculty_id = faculty_id
        model.status = status
        if password:
            model.password_hash = self.hash_password(password)
        self.db.commit()
        logger.info("Updated user %s (role=%s, status=%s)", user_id, role, status)
        return model_to_user_info(self._get_model(user_id))

    def reset_password(self, user_id: str, new_password: str) -> None:
        model = self._get_admin_target(user_id)
        model.password_hash = self.hash_password(new_password)
        self.db.commit()
        logger.info("Reset password for user %s", user_id)

    def change_role(self, user_id: str, role: str) -> None:
        model = self._get_admin_target(user_id)
        model.role = role
        self.db.commit()

    def change_faculty(self, user_id: str, faculty_id: str) -> None:
        model = self._get_admin_target(user_id)
        self._require_faculty(faculty_id)
        model.faculty_id = faculty_id
        self.db.commit()

    def change_status(self, user_id: str, status: str) -> None:
        model = self._get_admin_target(user_id)
        model.status = status
        self.db.commit()
        logger.info("Changed status of user %s to %s", user_id, status)

    def _get_admin_target(self, user_id: str) -> UserModel:
        model = self.db.query(UserModel).filter(UserModel.id == user_id).first()
        if not model:
            raise ValidationError("Invalid user id")
        return model
