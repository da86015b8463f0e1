"""User database models.

This module defines the User and login audit models using SQLAlchemy.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from utils.formatters import utcnow
from .base import Base, new_id


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="guest")
    faculty_id = Column(String, ForeignKey("faculties.id"), index=True, nullable=True)
    last_login = Column(DateTime, nullable=True)
    total_logins = Column(Integer, nullable=False, default=0)
    browser = Column(String, nullable=True)
    status = Column(String, nullable=False, default="active")
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    faculty = relationship("FacultyModel", back_populates="users")


class LoginAuditLogModel(Base):
    __tablename__ = "login_audit_logs"

    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    login_time = Column(DateTime, nullable=False, default=utcnow)
