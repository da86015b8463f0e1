"""Contribution, asset and comment database models."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from utils.formatters import utcnow
from .base import Base, new_id


class ContributionModel(Base):
    __tablename__ = "contributions"

    id = Column(String, primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    student_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    academic_year_id = Column(
        String, ForeignKey("academic_years.id"), index=True, nullable=False
    )
    # Copied from the student when the contribution is created
    faculty_id = Column(String, ForeignKey("faculties.id"), index=True, nullable=False)
    submission_date = Column(DateTime, nullable=False)
    last_updated = Column(DateTime, default=utcnow)
    status = Column(String, nullable=False, default="pending")
    view_count = Column(Integer, nullable=False, default=0)
    feedback_given = Column(Boolean, nullable=False, default=False)
    # Ordering column for cursor pagination
    created_at = Column(DateTime, index=True, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    student = relationship("UserModel", foreign_keys=[student_id])
    faculty = relationship("FacultyModel")
    academic_year = relationship("AcademicYearModel")
    assets = relationship(
        "ContributionAssetModel",
        back_populates="contribution",
        cascade="all, delete-orphan",
        order_by="ContributionAssetModel.created_at",
    )
    comments = relationship(
        "CommentModel",
        back_populates="contribution",
        cascade="all, delete-orphan",
        order_by="CommentModel.created_at",
    )


class ContributionAssetModel(Base):
    __tablename__ = "contribution_assets"

    id = Column(String, primary_key=True, default=new_id)
    contribution_id = Column(
        String, ForeignKey("contributions.id"), index=True, nullable=False
    )
    type = Column(String, nullable=False)  # 'article' or 'image'
    file_path = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    contribution = relationship("ContributionModel", back_populates="assets")


class CommentModel(Base):
    __tablename__ = "comments"

    id = Column(String, primary_key=True, default=new_id)
    contribution_id = Column(
        String, ForeignKey("contributions.id"), index=True, nullable=False
    )
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    contribution = relationship("ContributionModel", back_populates="comments")
    author = relationship("UserModel")
