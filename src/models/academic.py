"""Faculty, academic year and term database models."""

from sqlalchemy import Column, Date, DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from utils.formatters import utcnow
from .base import Base, new_id


class FacultyModel(Base):
    __tablename__ = "faculties"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, unique=True, index=True, nullable=False)
    status = Column(String, nullable=False, default="active")
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    users = relationship("UserModel", back_populates="faculty")


class AcademicYearModel(Base):
    __tablename__ = "academic_years"
    __table_args__ = (
        UniqueConstraint(
            "start_date", "end_date", name="uq_academic_years_start_end"
        ),
    )

    id = Column(String, primary_key=True, default=new_id)
    start_date = Column(Date, index=True, nullable=False)
    end_date = Column(Date, index=True, nullable=False)
    # No new contributions after this instant
    new_closure_date = Column(DateTime, nullable=False)
    # No edits to existing contributions after this instant
    final_closure_date = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default="active")
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class TermModel(Base):
    __tablename__ = "terms"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
