"""Faculty, academic year and term schemas, including admin requests."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import Field, model_validator

from schemas.common import ApiModel
from schemas.user import Role, UserStatus
from utils.formatters import to_naive_utc

ActiveStatus = Literal["active", "inactive"]


class FacultyInfo(ApiModel):
    id: str
    name: str
    status: ActiveStatus


class AcademicYearInfo(ApiModel):
    id: str
    start_date: date
    end_date: date
    new_closure_date: datetime
    final_closure_date: datetime
    status: ActiveStatus
    year: str = Field(description="Display label, e.g. '2025-2026'.")


class TermInfo(ApiModel):
    id: str
    name: str
    content: str


# --- Admin requests ---


class CreateUserRequest(ApiModel):
    email: str = Field(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=1, max_length=200)
    role: Role
    faculty_id: Optional[str] = None


class UpdateUserRequest(ApiModel):
    password: Optional[str] = Field(default=None, min_length=8, max_length=128)
    role: Role
    faculty_id: Optional[str] = None
    status: UserStatus


class ResetPasswordRequest(ApiModel):
    password: str = Field(min_length=8, max_length=128)


class ChangeRoleRequest(ApiModel):
    role: Role


class ChangeFacultyRequest(ApiModel):
    faculty_id: str


class ChangeStatusRequest(ApiModel):
    status: UserStatus


class FacultyRequest(ApiModel):
    name: str = Field(min_length=1, max_length=200)


class UpdateFacultyRequest(FacultyRequest):
    status: ActiveStatus


class AcademicYearRequest(ApiModel):
    start_date: date
    end_date: date
    new_closure_date: datetime
    final_closure_date: datetime

    @model_validator(mode="after")
    def check_dates(self) -> "AcademicYearRequest":
        if self.start_date > self.end_date:
            raise ValueError("startDate must not be after endDate")
        if to_naive_utc(self.new_closure_date) > to_naive_utc(self.final_closure_date):
            raise ValueError("newClosureDate must not be after finalClosureDate")
        return self


class UpdateAcademicYearRequest(AcademicYearRequest):
    status: ActiveStatus


class TermRequest(ApiModel):
    name: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
