"""Faculty, academic year and term read routes."""

from datetime import date
from typing import List

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_user
from core.dependencies import AcademicManagerDep
from schemas.academic import AcademicYearInfo, FacultyInfo, TermInfo
from schemas.user import User

router = APIRouter(prefix="/api", tags=["Academic"])


@router.get("/faculties", response_model=List[FacultyInfo], summary="List faculties")
def list_faculties(academic_manager: AcademicManagerDep) -> List[FacultyInfo]:
    # Public: the registration form needs the faculty list
    return academic_manager.list_faculties()


@router.get(
    "/academic-years", response_model=List[AcademicYearInfo], summary="List academic years"
)
def list_academic_years(
    academic_manager: AcademicManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[AcademicYearInfo]:
    return academic_manager.list_academic_years()


@router.get(
    "/academic-years/by-date/{day}",
    response_model=List[AcademicYearInfo],
    summary="Academic years containing a date",
)
def academic_years_by_date(
    day: date,
    academic_manager: AcademicManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[AcademicYearInfo]:
    return academic_manager.find_years_containing(day)


@router.get(
    "/academic-years/{year_id}", response_model=AcademicYearInfo, summary="Get academic year"
)
def get_academic_year(
    year_id: str,
    academic_manager: AcademicManagerDep,
    current_user: User = Depends(get_current_user),
) -> AcademicYearInfo:
    return academic_manager.get_academic_year(year_id)


@router.get("/terms", response_model=List[TermInfo], summary="List terms")
def list_terms(academic_manager: AcademicManagerDep) -> List[TermInfo]:
    return academic_manager.list_terms()


@router.get("/terms/{term_id}", response_model=TermInfo, summary="Get term")
def get_term(term_id: str, academic_manager: AcademicManagerDep) -> TermInfo:
    return academic_manager.get_term(term_id)
