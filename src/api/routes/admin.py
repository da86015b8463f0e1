"""Administration routes.

Every endpoint here requires the ``admin`` role; the router-level dependency
enforces it.
"""

from fastapi import APIRouter, Depends

from api.routes.auth import require_roles
from core.dependencies import AcademicManagerDep, UserManagerDep
from schemas.academic import (
    AcademicYearInfo,
    AcademicYearRequest,
    ChangeFacultyRequest,
    ChangeRoleRequest,
    ChangeStatusRequest,
    CreateUserRequest,
    FacultyInfo,
    FacultyRequest,
    ResetPasswordRequest,
    TermInfo,
    TermRequest,
    UpdateAcademicYearRequest,
    UpdateFacultyRequest,
    UpdateUserRequest,
)
from schemas.common import MessageResponse
from schemas.user import UserInfo

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_roles("admin"))],
)


# --- Users ---


@router.post("/users", response_model=UserInfo, summary="Create user")
def create_user(req: CreateUserRequest, user_manager: UserManagerDep) -> UserInfo:
    return user_manager.create_user(
        req.email, req.password, req.name, role=req.role, faculty_id=req.faculty_id
    )


@router.put("/users/{user_id}", response_model=UserInfo, summary="Update user")
def update_user(
    user_id: str, req: UpdateUserRequest, user_manager: UserManagerDep
) -> UserInfo:
    return user_manager.update_user(
        user_id, req.role, req.faculty_id, req.status, password=req.password
    )


@router.put("/users/{user_id}/password", response_model=MessageResponse)
def reset_password(
    user_id: str, req: ResetPasswordRequest, user_manager: UserManagerDep
) -> MessageResponse:
    user_manager.reset_password(user_id, req.password)
    return MessageResponse(message="Password reset successfully")


@router.put("/users/{user_id}/role", response_model=MessageResponse)
def change_role(
    user_id: str, req: ChangeRoleRequest, user_manager: UserManagerDep
) -> MessageResponse:
    user_manager.change_role(user_id, req.role)
    return MessageResponse(message="Role updated successfully")


@router.put("/users/{user_id}/faculty", response_model=MessageResponse)
def change_faculty(
    user_id: str, req: ChangeFacultyRequest, user_manager: UserManagerDep
) -> MessageResponse:
    user_manager.change_faculty(user_id, req.faculty_id)
    return MessageResponse(message="Faculty updated successfully")


@router.put("/users/{user_id}/status", response_model=MessageResponse)
def change_status(
    user_id: str, req: ChangeStatusRequest, user_manager: UserManagerDep
) -> MessageResponse:
    user_manager.change_status(user_id, req.status)
    return MessageResponse(message="Status updated successfully")


# --- Faculties ---


@router.post("/faculties", response_model=FacultyInfo, summary="Create faculty")
def create_faculty(req: FacultyRequest, academic_manager: AcademicManagerDep) -> FacultyInfo:
    return academic_manager.create_faculty(req.name)


@router.put("/faculties/{faculty_id}", response_model=FacultyInfo, summary="Update faculty")
def update_faculty(
    faculty_id: str, req: UpdateFacultyRequest, academic_manager: AcademicManagerDep
) -> FacultyInfo:
    return academic_manager.update_faculty(faculty_id, req.name, req.status)


@router.delete("/faculties/{faculty_id}", response_model=MessageResponse)
def delete_faculty(faculty_id: str, academic_manager: AcademicManagerDep) -> MessageResponse:
    academic_manager.delete_faculty(faculty_id)
    return MessageResponse(message="Faculty deleted successfully")


# --- Academic years ---


@router.post("/academic-years", response_model=AcademicYearInfo, summary="Create academic year")
def create_academic_year(
    req: AcademicYearRequest, academic_manager: AcademicManagerDep
) -> AcademicYearInfo:
    return academic_manager.create_academic_year(
        req.start_date, req.end_date, req.new_closure_date, req.final_closure_date
    )


@router.put("/academic-years/{year_id}", response_model=AcademicYearInfo)
def update_academic_year(
    year_id: str, req: UpdateAcademicYearRequest, academic_manager: AcademicManagerDep
) -> AcademicYearInfo:
    return academic_manager.update_academic_year(
        year_id,
        req.start_date,
        req.end_date,
        req.new_closure_date,
        req.final_closure_date,
        req.status,
    )


@router.delete("/academic-years/{year_id}", response_model=MessageResponse)
def delete_academic_year(year_id: str, academic_manager: AcademicManagerDep) -> MessageResponse:
    academic_manager.delete_academic_year(year_id)
    return MessageResponse(message="Academic year deleted successfully")


# --- Terms ---


@router.post("/terms", response_model=TermInfo, summary="Create term")
def create_term(req: TermRequest, academic_manager: AcademicManagerDep) -> TermInfo:
    return academic_manager.create_term(req.name, req.content)


@router.put("/terms/{term_id}", response_model=TermInfo, summary="Update term")
def update_term(
    term_id: str, req: TermRequest, academic_manager: AcademicManagerDep
) -> TermInfo:
    return academic_manager.update_term(term_id, req.name, req.content)


@router.delete("/terms/{term_id}", response_model=MessageResponse)
def delete_term(term_id: str, academic_manager: AcademicManagerDep) -> MessageResponse:
    academic_manager.delete_term(term_id)
    return MessageResponse(message="Term deleted successfully")
