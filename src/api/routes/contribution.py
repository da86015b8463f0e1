"""Contribution routes.

This module handles HTTP endpoints for submitting, reading, reviewing and
exporting contributions.
"""

import logging
import shutil
import tempfile
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from api.routes.auth import require_roles
from core.dependencies import ContributionManagerDep, ExportManagerDep
from schemas.contribution import (
    CommentRequest,
    CommentResponse,
    ContributionInfo,
    ContributionPage,
    ContributionRequest,
    StatusUpdateRequest,
)
from schemas.common import MessageResponse
from schemas.user import User
from utils.pagination import Page, PaginationParams

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contributions", tags=["Contributions"])

READ_ROLES = ("student", "guest", "marketing_manager", "marketing_coordinator")


def pagination_params(
    cursor: Optional[str] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    order: str = Query(default="desc"),
) -> PaginationParams:
    return PaginationParams(cursor=cursor, limit=limit, order=order)


def _to_page(page: Page) -> ContributionPage:
    return ContributionPage(items=page.items, next_cursor=page.next_cursor)


@router.post("/", response_model=ContributionInfo, summary="Submit contribution")
def create_contribution(
    req: ContributionRequest,
    contribution_manager: ContributionManagerDep,
    current_user: User = Depends(require_roles("student")),
) -> ContributionInfo:
    return contribution_manager.create(
        current_user,
        req.title,
        req.description,
        req.article.path,
        [image.path for image in req.images],
    )


@router.get("/my", response_model=ContributionPage, summary="My contributions")
def list_my_contributions(
    contribution_manager: ContributionManagerDep,
    params: PaginationParams = Depends(pagination_params),
    academic_year_id: Optional[str] = Query(default=None, alias="academicYearId"),
    current_user: User = Depends(require_roles("student")),
) -> ContributionPage:
    return _to_page(contribution_manager.list_mine(current_user, params, academic_year_id))


@router.get(
    "/faculty/selected",
    response_model=ContributionPage,
    summary="Selected contributions of my faculty",
)
def list_faculty_selected(
    contribution_manager: ContributionManagerDep,
    params: PaginationParams = Depends(pagination_params),
    academic_year_id: Optional[str] = Query(default=None, alias="academicYearId"),
    current_user: User = Depends(
        require_roles("student", "guest", "marketing_coordinator")
    ),
) -> ContributionPage:
    return _to_page(
        contribution_manager.list_faculty_selected(current_user, params, academic_year_id)
    )


@router.get(
    "/faculty/all", response_model=ContributionPage, summary="All contributions of my faculty"
)
def list_faculty_all(
    contribution_manager: ContributionManagerDep,
    params: PaginationParams = Depends(pagination_params),
    academic_year_id: Optional[str] = Query(default=None, alias="academicYearId"),
    current_user: User = Depends(require_roles("marketing_coordinator")),
) -> ContributionPage:
    return _to_page(
        contribution_manager.list_faculty_all(current_user, params, academic_year_id)
    )


@router.get("/all", response_model=ContributionPage, summary="All selected contributions")
def list_all_selected(
    contribution_manager: ContributionManagerDep,
    params: PaginationParams = Depends(pagination_params),
    academic_year_id: Optional[str] = Query(default=None, alias="academicYearId"),
    current_user: User = Depends(require_roles("marketing_manager")),
) -> ContributionPage:
    return _to_page(contribution_manager.list_all_selected(params, academic_year_id))


@router.get("/download-selected", summary="Download selected contributions as zip")
def download_selected(
    export_manager: ExportManagerDep,
    academic_year_id: Optional[str] = Query(default=None, alias="academicYearId"),
    current_user: User = Depends(require_roles("marketing_manager")),
) -> FileResponse:
    """Stream a zip of the year's selected contributions.

    The temporary directory is removed after the response has been sent, or
    immediately if the export fails.
    """
    work_dir = tempfile.mkdtemp(prefix="contribution-downloads-")
    try:
        result = export_manager.export_selected(work_dir, academic_year_id)
    except Exception:
        shutil.rmtree(work_dir, ignore_errors=True)
        raise
    logger.info("User %s exported %s", current_user.id, result.filename)
    return FileResponse(
        result.zip_path,
        media_type="application/zip",
        filename=result.filename,
        background=BackgroundTask(shutil.rmtree, work_dir, ignore_errors=True),
    )


@router.get("/{contribution_id}", summary="Get contribution")
def get_contribution(
    contribution_id: str,
    contribution_manager: ContributionManagerDep,
    current_user: User = Depends(require_roles(*READ_ROLES)),
) -> dict:
    info = contribution_manager.get(contribution_id, current_user)
    if info is None:
        return {"success": True, "data": []}
    return {"success": True, "data": info.model_dump(mode="json", by_alias=True)}


@router.put("/{contribution_id}", response_model=ContributionInfo, summary="Edit contribution")
def update_contribution(
    contribution_id: str,
    req: ContributionRequest,
    contribution_manager: ContributionManagerDep,
    current_user: User = Depends(require_roles("student")),
) -> ContributionInfo:
    return contribution_manager.update(
        contribution_id,
        current_user,
        req.title,
        req.description,
        req.article.path,
        [image.path for image in req.images],
    )


@router.post(
    "/{contribution_id}/comment", response_model=CommentResponse, summary="Add comment"
)
def add_comment(
    contribution_id: str,
    req: CommentRequest,
    contribution_manager: ContributionManagerDep,
    current_user: User = Depends(require_roles("marketing_coordinator", "student")),
) -> CommentResponse:
    content = contribution_manager.add_comment(contribution_id, current_user, req.comment)
    return CommentResponse(comment=content)


@router.post("/{contribution_id}/view", response_model=MessageResponse, summary="Count a view")
def record_view(
    contribution_id: str,
    contribution_manager: ContributionManagerDep,
    current_user: User = Depends(require_roles(*READ_ROLES)),
) -> MessageResponse:
    contribution_manager.increment_view_count(contribution_id)
    return MessageResponse(message="View recorded")


@router.put(
    "/{contribution_id}/status", response_model=ContributionInfo, summary="Select or reject"
)
def update_status(
    contribution_id: str,
    req: StatusUpdateRequest,
    contribution_manager: ContributionManagerDep,
    current_user: User = Depends(require_roles("marketing_coordinator")),
) -> ContributionInfo:
    return contribution_manager.update_status(contribution_id, current_user, req.status)
