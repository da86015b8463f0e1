"""Report routes for marketing managers (``/mm``) and coordinators (``/mc``)."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from api.routes.auth import require_roles
from core.dependencies import ReportManagerDep
from schemas.report import (
    ContributionsReport,
    ContributorsAndContributions,
    ContributorsReport,
    GuestInfo,
    UncommentedReport,
    YearlyStats,
)
from schemas.user import User

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get("/mm/contributions", response_model=ContributionsReport)
def contributions_report(
    report_manager: ReportManagerDep,
    current_user: User = Depends(require_roles("marketing_manager")),
) -> ContributionsReport:
    return report_manager.contributions_by_faculty()


@router.get("/mm/contributors", response_model=ContributorsReport)
def contributors_report(
    report_manager: ReportManagerDep,
    current_user: User = Depends(require_roles("marketing_manager")),
) -> ContributorsReport:
    return report_manager.unique_contributors_by_faculty()


@router.get("/mc/guests", response_model=List[GuestInfo])
def guest_list(
    report_manager: ReportManagerDep,
    current_user: User = Depends(require_roles("marketing_coordinator")),
) -> List[GuestInfo]:
    return report_manager.guests(current_user)


@router.get("/mc/contributors-and-contributions", response_model=ContributorsAndContributions)
def contributors_and_contributions(
    report_manager: ReportManagerDep,
    academic_year_id: Optional[str] = Query(default=None, alias="academicYearId"),
    current_user: User = Depends(require_roles("marketing_coordinator")),
) -> ContributorsAndContributions:
    return report_manager.contributors_and_contributions(current_user, academic_year_id)


@router.get("/mc/yearly-stats", response_model=YearlyStats)
def yearly_stats(
    report_manager: ReportManagerDep,
    current_user: User = Depends(require_roles("marketing_coordinator")),
) -> YearlyStats:
    return report_manager.yearly_stats(current_user)


@router.get("/mc/uncommented", response_model=UncommentedReport)
def uncommented_contributions(
    report_manager: ReportManagerDep,
    academic_year_id: Optional[str] = Query(default=None, alias="academicYearId"),
    current_user: User = Depends(require_roles("marketing_coordinator")),
) -> UncommentedReport:
    return report_manager.uncommented_contributions(current_user, academic_year_id)
