"""Read-only reports over contributions.

Marketing managers get cross-faculty rollups of selected contributions;
marketing coordinators get statistics for their own faculty.
"""

import logging
from collections import OrderedDict
from datetime import timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from core.exceptions import ValidationError
from models.academic import AcademicYearModel, FacultyModel
from models.contribution import CommentModel, ContributionModel
from models.user import UserModel
from schemas.report import (
    ContributionsReport,
    ContributorsAndContributions,
    ContributorsReport,
    FacultyContributionCount,
    FacultyContributorCount,
    GuestInfo,
    UncommentedContribution,
    UncommentedReport,
    YearContributionReport,
    YearContributorReport,
    YearlyStat,
    YearlyStats,
)
from schemas.user import User
from utils.converters import contribution_to_info
from utils.formatters import format_academic_year, utcnow

logger = logging.getLogger(__name__)

# Pending contributions without feedback are due this long after submission
COMMENT_DUE_DAYS = 14
YEARLY_STATS_YEARS = 6


class ReportManager:
    """Aggregates contribution counts by academic year and faculty."""

    def __init__(self, db: Session):
        self.db = db

    def _selected_grouped(self, count_column):
        return (
            self.db.query(
                AcademicYearModel.id,
                AcademicYearModel.start_date,
                AcademicYearModel.end_date,
                FacultyModel.id,
                FacultyModel.name,
                count_column,
            )
            .select_from(AcademicYearModel)
            .join(ContributionModel, ContributionModel.academic_year_id == AcademicYearModel.id)
            .join(FacultyModel, ContributionModel.faculty_id == FacultyModel.id)
            .filter(ContributionModel.status == "selected")
            .group_by(
                AcademicYearModel.id,
                AcademicYearModel.start_date,
                AcademicYearModel.end_date,
                FacultyModel.id,
                FacultyModel.name,
            )
            .order_by(AcademicYearModel.start_date.desc(), FacultyModel.name.asc())
            .all()
        )

    def contributions_by_faculty(self) -> ContributionsReport:
        """Count selected contributions per academic year and faculty.

        Years are ordered newest first, faculties alphabetically within a year.
        """
        rows = self._selected_grouped(func.count(ContributionModel.id))
        years = OrderedDict()
        total = 0
        for year_id, start, end, faculty_id, faculty_name, count in rows:
            year = years.get(year_id)
            if year is None:
                year = YearContributionReport(
                    id=year_id,
                    year=format_academic_year(start, end),
                    faculties=[],
                    total_contributions=0,
                )
                years[year_id] = year
            year.faculties.append(
                FacultyContributionCount(id=faculty_id, name=faculty_name, contribution_count=count)
            )
            year.total_contributions += count
            total += count
        return ContributionsReport(academic_years=list(years.values()), total_contributions=total)

    def unique_contributors_by_faculty(self) -> ContributorsReport:
        """Count distinct contributing students per academic year and faculty.

        A student may have selected work in more than one faculty, so the
        per-year and overall totals come from their own distinct counts
        instead of summing the faculty rows.
        """
        rows = self._selected_grouped(func.count(func.distinct(ContributionModel.student_id)))

        per_year = dict(
            self.db.query(
                ContributionModel.academic_year_id,
                func.count(func.distinct(ContributionModel.student_id)),
            )
            .filter(ContributionModel.status == "selected")
            .group_by(ContributionModel.academic_year_id)
            .all()
        )
        overall = (
            self.db.query(func.count(func.distinct(ContributionModel.student_id)))
            .filter(ContributionModel.status == "selected")
            .scalar()
        ) or 0

        years = OrderedDict()
        for year_id, start, end, faculty_id, faculty_name, count in rows:
            year = years.get(year_id)
            if year is None:
                year = YearContributorReport(
                    id=year_id,
                    year=format_academic_year(start, end),
                    faculties=[],
                    total_unique_contributors=per_year.get(year_id, 0),
                )
                years[year_id] = year
            year.faculties.append(
                FacultyContributorCount(
                    id=faculty_id, name=faculty_name, unique_contributors_count=count
                )
            )
        return ContributorsReport(
            academic_years=list(years.values()), total_unique_contributors=overall
        )

    # --- Faculty reports for marketing coordinators ---

    @staticmethod
    def _faculty_of(user: User) -> str:
        if not user.faculty_id:
            raise ValidationError("User is not assigned to a faculty")
        return user.faculty_id

    def guests(self, user: User):
        """Active guests of the coordinator's faculty, most recent login first."""
        faculty_id = self._faculty_of(user)
        models = (
            self.db.query(UserModel)
            .options(joinedload(UserModel.faculty))
            .filter(
                UserModel.role == "guest",
                UserModel.status == "active",
                UserModel.faculty_id == faculty_id,
            )
            .order_by(UserModel.last_login.is_(None), UserModel.last_login.desc())
            .all()
        )
        return [
            GuestInfo(
                id=m.id,
                name=m.name,
                email=m.email,
                last_login=m.last_login,
                browser=m.browser,
                total_logins=m.total_logins or 0,
                faculty_name=m.faculty.name if m.faculty else None,
            )
            for m in models
        ]

    def contributors_and_contributions(
        self, user: User, academic_year_id: Optional[str] = None
    ) -> ContributorsAndContributions:
        faculty_id = self._faculty_of(user)
        query = self.db.query(
            func.count(ContributionModel.id),
            func.count(func.distinct(ContributionModel.student_id)),
        ).filter(ContributionModel.faculty_id == faculty_id)
        if academic_year_id:
            query = query.filter(ContributionModel.academic_year_id == academic_year_id)
        total, contributors = query.one()
        faculty = self.db.query(FacultyModel).filter(FacultyModel.id == faculty_id).first()
        return ContributorsAndContributions(
            faculty_name=faculty.name if faculty else None,
            total_contributions=total or 0,
            unique_contributors=contributors or 0,
        )

    def yearly_stats(self, user: User) -> YearlyStats:
        """Contribution and contributor counts for the most recent academic years."""
        faculty_id = self._faculty_of(user)
        years = (
            self.db.query(AcademicYearModel)
            .order_by(AcademicYearModel.start_date.desc())
            .limit(YEARLY_STATS_YEARS)
            .all()
        )
        counts = {
            year_id: (total, contributors)
            for year_id, total, contributors in self.db.query(
                ContributionModel.academic_year_id,
                func.count(ContributionModel.id),
                func.count(func.distinct(ContributionModel.student_id)),
            )
            .filter(
                ContributionModel.faculty_id == faculty_id,
                ContributionModel.academic_year_id.in_([y.id for y in years]),
            )
            .group_by(ContributionModel.academic_year_id)
            .all()
        }
        data = []
        for year in years:
            total, contributors = counts.get(year.id, (0, 0))
            data.append(
                YearlyStat(
                    academic_year=format_academic_year(year.start_date, year.end_date),
                    contributions=total,
                    contributors=contributors,
                )
            )
        return YearlyStats(data=data)

    def uncommented_contributions(
        self, user: User, academic_year_id: Optional[str] = None
    ) -> UncommentedReport:
        """Pending contributions of the faculty that nobody has commented on.

        Args:
            user: Marketing coordinator requesting the report.
            academic_year_id: Year to report on; defaults to the year with the
                latest end date.

        Returns:
            Contributions oldest first, each with its due date and overdue
            flag, plus the item and overdue totals.
        """
        faculty_id = self._faculty_of(user)
        if not academic_year_id:
            latest = (
                self.db.query(AcademicYearModel)
                .order_by(AcademicYearModel.end_date.desc())
                .first()
            )
            if latest is None:
                return UncommentedReport(
                    items=[],
                    total_contributions_without_comment=0,
                    total_contributions_without_comment_for_more_than14_days=0,
                )
            academic_year_id = latest.id

        commented = select(CommentModel.contribution_id)
        models = (
            self.db.query(ContributionModel)
            .options(
                joinedload(ContributionModel.student),
                joinedload(ContributionModel.faculty),
                joinedload(ContributionModel.academic_year),
            )
            .filter(
                ContributionModel.faculty_id == faculty_id,
                ContributionModel.academic_year_id == academic_year_id,
                ContributionModel.status == "pending",
                ~ContributionModel.id.in_(commented),
            )
            .order_by(ContributionModel.submission_date.asc())
            .all()
        )

        now = utcnow()
        items = []
        for model in models:
            due_date = model.created_at + timedelta(days=COMMENT_DUE_DAYS)
            info = contribution_to_info(model, include_email=True)
            items.append(
                UncommentedContribution(
                    **info.model_dump(),
                    due_date=due_date,
                    is_more_than_14_days_overdue=now > due_date,
                )
            )
        overdue = sum(1 for item in items if item.is_more_than_14_days_overdue)
        return UncommentedReport(
            items=items,
            total_contributions_without_comment=len(items),
            total_contributions_without_comment_for_more_than14_days=overdue,
        )
