"""Report schema definitions for marketing managers and coordinators."""

from datetime import datetime
from typing import List, Optional

from schemas.common import ApiModel
from schemas.contribution import ContributionInfo


# --- Marketing manager ---


class FacultyContributionCount(ApiModel):
    id: str
    name: str
    contribution_count: int


class YearContributionReport(ApiModel):
    id: str
    year: str
    faculties: List[FacultyContributionCount]
    total_contributions: int


class ContributionsReport(ApiModel):
    academic_years: List[YearContributionReport]
    total_contributions: int


class FacultyContributorCount(ApiModel):
    id: str
    name: str
    unique_contributors_count: int


class YearContributorReport(ApiModel):
    id: str
    year: str
    faculties: List[FacultyContributorCount]
    total_unique_contributors: int


class ContributorsReport(ApiModel):
    academic_years: List[YearContributorReport]
    total_unique_contributors: int


# --- Marketing coordinator ---


class GuestInfo(ApiModel):
    id: str
    name: str
    email: str
    last_login: Optional[datetime] = None
    browser: Optional[str] = None
    total_logins: int = 0
    faculty_name: Optional[str] = None


class ContributorsAndContributions(ApiModel):
    faculty_name: Optional[str] = None
    total_contributions: int
    unique_contributors: int


class YearlyStat(ApiModel):
    academic_year: str
    contributions: int
    contributors: int


class YearlyStats(ApiModel):
    data: List[YearlyStat]


class UncommentedContribution(ContributionInfo):
    due_date: datetime
    is_more_than_14_days_overdue: bool


class UncommentedReport(ApiModel):
    items: List[UncommentedContribution]
    total_contributions_without_comment: int
    total_contributions_without_comment_for_more_than14_days: int
