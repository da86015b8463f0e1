"""Contribution schema definitions."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from schemas.common import ApiModel

ContributionStatus = Literal["pending", "selected", "rejected"]


class AssetPath(ApiModel):
    path: str = Field(min_length=1, description="Object storage key of the uploaded file.")


class ContributionRequest(ApiModel):
    """Body for creating or updating a contribution."""

    title: str = Field(min_length=1, max_length=300)
    description: str = Field(min_length=1)
    article: AssetPath
    images: List[AssetPath] = Field(default_factory=list)


class StatusUpdateRequest(ApiModel):
    status: Literal["selected", "rejected"]


class CommentRequest(ApiModel):
    comment: str = Field(min_length=1)


class AssetInfo(ApiModel):
    id: str
    contribution_id: str
    type: Literal["article", "image"]
    file_path: str
    url: Optional[str] = None


class CommentInfo(ApiModel):
    by: str
    role: Optional[str] = None
    content: str
    created_at: Optional[datetime] = None


class ContributionInfo(ApiModel):
    id: str
    title: str
    description: str
    student_id: str
    faculty_id: str
    academic_year_id: str
    submission_date: datetime
    last_updated: Optional[datetime] = None
    status: ContributionStatus
    view_count: int = 0
    feedback_given: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    assets: List[AssetInfo] = Field(default_factory=list)
    student_name: Optional[str] = None
    email: Optional[str] = None
    faculty_name: Optional[str] = None
    academic_year: Optional[str] = None
    comments: Optional[List[CommentInfo]] = None


class ContributionPage(ApiModel):
    items: List[ContributionInfo]
    next_cursor: Optional[str] = None


class CommentResponse(ApiModel):
    success: bool = True
    comment: str


class UploadUrlRequest(ApiModel):
    filename: str = Field(min_length=1, max_length=255)


class UploadUrlResponse(ApiModel):
    url: str
    key: str
