"""Conversion helpers between ORM models and API schemas."""

from typing import Iterable, List, Optional

from models.academic import AcademicYearModel
from models.contribution import CommentModel, ContributionAssetModel, ContributionModel
from models.user import UserModel
from schemas.academic import AcademicYearInfo
from schemas.contribution import AssetInfo, CommentInfo, ContributionInfo
from schemas.user import User, UserInfo
from utils.formatters import format_academic_year
from utils.storage import ObjectStorage


def model_to_user(model: UserModel) -> User:
    return User.model_validate(model)


def model_to_user_info(model: UserModel) -> UserInfo:
    info = UserInfo.model_validate(model)
    if model.faculty is not None:
        info.faculty_name = model.faculty.name
    return info


def academic_year_to_info(model: AcademicYearModel) -> AcademicYearInfo:
    return AcademicYearInfo(
        id=model.id,
        start_date=model.start_date,
        end_date=model.end_date,
        new_closure_date=model.new_closure_date,
        final_closure_date=model.final_closure_date,
        status=model.status,
        year=format_academic_year(model.start_date, model.end_date),
    )


def assets_to_info(
    assets: Iterable[ContributionAssetModel], storage: Optional[ObjectStorage]
) -> List[AssetInfo]:
    """Convert assets, resolving each storage key to a presigned download URL."""
    return [
        AssetInfo(
            id=asset.id,
            contribution_id=asset.contribution_id,
            type=asset.type,
            file_path=asset.file_path,
            url=storage.generate_download_url(asset.file_path) if storage else None,
        )
        for asset in assets
    ]


def comments_to_info(comments: Iterable[CommentModel]) -> List[CommentInfo]:
    return [
        CommentInfo(
            by=comment.author.name if comment.author else "Unknown",
            role=comment.author.role if comment.author else None,
            content=comment.content,
            created_at=comment.created_at,
        )
        for comment in comments
    ]


def contribution_to_info(
    model: ContributionModel,
    storage: Optional[ObjectStorage] = None,
    include_comments: bool = False,
    include_email: bool = False,
) -> ContributionInfo:
    """Build the API view of a contribution with its related display fields.

    Args:
        model: Contribution with student, faculty and academic year loadable.
        storage: Used to attach download URLs to assets; skipped when None.
        include_comments: Attach the comment thread.
        include_email: Attach the student's email address.
    """
    info = ContributionInfo(
        id=model.id,
        title=model.title,
        description=model.description,
        student_id=model.student_id,
        faculty_id=model.faculty_id,
        academic_year_id=model.academic_year_id,
        submission_date=model.submission_date,
        last_updated=model.last_updated,
        status=model.status,
        view_count=model.view_count or 0,
        feedback_given=bool(model.feedback_given),
        created_at=model.created_at,
        updated_at=model.updated_at,
        assets=assets_to_info(model.assets, storage),
    )
    if model.student is not None:
        info.student_name = model.student.name
        if include_email:
            info.email = model.student.email
    if model.faculty is not None:
        info.faculty_name = model.faculty.name
    if model.academic_year is not None:
        info.academic_year = format_academic_year(
            model.academic_year.start_date, model.academic_year.end_date
        )
    if include_comments:
        info.comments = comments_to_info(model.comments)
    return info
