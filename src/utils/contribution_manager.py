"""Contribution lifecycle management.

This module handles creating and editing contributions, the one-way
pending -> selected/rejected status transition, comment threads, view
counting and the role-scoped listings.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Query, Session, joinedload, selectinload

from config import Settings
from core.exceptions import ForbiddenError, NotificationError, ValidationError
from models.contribution import CommentModel, ContributionAssetModel, ContributionModel
from models.user import UserModel
from schemas.contribution import ContributionInfo
from schemas.user import User
from utils import email_templates
from utils.academic_manager import AcademicManager
from utils.converters import contribution_to_info
from utils.email_sender import EmailSender
from utils.formatters import format_timestamp, utcnow
from utils.pagination import MAX_LIMIT, SCOPED_MAX_LIMIT, Page, PaginationParams, paginate
from utils.storage import ObjectStorage

logger = logging.getLogger(__name__)


class ContributionManager:
    """Manages contributions, their assets and comments."""

    def __init__(
        self,
        db: Session,
        storage: ObjectStorage,
        email_sender: EmailSender,
        settings: Settings,
    ):
        """Initialize ContributionManager.

        Args:
            db: SQLAlchemy Session.
            storage: Object storage used to sign asset download URLs.
            email_sender: Sender for notification emails.
            settings: Application settings (frontend URL, comment policy).
        """
        self.db = db
        self.storage = storage
        self.email_sender = email_sender
        self.settings = settings

    def _query(self) -> Query:
        return self.db.query(ContributionModel).options(
            joinedload(ContributionModel.student),
            joinedload(ContributionModel.faculty),
            joinedload(ContributionModel.academic_year),
            selectinload(ContributionModel.assets),
        )

    def _get_model(self, contribution_id: str) -> Optional[ContributionModel]:
        return self._query().filter(ContributionModel.id == contribution_id).first()

    def _find_coordinator(self, faculty_id: Optional[str]) -> Optional[UserModel]:
        if faculty_id is None:
            return None
        return (
            self.db.query(UserModel)
            .filter(
                UserModel.role == "marketing_coordinator",
                UserModel.faculty_id == faculty_id,
            )
            .order_by(UserModel.created_at)
            .first()
        )

    def create(
        self,
        user: User,
        title: str,
        description: str,
        article_path: str,
        image_paths: Optional[List[str]] = None,
    ) -> ContributionInfo:
        """Submit a new contribution for the current academic year.

        Args:
            user: Submitting student.
            title: Contribution title.
            description: Contribution description.
            article_path: Storage key of the article document.
            image_paths: Storage keys of the images, possibly empty.

        Returns:
            The created contribution with asset download URLs.

        Raises:
            ValidationError: If the faculty has no marketing coordinator, no
                academic year covers today, or submissions are closed.
        """
        coordinator = self._find_coordinator(user.faculty_id)
        if coordinator is None:
            raise ValidationError("No marketing coordinator found for your faculty")

        now = utcnow()
        year = AcademicManager(self.db).find_year_model_containing(now.date())
        if year is None:
            raise ValidationError("No active academic year found")
        if now > year.new_closure_date:
            raise ValidationError("Submissions are closed for the current academic year")

        model = ContributionModel(
            title=title,
            description=description,
            student_id=user.id,
            faculty_id=user.faculty_id,
            academic_year_id=year.id,
            submission_date=now,
            last_updated=now,
            status="pending",
        )
        model.assets.append(ContributionAssetModel(type="article", file_path=article_path))
        for path in image_paths or []:
            model.assets.append(ContributionAssetModel(type="image", file_path=path))
        self.db.add(model)
        self.db.commit()
        logger.info("Contribution %s submitted by %s", model.id, user.id)

        html = email_templates.new_contribution_email(
            self.settings.frontend_url,
            model.id,
            title,
            user.name,
            coordinator.name,
            format_timestamp(now),
        )
        result = self.email_sender.send(coordinator.email, "New Contribution Submitted", html)
        if not result.success:
            logger.warning(
                "Failed to notify coordinator %s about contribution %s: %s",
                coordinator.id,
                model.id,
                result.error,
            )

        return contribution_to_info(self._get_model(model.id), self.storage)

    def get(self, contribution_id: str, user: User) -> Optional[ContributionInfo]:
        """Read a contribution as ``user`` is allowed to see it.

        Returns:
            The contribution, or None if it does not exist.

        Raises:
            ForbiddenError: If the caller may not view it.
        """
        model = self._get_model(contribution_id)
        if model is None:
            return None

        is_author = model.student_id == user.id
        if user.role == "student" and not is_author and model.status != "selected":
            raise ForbiddenError("Unauthorized to view contribution")
        if user.role == "guest" and (
            model.status != "selected" or model.faculty_id != user.faculty_id
        ):
            raise ForbiddenError("Unauthorized to view contribution")

        full_view = is_author or user.role == "marketing_coordinator"
        return contribution_to_info(
            model,
            self.storage,
            include_comments=full_view,
            include_email=full_view,
        )

    def update(
        self,
        contribution_id: str,
        user: User,
        title: str,
        description: str,
        article_path: str,
        image_paths: Optional[List[str]] = None,
    ) -> ContributionInfo:
        """Edit a pending contribution before its year's final closure.

        The article keeps its asset row with the new path; the image set is
        replaced entirely.

        Raises:
            ValidationError: If the contribution is missing, not owned by
                ``user``, no longer pending or past final closure.
        """
        model = self._get_model(contribution_id)
        if model is None or model.student_id != user.id:
            raise ValidationError("Contribution not found")
        if model.status != "pending":
            raise ValidationError("Only pending contributions can be updated")
        now = utcnow()
        if model.academic_year is None or now > model.academic_year.final_closure_date:
            raise ValidationError("The final closure date for this academic year has passed")

        model.title = title
        model.description = description
        model.last_updated = now

        article = next((a for a in model.assets if a.type == "article"), None)
        if article is None:
            model.assets.append(ContributionAssetModel(type="article", file_path=article_path))
        else:
            article.file_path = article_path
        for asset in [a for a in model.assets if a.type == "image"]:
            model.assets.remove(asset)
        for path in image_paths or []:
            model.assets.append(ContributionAssetModel(type="image", file_path=path))

        self.db.commit()
        logger.info("Contribution %s updated by %s", contribution_id, user.id)
        return contribution_to_info(self._get_model(contribution_id), self.storage)

    def update_status(self, contribution_id: str, user: User, status: str) -> ContributionInfo:
        """Move a pending contribution to ``selected`` or ``rejected``.

        The student is emailed about the outcome. If that email cannot be
        sent the change is rolled back.

        Raises:
            ValidationError: If the contribution is missing, the target status
                is invalid or the contribution is no longer pending.
            ForbiddenError: If the coordinator belongs to another faculty.
            NotificationError: If the student could not be notified.
        """
        if status not in ("selected", "rejected"):
            raise ValidationError("Status must be 'selected' or 'rejected'")
        model = self._get_model(contribution_id)
        if model is None:
            raise ValidationError("Contribution not found")
        if model.faculty_id != user.faculty_id:
            raise ForbiddenError("Unauthorized to update this contribution")
        if model.status != "pending":
            raise ValidationError("Contribution status can only be changed while pending")

        model.status = status
        model.last_updated = utcnow()
        self.db.flush()

        student = model.student
        html = email_templates.status_changed_email(
            self.settings.frontend_url, model.id, model.title, student.name, status
        )
        result = self.email_sender.send(student.email, "Contribution Status Updated", html)
        if not result.success:
            self.db.rollback()
            logger.error(
                "Status change of contribution %s aborted, email failed: %s",
                contribution_id,
                result.error,
            )
            raise NotificationError("Failed to send status notification email")

        self.db.commit()
        logger.info("Contribution %s marked %s by %s", contribution_id, status, user.id)
        return contribution_to_info(self._get_model(contribution_id), self.storage)

    def add_comment(self, contribution_id: str, user: User, content: str) -> str:
        """Append a comment and notify the other side of the thread.

        Returns:
            The stored comment text.

        Raises:
            ValidationError: If the contribution is missing, or a student tries
                to open the thread while that is not allowed.
            ForbiddenError: If the caller is not the author or a coordinator
                of the contribution's faculty.
        """
        model = self._get_model(contribution_id)
        if model is None:
            raise ValidationError("Contribution not found")

        if user.role == "student":
            if model.student_id != user.id:
                raise ForbiddenError("Unauthorized to comment on this contribution")
            has_comments = (
                self.db.query(CommentModel.id)
                .filter(CommentModel.contribution_id == contribution_id)
                .first()
            )
            if not has_comments and not self.settings.allow_student_first_comment:
                raise ValidationError("The marketing coordinator must comment first")
        elif user.role == "marketing_coordinator":
            if model.faculty_id != user.faculty_id:
                raise ForbiddenError("Unauthorized to comment on this contribution")
        else:
            raise ForbiddenError("Unauthorized to comment on this contribution")

        self.db.add(
            CommentModel(contribution_id=contribution_id, user_id=user.id, content=content)
        )
        if user.role != "student":
            model.feedback_given = True
        self.db.commit()
        logger.info("Comment added to contribution %s by %s", contribution_id, user.id)

        if user.role == "student":
            recipient = self._find_coordinator(model.faculty_id)
        else:
            recipient = model.student
        if recipient is not None:
            html = email_templates.new_comment_email(
                self.settings.frontend_url, model.id, model.title, recipient.name, user.name
            )
            result = self.email_sender.send(recipient.email, "New Comment on Contribution", html)
            if not result.success:
                logger.warning(
                    "Failed to notify %s about comment on %s: %s",
                    recipient.id,
                    contribution_id,
                    result.error,
                )
        return content

    def increment_view_count(self, contribution_id: str) -> bool:
        """Add one to the view counter.

        Returns:
            False if the contribution does not exist.
        """
        updated = (
            self.db.query(ContributionModel)
            .filter(ContributionModel.id == contribution_id)
            .update(
                {ContributionModel.view_count: ContributionModel.view_count + 1},
                synchronize_session=False,
            )
        )
        self.db.commit()
        return updated > 0

    # --- Listings ---

    def _page(
        self,
        query: Query,
        params: PaginationParams,
        academic_year_id: Optional[str],
        max_limit: int = SCOPED_MAX_LIMIT,
    ) -> Page:
        if academic_year_id:
            query = query.filter(ContributionModel.academic_year_id == academic_year_id)
        page = paginate(query, ContributionModel.created_at, params, max_limit=max_limit)
        page.items = [contribution_to_info(m, self.storage) for m in page.items]
        return page

    @staticmethod
    def _require_faculty(user: User) -> str:
        if not user.faculty_id:
            raise ValidationError("User is not assigned to a faculty")
        return user.faculty_id

    def list_mine(
        self, user: User, params: PaginationParams, academic_year_id: Optional[str] = None
    ) -> Page:
        query = self._query().filter(ContributionModel.student_id == user.id)
        return self._page(query, params, academic_year_id)

    def list_faculty_selected(
        self, user: User, params: PaginationParams, academic_year_id: Optional[str] = None
    ) -> Page:
        query = self._query().filter(
            ContributionModel.faculty_id == self._require_faculty(user),
            ContributionModel.status == "selected",
        )
        return self._page(query, params, academic_year_id)

    def list_faculty_all(
        self, user: User, params: PaginationParams, academic_year_id: Optional[str] = None
    ) -> Page:
        query = self._query().filter(
            ContributionModel.faculty_id == self._require_faculty(user)
        )
        return self._page(query, params, academic_year_id)

    def list_all_selected(
        self, params: PaginationParams, academic_year_id: Optional[str] = None
    ) -> Page:
        query = self._query().filter(ContributionModel.status == "selected")
        return self._page(query, params, academic_year_id, max_limit=MAX_LIMIT)
