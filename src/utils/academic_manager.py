"""Faculty, academic year and term management.

Read access for every role plus the admin operations that create, edit and
delete catalogue entries. Referential checks are done here rather than with
cascading constraints, so that deletes can be refused with a readable message.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from core.exceptions import ValidationError
from models.academic import AcademicYearModel, FacultyModel, TermModel
from models.contribution import ContributionModel
from models.user import UserModel
from schemas.academic import AcademicYearInfo, FacultyInfo, TermInfo
from utils.converters import academic_year_to_info
from utils.formatters import to_naive_utc

logger = logging.getLogger(__name__)


class AcademicManager:
    """Manages faculties, academic years and terms."""

    def __init__(self, db: Session):
        self.db = db

    # --- Faculties ---

    def list_faculties(self) -> List[FacultyInfo]:
        models = self.db.query(FacultyModel).order_by(FacultyModel.name).all()
        return [FacultyInfo.model_validate(m) for m in models]

    def create_faculty(self, name: str) -> FacultyInfo:
        name = name.strip()
        if self.db.query(FacultyModel).filter(FacultyModel.name == name).first():
            raise ValidationError("Faculty already exists")
        model = FacultyModel(name=name)
        self._commit(model, "Faculty already exists")
        logger.info("Created faculty: %s", name)
        return FacultyInfo.model_validate(model)

    def update_faculty(self, faculty_id: str, name: str, status: str) -> FacultyInfo:
        model = self._get_faculty(faculty_id)
        name = name.strip()
        duplicate = (
            self.db.query(FacultyModel)
            .filter(FacultyModel.name == name, FacultyModel.id != faculty_id)
            .first()
        )
        if duplicate:
            raise ValidationError("Faculty already exists")
        if status == "inactive" and self._faculty_has_users(faculty_id):
            raise ValidationError("Cannot deactivate a faculty that has users")
        model.name = name
        model.status = status
        self._commit(model, "Faculty already exists")
        return FacultyInfo.model_validate(model)

    def delete_faculty(self, faculty_id: str) -> None:
        model = self._get_faculty(faculty_id)
        if self._faculty_has_users(faculty_id):
            raise ValidationError("Cannot delete a faculty that has users")
        has_contributions = (
            self.db.query(ContributionModel.id)
            .filter(ContributionModel.faculty_id == faculty_id)
            .first()
        )
        if has_contributions:
            raise ValidationError("Cannot delete a faculty that has contributions")
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted faculty %s", faculty_id)

    def seed_default_faculties(self, names: Iterable[str]) -> int:
        """Insert the given faculties when the table is empty.

        Returns:
            Number of faculties inserted.
        """
        if self.db.query(FacultyModel.id).first():
            return 0
        count = 0
        for name in names:
            self.db.add(FacultyModel(name=name))
            count += 1
        self.db.commit()
        if count:
            logger.info("Seeded %d default faculties", count)
        return count

    def _get_faculty(self, faculty_id: str) -> FacultyModel:
        model = self.db.query(FacultyModel).filter(FacultyModel.id == faculty_id).first()
        if not model:
            raise ValidationError("Faculty not found")
        return model

    def _faculty_has_users(self, faculty_id: str) -> bool:
        row = self.db.query(UserModel.id).filter(UserModel.faculty_id == faculty_id).first()
        return row is not None

    # --- Academic years ---

    def list_academic_years(self) -> List[AcademicYearInfo]:
        models = (
            self.db.query(AcademicYearModel)
            .order_by(AcademicYearModel.start_date.desc())
            .all()
        )
        return [academic_year_to_info(m) for m in models]

    def get_academic_year(self, year_id: str) -> AcademicYearInfo:
        return academic_year_to_info(self._get_year(year_id))

    def find_year_model_containing(self, day: date) -> Optional[AcademicYearModel]:
        """Return the academic year whose window contains ``day``.

        When windows overlap, the one that started most recently wins.
        """
        return self._years_containing(day).first()

    def find_years_containing(self, day: date) -> List[AcademicYearInfo]:
        models = self._years_containing(day).all()
        return [academic_year_to_info(m) for m in models]

    def create_academic_year(
        self, start_date: date, end_date: date, new_closure_date, final_closure_date
    ) -> AcademicYearInfo:
        """Create an academic year.

        Raises:
            ValidationError: If the dates are out of order or the
                (start, end) pair already exists.
        """
        self._check_year_dates(start_date, end_date, new_closure_date, final_closure_date)
        self._check_unique_span(start_date, end_date)
        model = AcademicYearModel(
            start_date=start_date,
            end_date=end_date,
            new_closure_date=to_naive_utc(new_closure_date),
            final_closure_date=to_naive_utc(final_closure_date),
        )
        self._commit(model, "Academic year already exists")
        logger.info("Created academic year %s..%s", start_date, end_date)
        return academic_year_to_info(model)

    def update_academic_year(
        self,
        year_id: str,
        start_date: date,
        end_date: date,
        new_closure_date,
        final_closure_date,
        status: str,
    ) -> AcademicYearInfo:
        model = self._get_year(year_id)
        self._check_year_dates(start_date, end_date, new_closure_date, final_closure_date)
        self._check_unique_span(start_date, end_date, exclude_id=year_id)
        if status == "inactive" and self._year_has_contributions(year_id):
            raise ValidationError("Cannot deactivate an academic year that has contributions")
        model.start_date = start_date
        model.end_date = end_date
        model.new_closure_date = to_naive_utc(new_closure_date)
        model.final_closure_date = to_naive_utc(final_closure_date)
        model.status = status
        self._commit(model, "Academic year already exists")
        return academic_year_to_info(model)

    def delete_academic_year(self, year_id: str) -> None:
        model = self._get_year(year_id)
        if self._year_has_contributions(year_id):
            raise ValidationError("Cannot delete an academic year that has contributions")
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted academic year %s", year_id)

    def _get_year(self, year_id: str) -> AcademicYearModel:
        model = (
            self.db.query(AcademicYearModel)
            .filter(AcademicYearModel.id == year_id)
            .first()
        )
        if not model:
            raise ValidationError("Academic year not found")
        return model

    def _years_containing(self, day: date) -> Query:
        return (
            self.db.query(AcademicYearModel)
            .filter(AcademicYearModel.start_date <= day, AcademicYearModel.end_date >= day)
            .order_by(AcademicYearModel.start_date.desc())
        )

    def _year_has_contributions(self, year_id: str) -> bool:
        row = (
            self.db.query(ContributionModel.id)
            .filter(ContributionModel.academic_year_id == year_id)
            .first()
        )
        return row is not None

    def _check_unique_span(
        self, start_date: date, end_date: date, exclude_id: Optional[str] = None
    ) -> None:
        query = self.db.query(AcademicYearModel.id).filter(
            AcademicYearModel.start_date == start_date,
            AcademicYearModel.end_date == end_date,
        )
        if exclude_id:
            query = query.filter(AcademicYearModel.id != exclude_id)
        if query.first():
            raise ValidationError("Academic year already exists")

    @staticmethod
    def _check_year_dates(start_date, end_date, new_closure_date, final_closure_date):
        if start_date > end_date:
            raise ValidationError("Start date must not be after end date")
        if to_naive_utc(new_closure_date) > to_naive_utc(final_closure_date):
            raise ValidationError("New closure date must not be after final closure date")

    # --- Terms ---

    def list_terms(self) -> List[TermInfo]:
        models = self.db.query(TermModel).order_by(TermModel.created_at).all()
        return [TermInfo.model_validate(m) for m in models]

    def get_term(self, term_id: str) -> TermInfo:
        return TermInfo.model_validate(self._get_term(term_id))

    def create_term(self, name: str, content: str) -> TermInfo:
        model = TermModel(name=name, content=content)
        self._commit(model, "Could not create term")
        return TermInfo.model_validate(model)

    def update_term(self, term_id: str, name: str, content: str) -> TermInfo:
        model = self._get_term(term_id)
        model.name = name
        model.content = content
        self._commit(model, "Could not update term")
        return TermInfo.model_validate(model)

    def delete_term(self, term_id: str) -> None:
        model = self._get_term(term_id)
        self.db.delete(model)
        self.db.commit()

    def _get_term(self, term_id: str) -> TermModel:
        model = self.db.query(TermModel).filter(TermModel.id == term_id).first()
        if not model:
            raise ValidationError("Invalid term id")
        return model

    def _commit(self, model, conflict_message: str) -> None:
        try:
            self.db.add(model)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ValidationError(conflict_message) from e
        self.db.refresh(model)
