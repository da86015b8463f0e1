"""Zip export of selected contributions.

Every selected contribution of an academic year gets its own folder named by
its id, holding the downloaded assets and a ``contribution_info.txt``
manifest. The folders are then archived into a single zip file.
"""

import logging
import os
import zipfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from core.exceptions import ValidationError
from models.academic import AcademicYearModel
from models.contribution import ContributionModel
from utils.academic_manager import AcademicManager
from utils.formatters import format_academic_year, format_timestamp, utcnow
from utils.storage import ObjectStorage

logger = logging.getLogger(__name__)

MANIFEST_NAME = "contribution_info.txt"
MAX_DOWNLOAD_WORKERS = 8


@dataclass
class ExportResult:
    zip_path: str
    filename: str


def export_filename(year: AcademicYearModel) -> str:
    start = year.start_date.strftime("%Y-%m")
    end = year.end_date.strftime("%Y-%m")
    return f"selected-contributions-{start}-to-{end}-academic-year.zip"


def _manifest(contribution: ContributionModel) -> str:
    student = contribution.student
    faculty = contribution.faculty
    year = contribution.academic_year
    if year is not None:
        span = f"{year.start_date.isoformat()} to {year.end_date.isoformat()}"
    else:
        span = "N/A"
    lines = [
        f"Title: {contribution.title or 'N/A'}",
        f"Description: {contribution.description or 'N/A'}",
        f"Status: {contribution.status or 'N/A'}",
        f"Submission Date: {format_timestamp(contribution.submission_date)}",
        f"Last Updated: {format_timestamp(contribution.last_updated)}",
        f"View Count: {contribution.view_count or 0}",
        f"Student Name: {student.name if student and student.name else 'Unknown'}",
        f"Student Email: {student.email if student and student.email else 'Unknown'}",
        f"Faculty: {faculty.name if faculty and faculty.name else 'Unknown'}",
        f"Academic Year: {span}",
    ]
    return "\n".join(lines) + "\n"


class ExportManager:
    """Builds the selected-contributions archive for one academic year."""

    def __init__(self, db: Session, storage: ObjectStorage):
        self.db = db
        self.storage = storage

    def resolve_year(self, academic_year_id: Optional[str] = None) -> AcademicYearModel:
        """Return the requested academic year, or the one containing today.

        Raises:
            ValidationError: If no matching academic year exists.
        """
        if academic_year_id:
            year = (
                self.db.query(AcademicYearModel)
                .filter(AcademicYearModel.id == academic_year_id)
                .first()
            )
            if year is None:
                raise ValidationError("Academic year not found")
            return year

        year = AcademicManager(self.db).find_year_model_containing(utcnow().date())
        if year is None:
            raise ValidationError(
                "No academic year found for the current date. "
                "Please specify an academic year ID."
            )
        return year

    def export_selected(
        self, work_dir: str, academic_year_id: Optional[str] = None
    ) -> ExportResult:
        """Download every selected contribution of a year and zip it.

        Args:
            work_dir: Empty temporary directory owned by the caller. The caller
                deletes it once the archive has been sent.
            academic_year_id: Year to export; defaults to the current one.

        Returns:
            Path of the zip inside ``work_dir`` and its download filename.

        Raises:
            ValidationError: If the year cannot be resolved or has no selected
                contributions.
            requests.HTTPError: If any asset download fails.
        """
        year = self.resolve_year(academic_year_id)
        contributions = (
            self.db.query(ContributionModel)
            .options(
                joinedload(ContributionModel.student),
                joinedload(ContributionModel.faculty),
                joinedload(ContributionModel.academic_year),
                joinedload(ContributionModel.assets),
            )
            .filter(
                ContributionModel.academic_year_id == year.id,
                ContributionModel.status == "selected",
            )
            .order_by(ContributionModel.created_at)
            .all()
        )
        if not contributions:
            raise ValidationError(
                "No selected contributions found for academic year "
                f"{format_academic_year(year.start_date, year.end_date)}"
            )

        content_dir = os.path.join(work_dir, "contributions")
        downloads: List[Tuple[str, str]] = []
        for contribution in contributions:
            folder = os.path.join(content_dir, contribution.id)
            os.makedirs(folder, exist_ok=True)
            for asset in contribution.assets:
                filename = os.path.basename(asset.file_path) or asset.id
                downloads.append((asset.file_path, os.path.join(folder, filename)))

        logger.info(
            "Exporting %d selected contributions (%d assets) for academic year %s",
            len(contributions),
            len(downloads),
            year.id,
        )
        with ThreadPoolExecutor(max_workers=MAX_DOWNLOAD_WORKERS) as executor:
            futures = [
                executor.submit(self.storage.download_file, key, destination)
                for key, destination in downloads
            ]
            # result() re-raises the first download error
            for future in futures:
                future.result()

        for contribution in contributions:
            manifest_path = os.path.join(content_dir, contribution.id, MANIFEST_NAME)
            with open(manifest_path, "w", encoding="utf-8") as f:
                f.write(_manifest(contribution))

        filename = export_filename(year)
        zip_path = os.path.join(work_dir, filename)
        with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as archive:
            for root, _dirs, files in os.walk(content_dir):
                for name in files:
                    full_path = os.path.join(root, name)
                    archive.write(full_path, os.path.relpath(full_path, content_dir))
        return ExportResult(zip_path=zip_path, filename=filename)
