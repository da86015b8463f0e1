"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes.
Managers get a request-scoped DB session; settings, object storage and the
email sender are process-wide.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from config import Settings, get_settings
from core.database import get_db
from utils import academic_manager
from utils import contribution_manager
from utils import export_manager
from utils import report_manager
from utils import user_manager
from utils.email_sender import EmailSender
from utils.storage import ObjectStorage

SettingsDep = Annotated[Settings, Depends(get_settings)]


@lru_cache
def get_storage() -> ObjectStorage:
    """Get the ObjectStorage singleton."""
    return ObjectStorage(get_settings())


@lru_cache
def get_email_sender() -> EmailSender:
    """Get the EmailSender singleton."""
    return EmailSender(get_settings())


StorageDep = Annotated[ObjectStorage, Depends(get_storage)]
EmailSenderDep = Annotated[EmailSender, Depends(get_email_sender)]


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_academic_manager(
    db: Session = Depends(get_db),
) -> academic_manager.AcademicManager:
    """Get AcademicManager instance with request-scoped DB session."""
    return academic_manager.AcademicManager(db)


def get_contribution_manager(
    storage: StorageDep,
    email_sender: EmailSenderDep,
    settings: SettingsDep,
    db: Session = Depends(get_db),
) -> contribution_manager.ContributionManager:
    """Get ContributionManager instance with request-scoped DB session.

    Args:
        storage: Object storage for asset URLs.
        email_sender: Notification sender.
        settings: Application settings.
        db: Database session.

    Returns:
        ContributionManager instance.
    """
    return contribution_manager.ContributionManager(db, storage, email_sender, settings)


def get_report_manager(db: Session = Depends(get_db)) -> report_manager.ReportManager:
    """Get ReportManager instance with request-scoped DB session."""
    return report_manager.ReportManager(db)


def get_export_manager(
    storage: StorageDep,
    db: Session = Depends(get_db),
) -> export_manager.ExportManager:
    return export_manager.ExportManager(db, storage)


# Type aliases for dependency injection
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
AcademicManagerDep = Annotated[
    academic_manager.AcademicManager, Depends(get_academic_manager)
]
ContributionManagerDep = Annotated[
    contribution_manager.ContributionManager, Depends(get_contribution_manager)
]
ReportManagerDep = Annotated[
    report_manager.ReportManager, Depends(get_report_manager)
]
ExportManagerDep = Annotated[
    export_manager.ExportManager, Depends(get_export_manager)
]
