from .base import Base
from .user import LoginAuditLogModel, UserModel
from .academic import AcademicYearModel, FacultyModel, TermModel
from .contribution import CommentModel, ContributionAssetModel, ContributionModel

__all__ = [
    "Base",
    "UserModel",
    "LoginAuditLogModel",
    "FacultyModel",
    "AcademicYearModel",
    "TermModel",
    "ContributionModel",
    "ContributionAssetModel",
    "CommentModel",
]
