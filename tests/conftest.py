import os

# Must be set before the application modules build their engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import timedelta

import bcrypt
import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config import Settings, get_settings
from core.database import get_db
from core.dependencies import get_email_sender, get_storage, get_user_manager
from models import (
    AcademicYearModel,
    Base,
    CommentModel,
    ContributionAssetModel,
    ContributionModel,
    FacultyModel,
    UserModel,
)
from schemas.user import User
from api.routes.auth import create_access_token
from utils.contribution_manager import ContributionManager
from utils.email_sender import EmailResult
from utils.formatters import utcnow
from utils.user_manager import UserManager

PASSWORD = "password123"
PASSWORD_HASH = bcrypt.hashpw(PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


class FakeStorage:
    """Object storage double that signs nothing and serves fixed bytes."""

    def __init__(self):
        self.fail_keys = set()
        self.downloaded = []

    def generate_upload_url(self, key, bucket=None, expires_in=None):
        return f"https://storage.test/upload/{key}"

    def generate_download_url(self, key, bucket=None, expires_in=None):
        return f"https://storage.test/{key}"

    def download_file(self, key, destination):
        if key in self.fail_keys:
            raise requests.HTTPError(f"404 for {key}")
        os.makedirs(os.path.dirname(destination), exist_ok=True)
        with open(destination, "wb") as f:
            f.write(f"content of {key}".encode("utf-8"))
        self.downloaded.append(key)
        return destination


class FakeEmailSender:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, html):
        if self.fail:
            return EmailResult(success=False, error="smtp down")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return EmailResult(success=True)


@pytest.fixture
def settings():
    return Settings(
        jwt_secret_key="test-secret",
        frontend_url="http://frontend.test",
        allow_student_first_comment=False,
    )


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def contribution_manager(db, storage, email_sender, settings):
    return ContributionManager(db, storage, email_sender, settings)


@pytest.fixture
def client(db, storage, email_sender, settings):
    from app import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_user_manager] = lambda: UserManager(db, bcrypt_rounds=4)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# --- Factories ---


def make_faculty(db, name="Faculty of Computing"):
    faculty = FacultyModel(name=name)
    db.add(faculty)
    db.commit()
    return faculty


def make_user(db, role="student", faculty=None, email=None, name=None, status="active"):
    user = UserModel(
        email=email or f"{role}-{os.urandom(4).hex()}@uni.test",
        password_hash=PASSWORD_HASH,
        name=name or role.replace("_", " ").title(),
        role=role,
        faculty_id=faculty.id if faculty is not None else None,
        status=status,
    )
    db.add(user)
    db.commit()
    return user


def make_year(
    db,
    start=None,
    end=None,
    new_closure=None,
    final_closure=None,
):
    """Academic year; by default an open window around today."""
    now = utcnow()
    year = AcademicYearModel(
        start_date=start or (now - timedelta(days=30)).date(),
        end_date=end or (now + timedelta(days=300)).date(),
        new_closure_date=new_closure or now + timedelta(days=30),
        final_closure_date=final_closure or now + timedelta(days=60),
    )
    db.add(year)
    db.commit()
    return year


def make_contribution(
    db,
    student,
    year,
    status="pending",
    created_at=None,
    title="My Article",
    images=(),
):
    created_at = created_at or utcnow()
    contribution = ContributionModel(
        title=title,
        description="About the article",
        student_id=student.id,
        faculty_id=student.faculty_id,
        academic_year_id=year.id,
        submission_date=created_at,
        last_updated=created_at,
        status=status,
        created_at=created_at,
    )
    contribution.assets.append(
        ContributionAssetModel(type="article", file_path=f"contributions/{student.id}/article.docx")
    )
    for image in images:
        contribution.assets.append(ContributionAssetModel(type="image", file_path=image))
    db.add(contribution)
    db.commit()
    return contribution


def make_comment(db, contribution, author, content="Looks good"):
    comment = CommentModel(contribution_id=contribution.id, user_id=author.id, content=content)
    db.add(comment)
    db.commit()
    return comment


def as_user(model):
    return User.model_validate(model)


def auth_headers(user, settings):
    token = create_access_token({"sub": user.id, "role": user.role}, settings=settings)
    return {"Authorization": f"Bearer {token}"}
