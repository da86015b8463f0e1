"""Configuration module for the magazine contribution backend.

This module provides centralized configuration management: database location,
API server settings, token signing, object storage, outgoing email and
contribution policies. All configuration values can be overridden via
environment variables (a ``.env`` file is loaded first).

The values are collected into a frozen ``Settings`` object built once by
``get_settings()``. Components receive that object explicitly instead of
reading the environment themselves.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = ROOT_DIR / DATA_DIR_NAME


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Process-wide configuration, constructed once at start-up."""

    model_config = ConfigDict(frozen=True)

    # --- Database ---
    database_url: str = f"sqlite:///{DATA_DIR}/magazine.db"

    # --- API Server ---
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_allowed_origins: List[str] = ["http://localhost:3000"]
    log_level: str = "INFO"
    frontend_url: str = "http://localhost:3000"

    # --- Authentication ---
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # --- Object storage ---
    aws_region: str = "ap-southeast-1"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    storage_bucket: str = "ewsd-bucket"
    upload_url_expires: int = 3600  # 1 hour
    download_url_expires: int = 604800  # 7 days

    # --- Email ---
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    email_from: str = ""

    # --- Contribution policy ---
    # When false, a student cannot open the comment thread on their own
    # contribution; the faculty's marketing coordinator has to comment first.
    allow_student_first_comment: bool = False

    # --- Seed data ---
    default_faculties: List[str] = [
        "Faculty of Arts",
        "Faculty of Business",
        "Faculty of Computing",
        "Faculty of Engineering",
        "Faculty of Science",
    ]

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, keeping defaults for unset keys."""
        defaults = cls()
        return cls(
            database_url=os.getenv("DATABASE_URL", defaults.database_url),
            api_host=os.getenv("API_HOST", defaults.api_host),
            api_port=int(os.getenv("API_PORT", str(defaults.api_port))),
            cors_allowed_origins=_split_csv(
                os.getenv(
                    "CORS_ALLOWED_ORIGINS", ",".join(defaults.cors_allowed_origins)
                )
            ),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
            frontend_url=os.getenv("FRONTEND_URL", defaults.frontend_url),
            jwt_secret_key=os.getenv("JWT_SECRET_KEY", defaults.jwt_secret_key),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", defaults.jwt_algorithm),
            access_token_expire_minutes=int(
                os.getenv(
                    "ACCESS_TOKEN_EXPIRE_MINUTES",
                    str(defaults.access_token_expire_minutes),
                )
            ),
            aws_region=os.getenv("AWS_REGION", defaults.aws_region),
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID", ""),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY", ""),
            storage_bucket=os.getenv("STORAGE_BUCKET", defaults.storage_bucket),
            upload_url_expires=int(
                os.getenv("UPLOAD_URL_EXPIRES", str(defaults.upload_url_expires))
            ),
            download_url_expires=int(
                os.getenv("DOWNLOAD_URL_EXPIRES", str(defaults.download_url_expires))
            ),
            smtp_host=os.getenv("SMTP_HOST", ""),
            smtp_port=int(os.getenv("SMTP_PORT", str(defaults.smtp_port))),
            smtp_user=os.getenv("SMTP_USER", ""),
            smtp_password=os.getenv("SMTP_PASSWORD", ""),
            email_from=os.getenv("EMAIL_FROM", os.getenv("SMTP_USER", "")),
            allow_student_first_comment=_as_bool(
                os.getenv("ALLOW_STUDENT_FIRST_COMMENT", "false")
            ),
            default_faculties=_split_csv(
                os.getenv("DEFAULT_FACULTIES", ",".join(defaults.default_faculties))
            ),
        )


@lru_cache
def get_settings() -> Settings:
    """Return the process settings, building them on first use."""
    return Settings.from_env()
