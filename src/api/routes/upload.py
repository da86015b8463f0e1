"""Upload routes: hands students a presigned URL to put a file in storage."""

import logging
import re
import uuid

from fastapi import APIRouter, Depends

from api.routes.auth import require_roles
from core.dependencies import StorageDep
from schemas.contribution import UploadUrlRequest, UploadUrlResponse
from schemas.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/uploads", tags=["Uploads"])

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def build_upload_key(user_id: str, filename: str) -> str:
    """Storage key for a new upload: ``contributions/<user>/<uuid>-<name>``."""
    safe_name = _UNSAFE_CHARS.sub("_", filename.rsplit("/", 1)[-1]).strip("_") or "file"
    return f"contributions/{user_id}/{uuid.uuid4()}-{safe_name}"


@router.post("/presigned-url", response_model=UploadUrlResponse, summary="Get upload URL")
def presigned_upload_url(
    req: UploadUrlRequest,
    storage: StorageDep,
    current_user: User = Depends(require_roles("student")),
) -> UploadUrlResponse:
    key = build_upload_key(current_user.id, req.filename)
    url = storage.generate_upload_url(key)
    logger.info("Issued upload URL for %s", key)
    return UploadUrlResponse(url=url, key=key)
