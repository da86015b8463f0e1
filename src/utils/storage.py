"""Object storage access.

Contribution files live in an S3 bucket. This service only hands out
time-limited presigned URLs; file bytes pass through the backend solely when
selected contributions are exported.
"""

import logging
import os
from typing import Optional

import boto3
import requests
from botocore.exceptions import ClientError

from config import Settings

logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 1024 * 1024  # 1MB


class ObjectStorage:
    """Presigned URL generation and asset download for the contribution bucket."""

    def __init__(self, settings: Settings, client=None):
        """Initialize ObjectStorage.

        Args:
            settings: Application settings (bucket, region, credentials, expiries).
            client: Optional pre-built boto3 S3 client.
        """
        self.settings = settings
        self.bucket = settings.storage_bucket
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self.settings.aws_region,
                aws_access_key_id=self.settings.aws_access_key_id or None,
                aws_secret_access_key=self.settings.aws_secret_access_key or None,
            )
        return self._client

    def generate_upload_url(
        self, key: str, bucket: Optional[str] = None, expires_in: Optional[int] = None
    ) -> str:
        """Generate a presigned PUT URL for uploading ``key``."""
        try:
            return self.client.generate_presigned_url(
                "put_object",
                Params={"Bucket": bucket or self.bucket, "Key": key},
                ExpiresIn=expires_in or self.settings.upload_url_expires,
            )
        except ClientError as e:
            logger.error("Error generating presigned upload URL for %s: %s", key, e)
            raise

    def generate_download_url(
        self, key: str, bucket: Optional[str] = None, expires_in: Optional[int] = None
    ) -> str:
        """Generate a presigned GET URL for downloading ``key``."""
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket or self.bucket, "Key": key},
                ExpiresIn=expires_in or self.settings.download_url_expires,
            )
        except ClientError as e:
            logger.error("Error generating presigned download URL for %s: %s", key, e)
            raise

    def download_file(self, key: str, destination: str) -> str:
        """Download ``key`` into ``destination`` through a presigned URL.

        Returns:
            The destination path.

        Raises:
            requests.HTTPError: If storage answers with an error status.
        """
        url = self.generate_download_url(key)
        with requests.get(url, stream=True) as response:
            response.raise_for_status()
            os.makedirs(os.path.dirname(destination), exist_ok=True)
            with open(destination, "wb") as f:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        logger.debug("Downloaded %s to %s", key, destination)
        return destination
