"""
Image storage for barber galleries and service pictures.
Blobs live in an S3-compatible bucket and are served from S3_PUBLIC_BASE_URL.
"""

import re
import time
from pathlib import PurePosixPath
from typing import Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from barberbook import config
from barberbook.logger import get_logger

logger = get_logger(__name__)


class StorageError(Exception):
    pass


def validate_image_file(content_type: Optional[str], size_bytes: int) -> Tuple[bool, Optional[str]]:
    """
    Validate an image before upload.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if size_bytes > config.MAX_IMAGE_BYTES:
        return False, f"Image must be less than {config.MAX_IMAGE_BYTES // (1024 * 1024)}MB"
    if not content_type or not content_type.startswith("image/"):
        return False, "File must be an image"
    return True, None


def _safe_filename(filename: str) -> str:
    name = PurePosixPath((filename or "upload").replace("\\", "/")).name
    return re.sub(r"[^A-Za-z0-9._-]", "_", name) or "upload"


def build_blob_path(prefix: str, owner_id: str, filename: str) -> str:
    """barbers/{owner_id}/{timestamp}_{filename}"""
    timestamp = int(time.time() * 1000)
    return f"{prefix}/{owner_id}/{timestamp}_{_safe_filename(filename)}"


def get_s3_client():
    """Create and return an S3 client for the configured endpoint."""
    return boto3.client(
        "s3",
        endpoint_url=config.S3_ENDPOINT_URL,
        aws_access_key_id=config.S3_ACCESS_KEY_ID,
        aws_secret_access_key=config.S3_SECRET_ACCESS_KEY,
        region_name=config.S3_REGION,
        config=Config(signature_version="s3v4"),
    )


class BlobStorage:
    def __init__(self, client=None, bucket: Optional[str] = None, public_base_url: Optional[str] = None):
        self._client = client
        self.bucket = bucket or config.S3_BUCKET
        self.public_base_url = (public_base_url or config.S3_PUBLIC_BASE_URL).rstrip("/")

    @property
    def client(self):
        if self._client is None:
            self._client = get_s3_client()
        return self._client

    def upload(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Store bytes under key and return the public URL"""
        extra_args = {"ContentType": content_type} if content_type else {}
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data, **extra_args)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error uploading blob {key}: {str(e)}")
            raise StorageError(f"Failed to store {key}") from e
        logger.info(f"Blob stored: {key} ({len(data)} bytes)")
        return f"{self.public_base_url}/{key}"

    def delete(self, url: str) -> None:
        """Delete the blob a public URL points to; a missing blob is not an error"""
        key = self.key_from_url(url)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error deleting blob {key}: {str(e)}")
            raise StorageError(f"Failed to delete {url}") from e
        logger.info(f"Blob deleted: {key}")

    def key_from_url(self, url: str) -> str:
        prefix = f"{self.public_base_url}/"
        if not url.startswith(prefix):
            raise StorageError(f"URL is not managed by this storage: {url}")
        key = url[len(prefix):]
        if not key or ".." in key.split("/"):
            raise StorageError(f"Invalid blob key: {key}")
        return key


def get_storage() -> BlobStorage:
    return BlobStorage()
