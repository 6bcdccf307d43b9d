"""
Object storage service for avatar and post images.
Clients upload bytes directly to storage through short-lived presigned URLs.
"""

import asyncio
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.core.exceptions import StorageError
from app.core.logging import get_logger, log_storage_operation

logger = get_logger(__name__)


class StorageService:
    """Service for S3-compatible object storage operations."""

    def __init__(self, client=None, bucket: Optional[str] = None):
        """Initialize storage service."""
        self.bucket = bucket or settings.S3_BUCKET_NAME
        self._client = client

    @property
    def client(self):
        """Lazily built boto3 S3 client."""
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=settings.S3_REGION,
                endpoint_url=settings.S3_ENDPOINT_URL,
                aws_access_key_id=settings.S3_ACCESS_KEY_ID,
                aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
                config=Config(signature_version="s3v4"),
            )
        return self._client

    @staticmethod
    def avatar_key(user_id: str) -> str:
        """Object key holding a user's avatar."""
        return f"avatars/{user_id}"

    def create_upload_url(self, key: str, user_id: Optional[str] = None) -> str:
        """
        Create a presigned PUT URL for a single object.

        Args:
            key: Object key the client will write
            user_id: Owner, for logging

        Returns:
            Time-limited upload URL
        """
        try:
            url = self.client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=settings.UPLOAD_URL_EXPIRE_SECONDS,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to presign upload for {key}: {e}")
            raise StorageError("Could not create upload URL", details={"key": key})

        log_storage_operation(
            "presign_upload",
            key=key,
            user_id=user_id,
            expires_in=settings.UPLOAD_URL_EXPIRE_SECONDS,
        )
        return url

    async def delete_object(self, key: str, user_id: Optional[str] = None) -> None:
        """Remove an object; a missing object is not an error."""
        try:
            await asyncio.to_thread(
                self.client.delete_object, Bucket=self.bucket, Key=key
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete object {key}: {e}")
            raise StorageError("Could not delete image", details={"key": key})

        log_storage_operation("delete", key=key, user_id=user_id)

    def public_url(self, key: str) -> str:
        """Public URL for a stored object."""
        return f"{settings.get_image_base_url()}/{key}"


def format_avatar(image: Optional[str], user_id: Optional[str]) -> str:
    """
    URL to render for a user's avatar.

    Absolute URLs are used as-is, stored keys are resolved against the bucket,
    and users without an image get the default avatar.
    """
    if not image or not user_id:
        return settings.DEFAULT_AVATAR_URL
    if image.startswith(("http://", "https://")):
        return image
    return f"{settings.get_image_base_url()}/{image}"


# Global storage service instance
storage_service = StorageService()
