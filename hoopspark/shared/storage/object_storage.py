"""
Object storage for uploaded videos and thumbnails (S3 / R2 compatible).
"""

import logging
import os
from io import BytesIO
from typing import Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from hoopspark.shared.errors import StorageError

logger = logging.getLogger(__name__)


class ObjectStorage(Protocol):
    """Binary blob storage consumed by the orchestrator."""

    def put(self, bucket: str, key: str, data: bytes, content_type: str,
            cache_control: str = "3600", upsert: bool = False) -> None:
        ...

    def sign(self, bucket: str, key: str, ttl_seconds: int) -> str:
        ...


def create_s3_client():
    """Builds a boto3 S3 client from environment variables."""
    return boto3.client(
        "s3",
        endpoint_url=os.getenv("S3_ENDPOINT_URL") or None,
        aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        region_name=os.getenv("AWS_REGION", "auto"),
    )


def _is_not_found(error: ClientError) -> bool:
    code = str(error.response.get("Error", {}).get("Code", ""))
    return code in ("404", "NoSuchKey", "NotFound")


class S3ObjectStorage:
    """ObjectStorage on a boto3 S3 client."""

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = create_s3_client()
        return self._client

    def exists(self, bucket: str, key: str) -> bool:
        try:
            self.client.head_object(Bucket=bucket, Key=key)
            return True
        except ClientError as e:
            if _is_not_found(e):
                return False
            raise StorageError(f"Could not check {key}: {e}")

    def put(self, bucket: str, key: str, data: bytes, content_type: str,
            cache_control: str = "3600", upsert: bool = False) -> None:
        """
        Writes data at key. With upsert=False an existing object is an error.
        Raises StorageError on any failure.
        """
        logger.debug("Uploading %s bytes to %s/%s", len(data), bucket, key)
        try:
            if not upsert and self.exists(bucket, key):
                raise StorageError(f"The resource already exists: {key}")
            self.client.upload_fileobj(
                Fileobj=BytesIO(data),
                Bucket=bucket,
                Key=key,
                ExtraArgs={"ContentType": content_type, "CacheControl": f"max-age={cache_control}"},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Error uploading %s to %s: %s", key, bucket, e)
            raise StorageError(f"Upload failed: {e}")
        logger.info("Uploaded %s to bucket %s", key, bucket)

    def sign(self, bucket: str, key: str, ttl_seconds: int) -> str:
        """Returns a time-limited GET URL for key."""
        try:
            return self.client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=ttl_seconds,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Could not sign URL for {key}: {e}")


def sign_or_none(storage: ObjectStorage, bucket: str, key: Optional[str], ttl_seconds: int) -> Optional[str]:
    """Signs key, logging and returning None on failure."""
    if not key:
        return None
    try:
        return storage.sign(bucket, key, ttl_seconds)
    except StorageError as e:
        logger.warning("Could not sign %s/%s: %s", bucket, key, e.message)
        return None
