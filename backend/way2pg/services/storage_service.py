"""
Media Host - listing images in S3-compatible object storage

Callers hand over a buffer and a folder and get back a public URL plus a
`public_id` (the object key). Deleting by `public_id` is idempotent: S3
returns success for keys that no longer exist.
"""

from dataclasses import dataclass
from typing import Optional
from functools import wraps
import asyncio
import mimetypes
import uuid

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from way2pg.core.config import settings
from way2pg.core.exceptions import MediaHostError
from way2pg.core.logging_config import logger

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}


@dataclass(frozen=True)
class MediaAsset:
    url: str
    public_id: str


def retry_with_backoff(max_retries: int = 3, base_delay: float = 0.5, max_delay: float = 8.0):
    """
    Decorator for retry logic with exponential backoff on transient S3 errors.

    Args:
        max_retries: Maximum number of attempts
        base_delay: Initial delay in seconds
        max_delay: Maximum delay cap in seconds
    """
    def decorator(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            last_exception = None
            for attempt in range(max_retries):
                try:
                    return await func(*args, **kwargs)
                except (ClientError, BotoCoreError, ConnectionError, TimeoutError) as e:
                    last_exception = e
                    if attempt < max_retries - 1:
                        delay = min(base_delay * (2 ** attempt), max_delay)
                        logger.warning(f"[Media-Retry] Attempt {attempt + 1}/{max_retries} failed: {e}. Retrying in {delay:.1f}s...")
                        await asyncio.sleep(delay)
                    else:
                        logger.error(f"[Media-Retry] All {max_retries} attempts failed: {e}")
            raise last_exception

        return async_wrapper
    return decorator


class StorageService:
    """Uploads and deletes listing images"""

    def __init__(self, client=None, bucket: Optional[str] = None):
        self._client = client
        self._bucket_name = bucket or settings.MEDIA_BUCKET

    def _get_client(self):
        """Lazy initialization of the S3 client"""
        if self._client is None:
            kwargs = {"region_name": settings.AWS_REGION}
            if settings.MEDIA_ENDPOINT_URL:
                kwargs["endpoint_url"] = settings.MEDIA_ENDPOINT_URL
                kwargs["config"] = Config(signature_version='s3v4', s3={'addressing_style': 'path'})
            # Without explicit keys boto3 falls back to the IAM role
            if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
                kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
                kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
            self._client = boto3.client('s3', **kwargs)
        return self._client

    @staticmethod
    def generate_public_id(folder: str, filename: Optional[str], content_type: str) -> str:
        """`<folder>/<uuid><ext>`; the original filename only contributes its extension"""
        ext = ""
        if filename and "." in filename:
            ext = "." + filename.rsplit(".", 1)[1].lower()
        if not ext or len(ext) > 6:
            ext = mimetypes.guess_extension(content_type or "") or ""
        folder = folder.strip("/")
        return f"{folder}/{uuid.uuid4().hex}{ext}"

    def public_url(self, public_id: str) -> str:
        if settings.MEDIA_PUBLIC_BASE_URL:
            return f"{settings.MEDIA_PUBLIC_BASE_URL.rstrip('/')}/{public_id}"
        if settings.MEDIA_ENDPOINT_URL:
            return f"{settings.MEDIA_ENDPOINT_URL.rstrip('/')}/{self._bucket_name}/{public_id}"
        return f"https://{self._bucket_name}.s3.{settings.AWS_REGION}.amazonaws.com/{public_id}"

    @retry_with_backoff(max_retries=settings.MEDIA_MAX_RETRIES)
    async def _put(self, key: str, data: bytes, content_type: str) -> None:
        client = self._get_client()
        await asyncio.to_thread(
            client.put_object,
            Bucket=self._bucket_name,
            Key=key,
            Body=data,
            ContentType=content_type,
        )

    @retry_with_backoff(max_retries=settings.MEDIA_MAX_RETRIES)
    async def _delete(self, key: str) -> None:
        client = self._get_client()
        await asyncio.to_thread(client.delete_object, Bucket=self._bucket_name, Key=key)

    async def upload(
        self,
        data: bytes,
        folder: Optional[str] = None,
        content_type: str = "image/jpeg",
        filename: Optional[str] = None,
    ) -> MediaAsset:
        """Store a buffer and return its URL and deletable identifier"""
        if not data:
            raise MediaHostError("Empty upload")
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise MediaHostError(f"Unsupported image type: {content_type}")

        public_id = self.generate_public_id(folder or settings.MEDIA_FOLDER, filename, content_type)
        try:
            await self._put(public_id, data, content_type)
        except (ClientError, BotoCoreError, ConnectionError, TimeoutError) as e:
            raise MediaHostError(f"Error uploading image: {e}", public_id=public_id) from e

        logger.info(f"[Media] Uploaded {public_id} ({len(data)} bytes)")
        return MediaAsset(url=self.public_url(public_id), public_id=public_id)

    async def delete(self, public_id: str) -> bool:
        """Delete by identifier. Safe to repeat for the same id."""
        if not public_id:
            return False
        try:
            await self._delete(public_id)
        except (ClientError, BotoCoreError, ConnectionError, TimeoutError) as e:
            raise MediaHostError(f"Error deleting image: {e}", public_id=public_id) from e
        logger.info(f"[Media] Deleted {public_id}")
        return True


storage_service = StorageService()
