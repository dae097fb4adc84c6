import base64
import binascii
import ipaddress
import mimetypes
import uuid

import boto3
import httpx
from botocore.exceptions import ClientError
from fastapi.concurrency import run_in_threadpool
from barber_api.config import settings
from typing import Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class ImageUploadError(Exception):
    """The image reference could not be read or stored."""


class S3Storage:
    def __init__(self):
        if not all([settings.aws_access_key_id, settings.aws_secret_access_key, settings.s3_bucket_name]):
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name
        self.base_url = settings.s3_base_url
        self.key_prefix = settings.s3_key_prefix.strip("/")

    def upload_file(self, file_content: bytes, key: str, content_type: str = "image/jpeg") -> str:
        """Upload file to S3 and return its public URL"""
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=file_content,
                ContentType=content_type
            )
            return self.public_url(key)
        except ClientError as e:
            logger.error(f"Failed to upload file to S3: {str(e)}")
            raise

    def delete_file(self, key: str) -> bool:
        """Delete file from S3"""
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            logger.error(f"Failed to delete file from S3: {str(e)}")
            return False

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    def key_from_url(self, url: str) -> Optional[str]:
        """Object key for a URL served from this bucket, or None for foreign URLs."""
        prefix = self.base_url + "/"
        if not url or not url.startswith(prefix):
            return None
        key = url[len(prefix):].split("?", 1)[0]
        return key or None

    async def upload_image(self, image: str) -> str:
        """Store a data URI or remote image URL in the bucket; returns the hosted URL."""
        content, content_type = await self._load_image(image)
        extension = mimetypes.guess_extension(content_type) or ""
        name = f"{uuid.uuid4().hex}{extension}"
        key = f"{self.key_prefix}/{name}" if self.key_prefix else name
        return await run_in_threadpool(self.upload_file, content, key, content_type)

    async def delete_image(self, url: str) -> bool:
        """Delete a hosted image by URL. URLs outside the bucket are left alone."""
        key = self.key_from_url(url)
        if key is None:
            return False
        return await run_in_threadpool(self.delete_file, key)

    async def _load_image(self, image: str) -> Tuple[bytes, str]:
        if image.startswith("data:"):
            return self._decode_data_uri(image)
        if image.startswith(("http://", "https://")):
            return await self._fetch_remote(image)
        raise ImageUploadError("Image must be a data URI or an http(s) URL")

    @staticmethod
    def _decode_data_uri(image: str) -> Tuple[bytes, str]:
        header, _, payload = image.partition(",")
        content_type = header[len("data:"):].split(";", 1)[0]
        if not payload or ";base64" not in header:
            raise ImageUploadError("Image data URI must be base64 encoded")
        if not content_type.startswith("image/"):
            raise ImageUploadError(f"Unsupported content type '{content_type}'")
        max_bytes = settings.image_max_bytes
        # 4 base64 chars encode 3 bytes; reject before decoding
        if len(payload) // 4 * 3 > max_bytes + 2:
            raise ImageUploadError(f"Image exceeds {max_bytes} bytes")
        try:
            content = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageUploadError(f"Invalid base64 image payload: {e}")
        if not content:
            raise ImageUploadError("Image is empty")
        if len(content) > max_bytes:
            raise ImageUploadError(f"Image exceeds {max_bytes} bytes")
        return content, content_type

    @staticmethod
    async def _check_host(request: httpx.Request) -> None:
        # Runs for the first request and for every redirect hop
        host = request.url.host
        if host == "localhost" or host.endswith(".localhost"):
            raise ImageUploadError(f"Image host '{host}' is not allowed")
        try:
            address = ipaddress.ip_address(host)
        except ValueError:
            return
        if not address.is_global:
            raise ImageUploadError(f"Image host '{host}' is not allowed")

    @classmethod
    async def _fetch_remote(cls, url: str) -> Tuple[bytes, str]:
        max_bytes = settings.image_max_bytes
        try:
            async with httpx.AsyncClient(
                timeout=settings.image_fetch_timeout,
                follow_redirects=True,
                event_hooks={"request": [cls._check_host]},
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    content_type = response.headers.get("content-type", "").split(";", 1)[0].strip()
                    if not content_type:
                        content_type = mimetypes.guess_type(url)[0] or ""
                    if not content_type.startswith("image/"):
                        raise ImageUploadError(f"Unsupported content type '{content_type}'")

                    declared = response.headers.get("content-length")
                    if declared and declared.isdigit() and int(declared) > max_bytes:
                        raise ImageUploadError(f"Image exceeds {max_bytes} bytes")

                    content = bytearray()
                    async for chunk in response.aiter_bytes():
                        content.extend(chunk)
                        if len(content) > max_bytes:
                            raise ImageUploadError(f"Image exceeds {max_bytes} bytes")
        except httpx.HTTPError as e:
            raise ImageUploadError(f"Could not fetch image: {e}")
        if not content:
            raise ImageUploadError("Image is empty")
        return bytes(content), content_type


_storage: Optional[S3Storage] = None


def get_s3_storage() -> S3Storage:
    global _storage
    if _storage is None:
        _storage = S3Storage()
    return _storage
