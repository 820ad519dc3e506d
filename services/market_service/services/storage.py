"""Object storage for farmer uploads (S3-compatible OSS bucket).

Uploads either go straight from the browser through a presigned PUT URL,
or arrive base64-encoded and are written by the server.
"""

import asyncio
import base64
import binascii
import os
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import status
from libs.common.config import Settings, get_settings
from libs.common.datetime_utils import epoch_millis, utc_now
from libs.common.errors import STORAGE_FAILED, STORAGE_UNAVAILABLE, AppError, bad_request
from libs.common.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DIRECTORY = "products"
DEFAULT_EXTENSION = ".jpg"

# Substring of the content type -> file extension
_CONTENT_TYPE_EXTENSIONS = (
    ("jpeg", ".jpg"),
    ("jpg", ".jpg"),
    ("png", ".png"),
    ("gif", ".gif"),
    ("webp", ".webp"),
    ("mp4", ".mp4"),
    ("mp3", ".mp3"),
)

_DATA_URI = re.compile(r"^data:(?P<type>[^;,]*);base64,(?P<data>.*)$", re.DOTALL)


def resolve_extension(
    file_name: Optional[str] = None, content_type: Optional[str] = None
) -> str:
    extension = os.path.splitext(file_name)[1] if file_name else ""
    if not extension and content_type:
        for needle, candidate in _CONTENT_TYPE_EXTENSIONS:
            if needle in content_type:
                extension = candidate
                break
    return extension.lower() or DEFAULT_EXTENSION


def build_object_key(
    user_id: str, extension: str, directory: Optional[str] = None
) -> str:
    directory = (directory or DEFAULT_DIRECTORY).strip("/") or DEFAULT_DIRECTORY
    return f"farmer/{user_id}/{directory}/{epoch_millis()}-{uuid.uuid4().hex[:8]}{extension}"


def decode_file_data(
    file_data: str, content_type: Optional[str] = None
) -> tuple[bytes, Optional[str]]:
    """Decode raw base64 or a ``data:`` URI; an explicit content type wins."""
    match = _DATA_URI.match(file_data.strip())
    if match:
        content_type = content_type or match.group("type") or None
        file_data = match.group("data")
    try:
        payload = base64.b64decode(file_data, validate=True)
    except (binascii.Error, ValueError):
        raise bad_request("文件解析失败")
    if not payload:
        raise bad_request("文件内容为空")
    return payload, content_type


@dataclass
class UploadCredential:
    upload_url: str
    object_key: str
    expires_at: datetime
    headers: dict
    public_url: str


@dataclass
class StoredObject:
    url: str
    object_key: str
    size: int


class OssStorage:
    def __init__(self, settings: Settings, client=None):
        self.settings = settings
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._client is not None or self.settings.oss_configured

    def ensure_enabled(self) -> None:
        if not self.enabled:
            raise AppError(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                STORAGE_UNAVAILABLE,
                "OSS 未配置，暂不支持文件上传",
            )

    @property
    def client(self):
        self.ensure_enabled()
        if self._client is None:
            s = self.settings
            self._client = boto3.client(
                "s3",
                aws_access_key_id=s.OSS_ACCESS_KEY_ID,
                aws_secret_access_key=s.OSS_ACCESS_KEY_SECRET,
                region_name=s.OSS_REGION,
                endpoint_url=s.OSS_ENDPOINT or f"https://oss-{s.OSS_REGION}.aliyuncs.com",
                config=Config(
                    signature_version="s3v4", s3={"addressing_style": "virtual"}
                ),
            )
            logger.info(
                "Initialised OSS client for bucket %s in %s", s.OSS_BUCKET, s.OSS_REGION
            )
        return self._client

    def public_url(self, object_key: str) -> str:
        s = self.settings
        base = s.OSS_PUBLIC_BASE_URL or s.OSS_ENDPOINT
        if base:
            return f"{base.rstrip('/')}/{object_key}"
        return f"https://{s.OSS_BUCKET}.oss-{s.OSS_REGION}.aliyuncs.com/{object_key}"

    def presign_upload(
        self,
        *,
        user_id: str,
        file_name: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> UploadCredential:
        client = self.client
        expires_in = self.settings.UPLOAD_URL_EXPIRES_SECONDS
        object_key = build_object_key(user_id, resolve_extension(file_name, content_type))

        params = {"Bucket": self.settings.OSS_BUCKET, "Key": object_key}
        headers = {}
        if content_type:
            params["ContentType"] = content_type
            headers["Content-Type"] = content_type

        try:
            upload_url = client.generate_presigned_url(
                "put_object", Params=params, ExpiresIn=expires_in, HttpMethod="PUT"
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Failed to sign upload for %s: %s", object_key, exc)
            raise AppError(status.HTTP_502_BAD_GATEWAY, STORAGE_FAILED, "生成上传签名失败")

        expires_at = utc_now() + timedelta(seconds=expires_in)
        logger.info("Signed upload %s, expires %s", object_key, expires_at.isoformat())
        return UploadCredential(
            upload_url=upload_url,
            object_key=object_key,
            expires_at=expires_at,
            headers=headers,
            public_url=self.public_url(object_key),
        )

    async def upload_bytes(
        self,
        *,
        user_id: str,
        data: bytes,
        file_name: Optional[str] = None,
        content_type: Optional[str] = None,
        directory: Optional[str] = None,
    ) -> StoredObject:
        client = self.client
        object_key = build_object_key(
            user_id, resolve_extension(file_name, content_type), directory
        )
        kwargs = {"Bucket": self.settings.OSS_BUCKET, "Key": object_key, "Body": data}
        if content_type:
            kwargs["ContentType"] = content_type

        logger.info("Uploading %s (%d bytes)", object_key, len(data))
        try:
            await asyncio.to_thread(client.put_object, **kwargs)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Upload of %s failed: %s", object_key, exc)
            raise AppError(status.HTTP_502_BAD_GATEWAY, STORAGE_FAILED, "OSS 上传失败")

        return StoredObject(
            url=self.public_url(object_key), object_key=object_key, size=len(data)
        )


@lru_cache
def get_storage() -> OssStorage:
    return OssStorage(get_settings())
