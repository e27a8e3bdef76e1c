# File: portfolio_api/services/storage_service.py

"""
Object storage gateway over an S3-compatible service (MinIO in development).

Keys look like ``images/<uuid>.png``; public URLs are built from
``settings.minio_public_url`` + bucket + key so the browser can fetch them
directly.
"""

import json
import logging
import time
import uuid
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any, BinaryIO, Dict, List, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from portfolio_api.core.config import Settings, settings as default_settings
from portfolio_api.core.exceptions import (
    FileNotFoundInStorageError,
    StorageError,
    StorageUnavailableError,
)

logger = logging.getLogger(__name__)

PUBLIC_FOLDERS = ("images", "videos")
CACHE_CONTROL = "public, max-age=31536000"

_MISSING_CODES = {"404", "NoSuchKey", "NotFound", "NoSuchBucket"}


def _is_missing(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code", "") in _MISSING_CODES


class ObjectStorage:
    """
    Thin wrapper around a boto3 S3 client.

    ``init()`` must succeed before any other call; otherwise every operation
    raises ``StorageUnavailableError``.
    """

    def __init__(self, config: Optional[Settings] = None, client: Any = None):
        self.config = config or default_settings
        self.bucket = self.config.minio_bucket_name
        self.public_url = self.config.minio_public_url.rstrip("/")
        self._client = client

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def _build_client(self):
        return boto3.client(
            "s3",
            endpoint_url=self.config.storage_endpoint_url,
            aws_access_key_id=self.config.minio_access_key,
            aws_secret_access_key=self.config.minio_secret_key,
            region_name=self.config.minio_region,
            config=Config(
                signature_version="s3v4",
                s3={"addressing_style": "path"},
                retries={"max_attempts": 1},
            ),
        )

    def init(self) -> "ObjectStorage":
        client = self._client or self._build_client()

        attempts = max(self.config.storage_connect_retries, 1)
        for attempt in range(1, attempts + 1):
            try:
                client.list_buckets()
                break
            except (BotoCoreError, ClientError) as exc:
                if attempt == attempts:
                    raise StorageError(f"Object storage unreachable: {exc}") from exc
                logger.warning(
                    "Storage not reachable (attempt %d/%d): %s", attempt, attempts, exc
                )
                time.sleep(self.config.storage_connect_delay)

        self._client = client
        self._ensure_bucket()
        logger.info("Object storage initialized with bucket '%s'", self.bucket)
        return self

    def _ensure_bucket(self) -> None:
        try:
            self._client.head_bucket(Bucket=self.bucket)
            logger.info("Bucket '%s' already exists", self.bucket)
            return
        except ClientError as exc:
            if not _is_missing(exc):
                raise StorageError(f"Error checking bucket: {exc}") from exc

        self._client.create_bucket(Bucket=self.bucket)
        logger.info("Bucket '%s' created", self.bucket)

        policy = {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"AWS": ["*"]},
                    "Action": ["s3:GetObject"],
                    "Resource": [
                        f"arn:aws:s3:::{self.bucket}/{folder}/*" for folder in PUBLIC_FOLDERS
                    ],
                }
            ],
        }
        try:
            self._client.put_bucket_policy(Bucket=self.bucket, Policy=json.dumps(policy))
            logger.info("Bucket policy set for public media access")
        except ClientError as exc:
            logger.warning("Could not set bucket policy (not critical): %s", exc)

    def close(self) -> None:
        if self._client is not None:
            close = getattr(self._client, "close", None)
            if callable(close):
                close()
            self._client = None

    @property
    def is_ready(self) -> bool:
        return self._client is not None

    def ensure_ready(self) -> None:
        if self._client is None:
            raise StorageUnavailableError()

    @property
    def client(self):
        self.ensure_ready()
        return self._client

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------
    def build_public_url(self, key: str) -> str:
        return f"{self.public_url}/{self.bucket}/{key}"

    def upload(
        self,
        content: bytes,
        original_name: str,
        content_type: str,
        folder: str = "uploads",
    ) -> Dict[str, Any]:
        extension = PurePosixPath(original_name or "").suffix.lstrip(".").lower()
        key = f"{folder}/{uuid.uuid4()}" + (f".{extension}" if extension else "")

        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
                CacheControl=CACHE_CONTROL,
                Metadata={
                    # S3 metadata must be ASCII
                    "original-name": (original_name or "").encode("ascii", "ignore").decode(),
                    "upload-date": datetime.now(timezone.utc).isoformat(),
                },
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Error uploading %s: %s", original_name, exc)
            raise StorageError("Failed to upload file") from exc

        url = self.build_public_url(key)
        logger.info("Uploaded %s -> %s", original_name, key)
        return {
            "fileName": key,
            "originalName": original_name,
            "size": len(content),
            "mimetype": content_type,
            "url": url,
            "bucket": self.bucket,
        }

    def exists(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as exc:
            if _is_missing(exc):
                return False
            raise StorageError(f"Error checking {key}: {exc}") from exc

    def delete(self, key: str) -> Dict[str, Any]:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Error deleting %s: %s", key, exc)
            raise StorageError(f"Failed to delete {key}") from exc
        logger.info("Deleted %s", key)
        return {"success": True, "fileName": key}

    def stat(self, key: str) -> Dict[str, Any]:
        try:
            head = self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _is_missing(exc):
                raise FileNotFoundInStorageError(key) from exc
            raise StorageError(f"Error reading {key}: {exc}") from exc

        last_modified = head.get("LastModified")
        return {
            "fileName": key,
            "size": head.get("ContentLength"),
            "contentType": head.get("ContentType"),
            "etag": (head.get("ETag") or "").strip('"'),
            "lastModified": last_modified.isoformat() if last_modified else None,
            "metadata": head.get("Metadata", {}),
        }

    def list_files(self, folder: str = "", recursive: bool = False) -> List[Dict[str, Any]]:
        prefix = folder.strip("/")
        if prefix:
            prefix += "/"
        kwargs: Dict[str, Any] = {"Bucket": self.bucket, "Prefix": prefix}
        if not recursive:
            kwargs["Delimiter"] = "/"

        files: List[Dict[str, Any]] = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(**kwargs):
                for obj in page.get("Contents", []):
                    last_modified = obj.get("LastModified")
                    files.append(
                        {
                            "name": obj["Key"],
                            "size": obj.get("Size"),
                            "etag": (obj.get("ETag") or "").strip('"'),
                            "lastModified": last_modified.isoformat() if last_modified else None,
                        }
                    )
                for common in page.get("CommonPrefixes", []):
                    files.append({"prefix": common["Prefix"], "size": 0})
        except (BotoCoreError, ClientError) as exc:
            logger.error("Error listing %s: %s", prefix or "/", exc)
            raise StorageError("Failed to list files") from exc
        return files

    def get_file_url(self, key: str, expiry: int = 3600) -> str:
        if key.split("/", 1)[0] in PUBLIC_FOLDERS:
            return self.build_public_url(key)
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expiry,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError("Could not generate file URL") from exc

    def get_object(
        self, key: str, byte_range: Optional[Tuple[int, int]] = None
    ) -> Dict[str, Any]:
        """
        Return ``{"body", "size", "contentType"}`` with a streaming body.

        ``byte_range`` is an inclusive ``(start, end)`` pair.
        """
        kwargs: Dict[str, Any] = {"Bucket": self.bucket, "Key": key}
        if byte_range is not None:
            kwargs["Range"] = f"bytes={byte_range[0]}-{byte_range[1]}"
        try:
            response = self.client.get_object(**kwargs)
        except ClientError as exc:
            if _is_missing(exc):
                raise FileNotFoundInStorageError(key) from exc
            raise StorageError(f"Error reading {key}: {exc}") from exc

        return {
            "body": response["Body"],
            "size": response.get("ContentLength"),
            "contentType": response.get("ContentType"),
        }


def iter_body(body: BinaryIO, chunk_size: int = 64 * 1024):
    """Yield chunks from a botocore StreamingBody and close it afterwards."""
    try:
        while True:
            chunk = body.read(chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        body.close()
