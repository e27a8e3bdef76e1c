# File: portfolio_api/services/upload_service.py

"""
Upload policy: which MIME types go where, and how big they may be.
"""

import mimetypes
from pathlib import PurePosixPath
from typing import Dict, Optional

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from portfolio_api.core.config import Settings
from portfolio_api.core.exceptions import InvalidFileTypeError, PayloadTooLargeError
from portfolio_api.db.store import JsonRecordStore
from portfolio_api.services.storage_service import ObjectStorage


IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
VIDEO_TYPES = ("video/mp4", "video/webm", "video/quicktime")
DOCUMENT_TYPES = ("application/pdf", "application/zip", "application/x-zip-compressed")

ALLOWED_TYPES = IMAGE_TYPES + VIDEO_TYPES + DOCUMENT_TYPES

FOLDER_TYPES: Dict[str, tuple] = {
    "images": IMAGE_TYPES,
    "videos": VIDEO_TYPES,
    "documents": IMAGE_TYPES + DOCUMENT_TYPES,
    "multiple": ALLOWED_TYPES,
}

_GENERIC_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


def sniff_content_type(file: UploadFile) -> Optional[str]:
    """
    Use the part's declared content-type, falling back to the file extension
    when the client sent nothing useful.
    """
    declared = (file.content_type or "").split(";")[0].strip().lower()
    if declared not in _GENERIC_TYPES:
        return declared
    guessed, _ = mimetypes.guess_type(file.filename or "")
    return guessed or declared or None


def folder_for(content_type: str) -> str:
    if content_type in IMAGE_TYPES:
        return "images"
    if content_type in VIDEO_TYPES:
        return "videos"
    return "documents"


def size_limit_for(folder: str, config: Settings) -> int:
    if folder == "videos":
        return config.max_video_upload_size
    return config.max_upload_size


def validate_upload(file: UploadFile, folder: str) -> str:
    content_type = sniff_content_type(file)
    allowed = FOLDER_TYPES[folder]
    if content_type not in allowed:
        raise InvalidFileTypeError(content_type, list(allowed))
    return content_type


async def read_limited(file: UploadFile, limit: int) -> bytes:
    content = await file.read(limit + 1)
    if len(content) > limit:
        raise PayloadTooLargeError(limit)
    return content


async def store_upload(
    file: UploadFile,
    folder: str,
    *,
    storage: ObjectStorage,
    store: JsonRecordStore,
    config: Settings,
    content_type: Optional[str] = None,
    content: Optional[bytes] = None,
) -> Dict:
    """
    Validate, upload and register one file. Nothing is written to storage
    unless the type and size checks pass. Callers that already read the part
    pass its bytes as ``content``.
    """
    content_type = content_type or validate_upload(file, folder)
    if content is None:
        content = await read_limited(file, size_limit_for(folder, config))

    result = await run_in_threadpool(
        storage.upload, content, file.filename or "upload", content_type, folder
    )
    file_name = PurePosixPath(result["fileName"]).name
    await run_in_threadpool(store.register_file, file_name, result["fileName"])
    result["key"] = result["fileName"]
    return result
