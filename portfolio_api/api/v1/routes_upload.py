# File: portfolio_api/api/v1/routes_upload.py

"""
Upload endpoints (admin only, except URL lookup).

Each upload is type-checked and size-checked before anything reaches object
storage, then recorded in the file registry so it can later be deleted by
bare filename.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, File, Query, UploadFile

from portfolio_api.api.deps import get_settings_dep, get_storage, get_store, require_admin
from portfolio_api.core.config import Settings
from portfolio_api.core.exceptions import (
    FileNotFoundInStorageError,
    ValidationFailedError,
)
from portfolio_api.db.store import JsonRecordStore
from portfolio_api.services.storage_service import PUBLIC_FOLDERS, ObjectStorage
from portfolio_api.services.upload_service import (
    folder_for,
    read_limited,
    size_limit_for,
    store_upload,
    validate_upload,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _resolve_key(file_name: str, store: JsonRecordStore) -> str:
    # a value containing "/" is already a storage key
    if "/" in file_name:
        return file_name
    key = store.resolve_file_key(file_name)
    if key is None:
        raise FileNotFoundInStorageError(file_name)
    return key


async def _upload_single(
    file: UploadFile,
    folder: str,
    label: str,
    storage: ObjectStorage,
    store: JsonRecordStore,
    config: Settings,
) -> Dict[str, Any]:
    if not file.filename:
        raise ValidationFailedError(f"Please select a {label} file to upload")
    content_type = validate_upload(file, folder)
    storage.ensure_ready()
    result = await store_upload(
        file, folder, storage=storage, store=store, config=config, content_type=content_type
    )
    return {"message": f"{label.capitalize()} uploaded successfully", "file": result}


@router.post("/image", summary="Upload an image (admin)")
async def upload_image(
    image: UploadFile = File(...),
    storage: ObjectStorage = Depends(get_storage),
    store: JsonRecordStore = Depends(get_store),
    config: Settings = Depends(get_settings_dep),
    admin: Dict[str, Any] = Depends(require_admin),
):
    return await _upload_single(image, "images", "image", storage, store, config)


@router.post("/video", summary="Upload a video (admin)")
async def upload_video(
    video: UploadFile = File(...),
    storage: ObjectStorage = Depends(get_storage),
    store: JsonRecordStore = Depends(get_store),
    config: Settings = Depends(get_settings_dep),
    admin: Dict[str, Any] = Depends(require_admin),
):
    return await _upload_single(video, "videos", "video", storage, store, config)


@router.post("/document", summary="Upload a document (admin)")
async def upload_document(
    document: UploadFile = File(...),
    storage: ObjectStorage = Depends(get_storage),
    store: JsonRecordStore = Depends(get_store),
    config: Settings = Depends(get_settings_dep),
    admin: Dict[str, Any] = Depends(require_admin),
):
    return await _upload_single(document, "documents", "document", storage, store, config)


@router.post("/multiple", summary="Upload several files at once (admin)")
async def upload_multiple(
    files: List[UploadFile] = File(...),
    storage: ObjectStorage = Depends(get_storage),
    store: JsonRecordStore = Depends(get_store),
    config: Settings = Depends(get_settings_dep),
    admin: Dict[str, Any] = Depends(require_admin),
):
    if not files:
        raise ValidationFailedError("Please select files to upload")
    if len(files) > config.max_upload_files:
        raise ValidationFailedError(
            f"Maximum {config.max_upload_files} files allowed", details={"count": len(files)}
        )

    # type-check and read every part first: one bad file rejects the whole batch
    checked = [(file, validate_upload(file, "multiple")) for file in files]
    storage.ensure_ready()

    parts = []
    for file, content_type in checked:
        folder = folder_for(content_type)
        content = await read_limited(file, size_limit_for(folder, config))
        parts.append((file, folder, content_type, content))

    results = []
    for file, folder, content_type, content in parts:
        results.append(
            await store_upload(
                file,
                folder,
                storage=storage,
                store=store,
                config=config,
                content_type=content_type,
                content=content,
            )
        )

    return {"message": f"{len(results)} files uploaded successfully", "files": results}


@router.delete("/{file_name:path}", summary="Delete an uploaded file (admin)")
def delete_upload(
    file_name: str,
    storage: ObjectStorage = Depends(get_storage),
    store: JsonRecordStore = Depends(get_store),
    admin: Dict[str, Any] = Depends(require_admin),
):
    key = _resolve_key(file_name, store)
    if not storage.exists(key):
        store.forget_file(key.rsplit("/", 1)[-1])
        raise FileNotFoundInStorageError(file_name)

    storage.delete(key)
    store.forget_file(key.rsplit("/", 1)[-1])
    logger.info("File %s deleted by %s", key, admin["username"])
    return {"message": "File deleted successfully", "fileName": key}


@router.get("/url/{file_name:path}", summary="Public or presigned URL for a file")
def get_upload_url(
    file_name: str,
    expiry: int = Query(3600, ge=1, le=7 * 24 * 3600),
    storage: ObjectStorage = Depends(get_storage),
    store: JsonRecordStore = Depends(get_store),
):
    key = _resolve_key(file_name, store)
    url = storage.get_file_url(key, expiry)
    is_public = key.split("/", 1)[0] in PUBLIC_FOLDERS
    return {"url": url, "fileName": key, "expiresIn": None if is_public else expiry}


@router.get("/info/{file_name:path}", summary="Object metadata (admin)")
def get_upload_info(
    file_name: str,
    storage: ObjectStorage = Depends(get_storage),
    store: JsonRecordStore = Depends(get_store),
    admin: Dict[str, Any] = Depends(require_admin),
):
    key = _resolve_key(file_name, store)
    return {"file": storage.stat(key)}
