# File: portfolio_api/api/v1/routes_media.py

"""
Read-only views of the object store: stat, folder listing, and a streaming
proxy that honours HTTP Range requests so videos can seek.
"""

import re
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Header, Query, status
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from portfolio_api.api.deps import get_storage
from portfolio_api.core.exceptions import FileNotFoundInStorageError, PortfolioError
from portfolio_api.services.storage_service import CACHE_CONTROL, ObjectStorage, iter_body

router = APIRouter()

_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


class RangeNotSatisfiableError(PortfolioError):
    status_code = status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE
    error = "Range not satisfiable"


def parse_range(header: Optional[str], size: int) -> Optional[Tuple[int, int]]:
    """
    Parse a single ``bytes=start-end`` range into an inclusive pair.
    Returns None when there is no usable Range header.
    """
    if not header:
        return None
    match = _RANGE_RE.match(header.strip())
    if not match or match.groups() == ("", ""):
        return None

    start_raw, end_raw = match.groups()
    if start_raw == "":
        # suffix range: last N bytes
        length = int(end_raw)
        start, end = max(size - length, 0), size - 1
    else:
        start = int(start_raw)
        end = int(end_raw) if end_raw else size - 1

    end = min(end, size - 1)
    if start > end or start >= size:
        raise RangeNotSatisfiableError(f"Requested range {header} exceeds {size} bytes")
    return start, end


@router.get("/info/{key:path}", summary="Object metadata")
def media_info(key: str, storage: ObjectStorage = Depends(get_storage)):
    return {"file": storage.stat(key)}


@router.get("/list", summary="List objects under a folder")
def media_list(
    folder: str = Query("", max_length=200),
    recursive: bool = False,
    storage: ObjectStorage = Depends(get_storage),
):
    files = storage.list_files(folder, recursive=recursive)
    return {"folder": folder, "files": files, "count": len(files)}


@router.get("/file/{bucket}/{key:path}", summary="Stream a media object")
async def media_file(
    bucket: str,
    key: str,
    range_header: Optional[str] = Header(None, alias="range"),
    storage: ObjectStorage = Depends(get_storage),
):
    if bucket != storage.bucket:
        raise FileNotFoundInStorageError(f"{bucket}/{key}")

    info = await run_in_threadpool(storage.stat, key)
    size = info["size"] or 0
    byte_range = parse_range(range_header, size)

    obj = await run_in_threadpool(storage.get_object, key, byte_range)
    headers = {
        "Accept-Ranges": "bytes",
        "Cache-Control": CACHE_CONTROL,
        "Cross-Origin-Resource-Policy": "cross-origin",
    }

    if byte_range is None:
        headers["Content-Length"] = str(size)
        status_code = status.HTTP_200_OK
    else:
        start, end = byte_range
        headers["Content-Range"] = f"bytes {start}-{end}/{size}"
        headers["Content-Length"] = str(end - start + 1)
        status_code = status.HTTP_206_PARTIAL_CONTENT

    return StreamingResponse(
        iter_body(obj["body"]),
        status_code=status_code,
        media_type=info.get("contentType") or "application/octet-stream",
        headers=headers,
    )
