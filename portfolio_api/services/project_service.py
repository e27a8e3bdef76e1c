# File: portfolio_api/services/project_service.py

import logging
from pathlib import PurePosixPath
from typing import Any, Dict, Iterable, List, Optional, Set
from urllib.parse import urlparse

from portfolio_api.core.exceptions import PortfolioError
from portfolio_api.db.store import JsonRecordStore
from portfolio_api.services.storage_service import ObjectStorage

logger = logging.getLogger(__name__)


# -----------------------------
# LISTING
# -----------------------------
def sort_projects(projects: List[Dict[str, Any]], tie_breaker: str = "createdAt") -> List[Dict[str, Any]]:
    """
    Order by ``sortOrder`` ascending; equal sort orders put the most recent
    ``tie_breaker`` timestamp first.
    """
    by_recency = sorted(projects, key=lambda p: p.get(tie_breaker) or "", reverse=True)
    return sorted(by_recency, key=lambda p: p.get("sortOrder") or 0)


def filter_projects(
    projects: Iterable[Dict[str, Any]],
    *,
    status: Optional[str] = "published",
    category: Optional[str] = None,
    featured: Optional[bool] = None,
) -> List[Dict[str, Any]]:
    result = list(projects)
    if status and status != "all":
        result = [p for p in result if p.get("status") == status]
    if category:
        result = [p for p in result if p.get("category") == category]
    if featured is not None:
        result = [p for p in result if bool(p.get("featured")) == featured]
    return result


def paginate(
    items: List[Dict[str, Any]], offset: int = 0, limit: Optional[int] = None
) -> Dict[str, Any]:
    total = len(items)
    end = offset + limit if limit is not None else total
    return {
        "items": items[offset:end],
        "pagination": {
            "total": total,
            "offset": offset,
            "limit": limit,
            "hasMore": end < total,
        },
    }


# -----------------------------
# STORAGE CLEANUP
# -----------------------------
def _key_from_url(url: str, storage: ObjectStorage) -> Optional[str]:
    """Return the bucket-relative key if ``url`` points into our bucket."""
    path = urlparse(url).path
    marker = f"/{storage.bucket}/"
    if marker not in path:
        return None
    return path.split(marker, 1)[1] or None


def collect_storage_keys(
    project: Dict[str, Any], store: JsonRecordStore, storage: ObjectStorage
) -> Set[str]:
    """
    Every storage key a project references: media entries (explicit ``key``
    first, then the registry by filename, then the URL path), thumbnails and
    the legacy ``imageUrl``.
    """
    keys: Set[str] = set()

    def add_url(url: Optional[str]) -> None:
        if not url:
            return
        key = _key_from_url(url, storage)
        if key is None:
            return
        registered = store.resolve_file_key(PurePosixPath(key).name)
        keys.add(registered or key)

    for media in project.get("mediaFiles") or []:
        if media.get("key"):
            keys.add(media["key"])
        else:
            add_url(media.get("url"))
        add_url(media.get("thumbnail"))

    add_url(project.get("imageUrl"))
    return keys


def cleanup_project_files(
    project: Dict[str, Any], store: JsonRecordStore, storage: ObjectStorage
) -> List[str]:
    """
    Best-effort delete of a removed project's objects. Failures are logged
    and skipped; the project record is already gone either way.
    """
    if not storage.is_ready:
        logger.warning(
            "Storage not initialized, skipping file cleanup for project %s", project.get("id")
        )
        return []

    deleted = []
    for key in sorted(collect_storage_keys(project, store, storage)):
        try:
            storage.delete(key)
        except PortfolioError as exc:
            logger.warning("Error deleting file %s of project %s: %s", key, project.get("id"), exc)
            continue
        store.forget_file(PurePosixPath(key).name)
        deleted.append(key)
    return deleted
