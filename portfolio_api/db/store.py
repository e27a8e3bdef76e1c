# File: portfolio_api/db/store.py

"""
Flat-file record store.

The whole database is one JSON document:

    {"users": [...], "projects": [...], "settings": {...}, "files": {...}}

It is loaded into memory by ``init()``/``read()`` and rewritten wholesale by
``write()`` after every mutation. Lookups that miss return ``None``; turning
that into a 404 is the caller's job.
"""

import copy
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


DEFAULT_SETTINGS: Dict[str, Any] = {
    "siteTitle": "My 3D Portfolio",
    "siteDescription": "Welcome to my creative portfolio",
    "contactEmail": "contact@portfolio.com",
    "socialLinks": {
        "github": "",
        "linkedin": "",
        "twitter": "",
        "dribbble": "",
    },
    "studio": {
        "aboutText": "",
        "clients": [],
        "services": [],
        "recognitions": [],
    },
    "contact": {
        "buttons": [],
    },
}


def default_data() -> Dict[str, Any]:
    return {
        "users": [],
        "projects": [],
        "settings": copy.deepcopy(DEFAULT_SETTINGS),
        "files": {},
    }


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonRecordStore:
    """
    In-memory document backed by a JSON file.

    Mutations hold ``self._lock`` and flush to disk before returning, so a
    caller never sees a change that has not been written.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.data: Dict[str, Any] = default_data()
        self._lock = threading.RLock()
        self._initialized = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def init(self) -> "JsonRecordStore":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.read()
        self.write()
        self._initialized = True
        logger.info("Record store ready at %s", self.path)
        return self

    def close(self) -> None:
        if self._initialized:
            self.write()
            self._initialized = False
            logger.info("Record store closed")

    def read(self) -> Dict[str, Any]:
        with self._lock:
            if not self.path.exists():
                self.data = default_data()
                return self.data

            raw = self.path.read_text(encoding="utf-8")
            loaded = json.loads(raw) if raw.strip() else {}

            data = default_data()
            if isinstance(loaded, dict):
                data.update({k: v for k, v in loaded.items() if v is not None})
            self.data = data
            return self.data

    def write(self) -> None:
        with self._lock:
            payload = json.dumps(self.data, indent=2, ensure_ascii=False)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(payload, encoding="utf-8")

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def get_users(self) -> List[Dict[str, Any]]:
        return self.data["users"]

    def get_user_by_id(self, user_id: Any) -> Optional[Dict[str, Any]]:
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            return None
        return next((u for u in self.get_users() if u.get("id") == user_id), None)

    def get_user_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        return next((u for u in self.get_users() if u.get("username") == username), None)

    def add_user(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            users = self.get_users()
            now = utc_now_iso()
            user = {
                "id": max((u["id"] for u in users), default=0) + 1,
                **user_data,
                "createdAt": now,
                "updatedAt": now,
            }
            users.append(user)
            self.write()
            return user

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------
    def get_projects(self) -> List[Dict[str, Any]]:
        return list(self.data["projects"])

    def get_project_by_id(self, project_id: int) -> Optional[Dict[str, Any]]:
        return next((p for p in self.data["projects"] if p.get("id") == project_id), None)

    def add_project(self, project_data: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            projects = self.data["projects"]
            now = utc_now_iso()
            project = {
                "id": max((p["id"] for p in projects), default=0) + 1,
                **project_data,
                "createdAt": now,
                "updatedAt": now,
            }
            if not project.get("releaseDate"):
                project["releaseDate"] = now
            projects.append(project)
            self.write()
            return project

    def update_project(self, project_id: int, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._lock:
            projects = self.data["projects"]
            for index, project in enumerate(projects):
                if project.get("id") == project_id:
                    merged = {
                        **project,
                        **update_data,
                        "id": project["id"],
                        "createdAt": project.get("createdAt"),
                        "updatedAt": utc_now_iso(),
                    }
                    projects[index] = merged
                    self.write()
                    return merged
            return None

    def delete_project(self, project_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            projects = self.data["projects"]
            for index, project in enumerate(projects):
                if project.get("id") == project_id:
                    removed = projects.pop(index)
                    self.write()
                    return removed
            return None

    def get_categories(self, status: Optional[str] = "published") -> List[str]:
        categories = {
            p.get("category")
            for p in self.data["projects"]
            if p.get("category") and (status is None or p.get("status") == status)
        }
        return sorted(categories)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    def get_settings(self) -> Dict[str, Any]:
        return self.data["settings"]

    def update_settings(self, new_settings: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            self.data["settings"] = {**self.data["settings"], **new_settings}
            self.write()
            return self.data["settings"]

    # ------------------------------------------------------------------
    # File registry (filename -> storage key)
    # ------------------------------------------------------------------
    def register_file(self, file_name: str, key: str) -> None:
        with self._lock:
            self.data["files"][file_name] = key
            self.write()

    def resolve_file_key(self, file_name: str) -> Optional[str]:
        return self.data["files"].get(file_name)

    def forget_file(self, file_name: str) -> Optional[str]:
        with self._lock:
            key = self.data["files"].pop(file_name, None)
            if key is not None:
                self.write()
            return key
