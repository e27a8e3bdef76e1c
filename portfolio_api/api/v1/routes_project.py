# File: portfolio_api/api/v1/routes_project.py

import logging
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from portfolio_api.api.deps import (
    get_optional_user,
    get_storage,
    get_store,
    is_admin,
    require_admin,
)
from portfolio_api.core.exceptions import ProjectNotFoundError
from portfolio_api.db.store import JsonRecordStore
from portfolio_api.schemas.project import (
    CategoryListResponse,
    ProjectAdminListResponse,
    ProjectCreate,
    ProjectListResponse,
    ProjectMessageResponse,
    ProjectResponse,
    ProjectUpdate,
)
from portfolio_api.services.project_service import (
    cleanup_project_files,
    filter_projects,
    paginate,
    sort_projects,
)
from portfolio_api.services.storage_service import ObjectStorage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ProjectListResponse, summary="List projects")
def list_projects(
    status_filter: Literal["all", "draft", "published", "archived"] = Query(
        "published", alias="status"
    ),
    category: Optional[str] = None,
    featured: Optional[bool] = None,
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    store: JsonRecordStore = Depends(get_store),
):
    """
    Public listing. ``status=all`` disables the status filter; results are
    ordered by sortOrder, newest first within the same sortOrder.
    """
    projects = filter_projects(
        store.get_projects(), status=status_filter, category=category, featured=featured
    )
    page = paginate(sort_projects(projects), offset=offset, limit=limit)
    return {"projects": page["items"], "pagination": page["pagination"]}


@router.get("/categories", response_model=CategoryListResponse, summary="Published categories")
def list_categories(store: JsonRecordStore = Depends(get_store)):
    return {"categories": store.get_categories()}


@router.get(
    "/admin/all",
    response_model=ProjectAdminListResponse,
    summary="All projects, every status (admin)",
)
def list_all_projects(
    store: JsonRecordStore = Depends(get_store),
    admin: Dict[str, Any] = Depends(require_admin),
):
    return {"projects": sort_projects(store.get_projects(), tie_breaker="updatedAt")}


@router.get("/{project_id}", response_model=ProjectResponse, summary="Get one project")
def get_project(
    project_id: int,
    store: JsonRecordStore = Depends(get_store),
    claims: Optional[Dict[str, Any]] = Depends(get_optional_user),
):
    project = store.get_project_by_id(project_id)
    if not project:
        raise ProjectNotFoundError(project_id)

    # drafts and archived projects are visible to admins only
    if project.get("status") != "published" and not is_admin(claims, store):
        raise ProjectNotFoundError(project_id, "Project is not available")

    return {"project": project}


@router.post(
    "",
    response_model=ProjectMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create project (admin)",
)
def create_project(
    payload: ProjectCreate,
    store: JsonRecordStore = Depends(get_store),
    admin: Dict[str, Any] = Depends(require_admin),
):
    project = store.add_project(payload.model_dump(mode="json"))
    logger.info("Project %s created by %s", project["id"], admin["username"])
    return {"message": "Project created successfully", "project": project}


@router.put("/{project_id}", response_model=ProjectMessageResponse, summary="Update project (admin)")
def update_project(
    project_id: int,
    payload: ProjectUpdate,
    store: JsonRecordStore = Depends(get_store),
    admin: Dict[str, Any] = Depends(require_admin),
):
    changes = payload.model_dump(mode="json", exclude_unset=True)
    if changes.get("releaseDate") is None:
        changes.pop("releaseDate", None)

    project = store.update_project(project_id, changes)
    if project is None:
        raise ProjectNotFoundError(project_id)

    logger.info("Project %s updated by %s", project_id, admin["username"])
    return {"message": "Project updated successfully", "project": project}


@router.delete("/{project_id}", response_model=ProjectMessageResponse, summary="Delete project (admin)")
def delete_project(
    project_id: int,
    store: JsonRecordStore = Depends(get_store),
    storage: ObjectStorage = Depends(get_storage),
    admin: Dict[str, Any] = Depends(require_admin),
):
    project = store.delete_project(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)

    deleted = cleanup_project_files(project, store, storage)
    logger.info(
        "Project %s deleted by %s (%d file(s) removed)", project_id, admin["username"], len(deleted)
    )
    return {"message": "Project deleted successfully", "project": project}
