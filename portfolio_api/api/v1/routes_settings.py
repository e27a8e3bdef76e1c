# File: portfolio_api/api/v1/routes_settings.py

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from portfolio_api.api.deps import get_store, require_admin
from portfolio_api.db.store import JsonRecordStore
from portfolio_api.schemas.settings import ContactSettings, SettingsUpdate, StudioSettings

logger = logging.getLogger(__name__)

router = APIRouter()


def _studio_view(settings: Dict[str, Any]) -> Dict[str, Any]:
    studio = settings.get("studio") or {}
    return {
        "aboutText": studio.get("aboutText", ""),
        "clients": studio.get("clients", []),
        "services": studio.get("services", []),
        "recognitions": studio.get("recognitions", []),
    }


def _contact_view(settings: Dict[str, Any]) -> Dict[str, Any]:
    contact = settings.get("contact") or {}
    return {"buttons": contact.get("buttons", [])}


@router.get("", summary="All settings")
def get_settings(store: JsonRecordStore = Depends(get_store)):
    return {"settings": store.get_settings()}


@router.get("/studio", summary="Studio page settings")
def get_studio_settings(store: JsonRecordStore = Depends(get_store)):
    return {"studio": _studio_view(store.get_settings())}


@router.get("/contact", summary="Contact buttons")
def get_contact_settings(store: JsonRecordStore = Depends(get_store)):
    return {"contact": _contact_view(store.get_settings())}


@router.put("/studio", summary="Update studio settings (admin)")
def update_studio_settings(
    payload: StudioSettings,
    store: JsonRecordStore = Depends(get_store),
    admin: Dict[str, Any] = Depends(require_admin),
):
    current = store.get_settings().get("studio") or {}
    updated = store.update_settings(
        {"studio": {**current, **payload.model_dump(exclude_unset=True)}}
    )
    logger.info("Studio settings updated by %s", admin["username"])
    return {"message": "Studio settings updated successfully", "studio": _studio_view(updated)}


@router.put("/contact", summary="Update contact buttons (admin)")
def update_contact_settings(
    payload: ContactSettings,
    store: JsonRecordStore = Depends(get_store),
    admin: Dict[str, Any] = Depends(require_admin),
):
    current = store.get_settings().get("contact") or {}
    updated = store.update_settings({"contact": {**current, **payload.model_dump(mode="json")}})
    logger.info("Contact settings updated by %s", admin["username"])
    return {"message": "Contact settings updated successfully", "contact": _contact_view(updated)}


@router.put("", summary="Update settings (admin)")
def update_settings(
    payload: SettingsUpdate,
    store: JsonRecordStore = Depends(get_store),
    admin: Dict[str, Any] = Depends(require_admin),
):
    updated = store.update_settings(payload.model_dump(mode="json", exclude_unset=True))
    logger.info("Settings updated by %s", admin["username"])
    return {"message": "Settings updated successfully", "settings": updated}
