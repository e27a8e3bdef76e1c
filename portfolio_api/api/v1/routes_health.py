# File: portfolio_api/api/v1/routes_health.py

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from portfolio_api.api.deps import get_settings_dep, get_storage
from portfolio_api.core.config import Settings
from portfolio_api.services.storage_service import ObjectStorage

router = APIRouter()


@router.get("/health", summary="Process health")
def health(
    config: Settings = Depends(get_settings_dep),
    storage: ObjectStorage = Depends(get_storage),
):
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": config.environment,
        "version": config.VERSION,
        "port": config.port,
        "storage": "ready" if storage.is_ready else "unavailable",
    }
