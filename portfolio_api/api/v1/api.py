from fastapi import APIRouter

from portfolio_api.api.v1.routes_auth import router as auth_router
from portfolio_api.api.v1.routes_project import router as project_router
from portfolio_api.api.v1.routes_settings import router as settings_router
from portfolio_api.api.v1.routes_upload import router as upload_router
from portfolio_api.api.v1.routes_media import router as media_router
from portfolio_api.api.v1.routes_health import router as health_router


api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(project_router, prefix="/projects", tags=["projects"])
api_router.include_router(settings_router, prefix="/settings", tags=["settings"])
api_router.include_router(upload_router, prefix="/upload", tags=["upload"])
api_router.include_router(media_router, prefix="/media", tags=["media"])

api_router.include_router(health_router, tags=["health"])
