# portfolio_api/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from portfolio_api.core.config import Settings, settings as default_settings
from portfolio_api.core.exceptions import PortfolioError, register_exception_handlers
from portfolio_api.core.logging_config import setup_logging
from portfolio_api.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from portfolio_api.core.rate_limiter import build_limiter, enforce_rate_limit
from portfolio_api.api.v1.api import api_router
from portfolio_api.db.init_db import build_store, init_db
from portfolio_api.db.store import JsonRecordStore
from portfolio_api.services.storage_service import ObjectStorage

logger = logging.getLogger(__name__)


def create_application(
    config: Optional[Settings] = None,
    store: Optional[JsonRecordStore] = None,
    storage: Optional[ObjectStorage] = None,
) -> FastAPI:
    config = config or default_settings
    store = store or build_store(config)
    storage = storage or ObjectStorage(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s (%s)", config.PROJECT_NAME, config.environment)
        init_db(store, config)

        if config.enable_storage:
            try:
                storage.init()
            except PortfolioError as exc:
                # uploads answer 503 until storage comes back with a restart
                logger.warning("Object storage initialization failed, continuing without it: %s", exc)
        else:
            logger.info("Object storage disabled")

        yield

        storage.close()
        store.close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title=config.PROJECT_NAME,
        version=config.VERSION,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.store = store
    app.state.storage = storage

    register_exception_handlers(app, debug=config.is_development)

    # ---------- RATE LIMITING ----------
    app.state.limiter = build_limiter(config)

    # ---------- CORS ----------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.backend_cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Range", "Accept-Ranges"],
        expose_headers=["Content-Range", "Accept-Ranges", "Content-Length"],
    )

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # ---------- ROUTERS ----------
    app.include_router(
        api_router,
        prefix=config.api_prefix,
        dependencies=[Depends(enforce_rate_limit)],
    )

    # ---------- STATIC FILES ----------
    # Built frontend, served from the same origin in production
    if config.is_production and config.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=config.static_dir, html=True), name="static")
        logger.info("Serving static files from %s", config.static_dir)

    return app


setup_logging()
app = create_application()
