"""Application factory. Run with `uvicorn soil.main:create_app --factory`."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings
from .errors import StorageUnavailableError, register_exception_handlers
from .init import deinit, init
from .logging_config import setup_logging
from .mongo.client import MongoStore
from .routes import auth, financial, inventory, purchase_requests, sales
from .services.identity import current_identity

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init(app)
    yield
    await deinit(app)


def create_app(settings: Optional[Settings] = None, store: Optional[MongoStore] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level, settings.log_dir)

    app = FastAPI(title="Soil API", lifespan=lifespan)
    app.state.settings = settings
    app.state.mongo_store = store
    app.state.owns_mongo_store = False

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    guard = [Depends(current_identity)] if settings.require_auth else []
    app.include_router(auth.router)
    app.include_router(inventory.router)
    app.include_router(financial.router, dependencies=guard)
    app.include_router(sales.router, dependencies=guard)
    app.include_router(purchase_requests.router, dependencies=guard)

    @app.get("/health", tags=["health"])
    async def health(request: Request):
        try:
            await request.app.state.mongo_store.ping()
        except Exception as exc:
            logger.warning(f"Health check failed: {exc}")
            raise StorageUnavailableError() from exc
        return {"status": "ok"}

    logger.info(f"API configured (require_auth={settings.require_auth})")
    return app

