from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from anchor_blog.api.error_handling import register_exception_handlers
from anchor_blog.api.routers.admin import router as admin_router
from anchor_blog.api.routers.auth import router as auth_router
from anchor_blog.api.routers.posts import router as posts_router
from anchor_blog.api.routers.users import router as users_router
from anchor_blog.infrastructure.db.engine import get_engine, init_schema
from anchor_blog.shared.config import get_settings
from anchor_blog.shared.logging import configure_logging


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    settings = get_settings()
    if settings.postgres_dsn:
        engine = get_engine(
            settings.postgres_dsn,
            statement_timeout_ms=settings.db_statement_timeout_ms,
            pool_timeout_seconds=settings.db_pool_timeout_seconds,
        )
        init_schema(engine)
        logger.info("main: schema ready")
    else:
        logger.warning("main: POSTGRES_DSN not set, skipping schema bootstrap")
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    application = FastAPI(title="Anchor Blog API", lifespan=lifespan)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(application)
    application.include_router(auth_router)
    application.include_router(users_router)
    application.include_router(admin_router)
    application.include_router(posts_router)

    @application.get("/health")
    def health():
        return {"status": "ok"}

    return application


app = create_app()
