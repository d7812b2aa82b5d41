"""
FastAPI application factory.

Assembles the app, registers all routers and error handlers, builds
the document store, and wires up lifecycle events.  Database schema is
managed by Alembic — NOT create_all.
"""

import logging

from fastapi import FastAPI

from caredata.controllers.admin_controller import router as admin_router
from caredata.controllers.auth_controller import router as auth_router
from caredata.controllers.case_note_controller import router as case_note_router
from caredata.controllers.client_controller import router as client_router
from caredata.controllers.client_service_controller import router as client_service_router
from caredata.controllers.company_controller import router as company_router
from caredata.controllers.document_controller import router as document_router
from caredata.controllers.master_data_controller import router as master_data_router
from caredata.core.config import settings
from caredata.core.database import engine
from caredata.core.errors import register_exception_handlers
from caredata.models import Base  # noqa: F401 — ensures all models are registered
from caredata.services.storage_service import DocumentStore, LocalDocumentStore

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(document_store: DocumentStore | None = None) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.document_store = document_store or LocalDocumentStore(
        settings.DOCUMENTS_ROOT_PATH
    )

    register_exception_handlers(app)

    # ── Register routers ─────────────────────────────────────────────
    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(company_router)
    app.include_router(master_data_router)
    app.include_router(client_router)
    app.include_router(client_service_router)
    app.include_router(document_router)
    app.include_router(case_note_router)

    # ── Startup / Shutdown ───────────────────────────────────────────
    @app.on_event("startup")
    async def on_startup() -> None:
        """
        NOTE: Database schema is managed by Alembic migrations.
        Run `alembic upgrade head` before starting the app.
        """
        logger.info(
            "%s started (documents under %s)",
            settings.APP_NAME,
            settings.DOCUMENTS_ROOT_PATH,
        )

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await engine.dispose()
        logger.info("Database engine disposed.")

    # ── Health check ─────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
