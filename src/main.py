"""Construction Ledger API."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.database import get_db
from src.core.exceptions import StorageUnavailableError
from src.core.exceptions.handlers import register_exception_handlers
from src.core.logging import configure_logging
from src.modules.documents.router import router as documents_router
from src.modules.reports.router import router as reports_router

API_PREFIX = "/api/v1"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Construction Ledger up (env=%s)", settings.app_env)
    yield
    logger.info("Construction Ledger shutting down")


def create_app() -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Construction Ledger",
        description="Project documents, Thai VAT/WHT registers and cash flow",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/health")
    async def health_check(db: AsyncSession = Depends(get_db)):
        """Liveness plus a round trip to the database."""
        try:
            await db.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StorageUnavailableError("Database is unreachable") from exc
        return {"status": "healthy", "database": "ok"}

    for router in (documents_router, reports_router):
        app.include_router(router, prefix=API_PREFIX)

    return app


app = create_app()
