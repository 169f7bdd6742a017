"""FastAPI app serving health reports and production events."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from stockline import __version__
from stockline.api.event_routes import router as event_router
from stockline.api.report_routes import router as report_router
from stockline.db import init_db
from stockline.utils.logger import get_logger

logger = get_logger("stockline.api.server")


@asynccontextmanager
async def _lifespan(app: FastAPI, database_url: Optional[str] = None):
    init_db(database_url)
    logger.info("api.lifespan.started")
    yield
    logger.info("api.lifespan.stopped")


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """Create the app. The database is initialised on startup (database_url overrides DATABASE_URL)."""
    app = FastAPI(
        title="Stockline",
        version=__version__,
        lifespan=lambda app: _lifespan(app, database_url=database_url),
    )
    app.include_router(report_router)
    app.include_router(event_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
