"""FastAPI application for Tractionboard.

Wires together the persistence layer, services, the live-update hub and the
API routes.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tractionboard.api.websocket import DashboardHub
from tractionboard.config import Settings
from tractionboard.db.sqlite import SQLiteDB
from tractionboard.services import Repositories
from tractionboard.services.dashboard import DashboardService
from tractionboard.services.importer import DashboardImporter

settings = Settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler.

    Opens the database and builds repositories and services on startup,
    closes the connection on shutdown.
    """
    data_dir = Path(settings.DATABASE_DIR)
    data_dir.mkdir(parents=True, exist_ok=True)

    db_path = str(data_dir / "tractionboard.db")
    db = SQLiteDB(db_path)

    repos = Repositories.from_db(db)
    dashboard_service = DashboardService(repos, snapshot_key=settings.SNAPSHOT_KEY)

    # Store on app.state for access in routes
    app.state.settings = settings
    app.state.db = db
    app.state.repos = repos
    app.state.dashboard_service = dashboard_service
    app.state.importer = DashboardImporter(db, repos, dashboard_service)
    app.state.hub = DashboardHub()

    logger.info("Tractionboard started with database %s", db_path)

    yield

    db.close()


app = FastAPI(
    title="Tractionboard",
    description="Goals, rocks, issues, to-dos, scorecard and VTO dashboard",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes and WebSocket
from tractionboard.api.routes import router as api_router
from tractionboard.api.websocket import router as ws_router

app.include_router(api_router)
app.include_router(ws_router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}
