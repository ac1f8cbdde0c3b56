"""
FastAPI application — local study planner API.
Runs on http://127.0.0.1:8770 by default.

Per-app state (the schedule store) lives on app.state so that each call to
create_app() produces a fully independent instance with no shared
module-level globals. Schedulers are built per request.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import config
from ..logger import setup_logger
from ..storage.schedule_store import ScheduleStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan: per-app state
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    config.data_dir.mkdir(parents=True, exist_ok=True)
    db_path = config.data_dir / config.schedule_db
    app.state.store = ScheduleStore(db_path)
    logger.info("Schedule store ready at %s", db_path)

    yield

    logger.info("Planner API shutting down")


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app() -> FastAPI:
    setup_logger(
        level=config.log_level,
        log_dir=config.data_dir / "logs" if config.log_to_file else None,
    )

    app = FastAPI(
        title="Smart Study Planner",
        description="Local scheduling API: allocates study tasks to productive time slots",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from .routers import schedule, settings

    app.include_router(schedule.router)
    app.include_router(settings.router)

    @app.get("/health")
    def health():
        return {"status": "ok", "version": "0.1.0"}

    return app


app = create_app()
