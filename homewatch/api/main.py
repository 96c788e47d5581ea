from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from homewatch.orchestrator.scheduler import HealthScheduler

logger = logging.getLogger(__name__)


def create_app(scheduler: HealthScheduler | None = None) -> FastAPI:
    """Status API around a scheduler; builds one from the environment if none is given."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        active = scheduler
        if active is None:
            from config.settings import load_settings
            from homewatch.orchestrator.factory import build_scheduler

            settings = load_settings()
            logger.info("api_boot settings=%s", settings.redacted())
            active = build_scheduler(settings)
        app.state.scheduler = active
        active.start(run_immediately=active.settings.scheduler.run_on_start)
        try:
            yield
        finally:
            await active.stop()

    app = FastAPI(title="homewatch", lifespan=lifespan)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/status")
    async def status(request: Request) -> dict[str, Any]:
        active: HealthScheduler = request.app.state.scheduler
        report = active.last_report
        return {
            "phase": active.phase.value,
            "next_run_at": active.next_run_at.isoformat() if active.next_run_at else None,
            "last_report": report.model_dump(mode="json") if report else None,
        }

    @app.post("/checks/trigger")
    async def trigger_checks(request: Request) -> JSONResponse:
        active: HealthScheduler = request.app.state.scheduler
        started = active.trigger()
        return JSONResponse(status_code=202 if started else 409, content={"started": started})

    return app


app = create_app()
