"""Control API application, lifespan wiring and the agent process entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.agent import StartupError, build_default_agent
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    agent = build_default_agent()
    agent.start()
    try:
        yield
    finally:
        agent.stop()
        build_default_agent.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Edge Sensor Agent",
        description="Samples a local sensor, forwards telemetry to the gateway and accepts live configuration.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app


app = create_app()


def run() -> None:
    """Process entry point: validate startup parameters, then serve the control API."""
    settings = get_settings()
    try:
        build_default_agent()
    except StartupError as exc:
        logger.error("Cannot start agent: %s", exc)
        raise SystemExit(1) from exc
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
