"""FastAPI application exposing the score-host monitor.

This module provides a small HTTP API for a presentation layer:
- GET /health - API liveness
- GET /monitor - Monitor state with derived status, label and colors
- POST /monitor/refresh - Poll the service now
- POST /monitor/maintenance - Toggle maintenance mode
- GET /monitor/notices - Recent user-facing notices

Requirements:
- SCORE_HOST_DOMAIN must be set in environment
- No authentication (local network only)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from api.routes import health, monitor

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start polling on startup; stop and close the client on shutdown."""
    service_monitor = monitor.get_monitor()
    service_monitor.start()
    try:
        yield
    finally:
        await service_monitor.aclose()
        monitor.reset_monitor()


app = FastAPI(
    title="Score-host Monitor API",
    description="Health, latency and maintenance control for a score-host service",
    version="1.0.0",
    lifespan=lifespan,
)
app.include_router(health.router)
app.include_router(monitor.router)
