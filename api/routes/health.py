"""Liveness endpoint for the API process itself."""

from __future__ import annotations

import time
from typing import Any

from fastapi import APIRouter

router = APIRouter(tags=["health"])

# Track API start time
_api_start_time = time.time()


@router.get("/health")
async def health() -> dict[str, Any]:
    """Report that the API is up.

    The monitored service's health lives under ``/monitor``.
    """
    return {
        "status": "ok",
        "uptime_seconds": int(time.time() - _api_start_time),
    }
