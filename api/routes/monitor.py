"""Score-host monitor API endpoints."""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from core.monitor import MonitorConfig, ServiceMonitor
from core.types import HealthStatus, LatencyColor, StatusColor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/monitor", tags=["monitor"])

MAX_NOTICES = 50

# Global monitor instance (initialized on first use, started by the app lifespan)
_monitor: ServiceMonitor | None = None

# User-facing notices raised by the monitor, newest last
_notices: deque[str] = deque(maxlen=MAX_NOTICES)


def get_notices() -> deque[str]:
    return _notices


def get_monitor() -> ServiceMonitor:
    """Get or initialize the monitor for SCORE_HOST_DOMAIN."""
    global _monitor
    if _monitor is None:
        _monitor = ServiceMonitor.from_config(MonitorConfig.from_env(), on_notice=_notices.append)
    return _monitor


def reset_monitor() -> None:
    """Forget the global monitor (after shutdown)."""
    global _monitor
    _monitor = None
    _notices.clear()


class MonitorViewResponse(BaseModel):
    """Monitor state plus derived display values."""

    domain: str
    base_url: str
    snapshot: Optional[dict[str, Any]] = None
    is_loading: bool
    is_action_in_flight: bool
    last_error: Optional[str] = None
    last_updated_at: Optional[datetime] = None
    latency_ms: int
    latency_color: LatencyColor
    health_status: HealthStatus
    status_label: str
    status_color: StatusColor


class MaintenanceRequest(BaseModel):
    active: bool
    password: Optional[str] = None  # falls back to SCORE_HOST_MAINTENANCE_PASSWORD


class NoticesResponse(BaseModel):
    notices: list[str]


def _view_response(monitor: ServiceMonitor) -> MonitorViewResponse:
    return MonitorViewResponse(**monitor.view().to_dict())


@router.get("", response_model=MonitorViewResponse)
async def get_status(monitor: ServiceMonitor = Depends(get_monitor)) -> MonitorViewResponse:
    """Current state of the monitored service. Does not trigger a poll."""
    return _view_response(monitor)


@router.post("/refresh", response_model=MonitorViewResponse)
async def refresh(monitor: ServiceMonitor = Depends(get_monitor)) -> MonitorViewResponse:
    """Poll immediately and return the updated state.

    Remote failures are reported through ``last_error``, not as HTTP errors.
    """
    await monitor.refresh()
    return _view_response(monitor)


@router.post("/maintenance", response_model=MonitorViewResponse)
async def set_maintenance(
    body: MaintenanceRequest,
    monitor: ServiceMonitor = Depends(get_monitor),
) -> MonitorViewResponse:
    """Toggle maintenance mode on the monitored service.

    Raises:
        HTTPException: 409 with the notice raised by this request when the change was not applied.
    """
    raised: list[str] = []
    if await monitor.set_maintenance(body.password, body.active, on_notice=raised.append):
        return _view_response(monitor)

    detail = raised[-1] if raised else "Maintenance change was not applied"
    raise HTTPException(status_code=409, detail=detail)


@router.get("/notices", response_model=NoticesResponse)
async def list_notices(notices: deque[str] = Depends(get_notices)) -> NoticesResponse:
    """Recent user-facing notices, oldest first."""
    return NoticesResponse(notices=list(notices))
