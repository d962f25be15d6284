"""Derived display values computed from a MonitorState.

All functions are pure and cheap; callers recompute them on every read.
"""

from __future__ import annotations

from core.types import HealthStatus, LatencyColor, MonitorState, StatusColor

GOOD_LATENCY_MS = 100
WARNING_LATENCY_MS = 250

STATUS_LABELS: dict[HealthStatus, str] = {
    HealthStatus.DOWN: "Unavailable",
    HealthStatus.UPDATING: "Updating…",
    HealthStatus.MAINTENANCE: "Maintenance",
    HealthStatus.OPERATIONAL: "Operational",
    # Shown before the first load completes
    HealthStatus.UNKNOWN: "Operational",
}

STATUS_COLORS: dict[HealthStatus, StatusColor] = {
    HealthStatus.DOWN: StatusColor.RED,
    HealthStatus.UPDATING: StatusColor.BLUE,
    HealthStatus.MAINTENANCE: StatusColor.YELLOW,
    HealthStatus.OPERATIONAL: StatusColor.EMERALD,
    HealthStatus.UNKNOWN: StatusColor.GRAY,
}


def latency_color(latency_ms: int) -> LatencyColor:
    """Bucket a latency sample; 0 means no valid measurement."""
    if latency_ms == 0:
        return LatencyColor.NEUTRAL
    if latency_ms < GOOD_LATENCY_MS:
        return LatencyColor.GOOD
    if latency_ms < WARNING_LATENCY_MS:
        return LatencyColor.WARNING
    return LatencyColor.BAD


def health_status(state: MonitorState) -> HealthStatus:
    """Resolve the health status, first matching rule wins.

    A failed poll or an errored service dominates every other flag, so a
    service that is both updating and errored reads as DOWN.
    """
    snapshot = state.last_snapshot
    service = snapshot.service if snapshot else None

    if state.last_error or (service is not None and service.errored):
        return HealthStatus.DOWN
    if service is None:
        return HealthStatus.UNKNOWN
    if service.on_update:
        return HealthStatus.UPDATING
    if service.maintenance:
        return HealthStatus.MAINTENANCE
    if service.ok:
        return HealthStatus.OPERATIONAL
    return HealthStatus.UNKNOWN


def status_label(status: HealthStatus) -> str:
    return STATUS_LABELS[status]


def status_color(status: HealthStatus) -> StatusColor:
    return STATUS_COLORS[status]
