"""Shared dataclasses and enums for the score-host monitor."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from core.errors import SnapshotParseError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class HealthStatus(str, Enum):
    """Health of the monitored service, in display priority order."""

    DOWN = "down"
    UPDATING = "updating"
    MAINTENANCE = "maintenance"
    OPERATIONAL = "operational"
    UNKNOWN = "unknown"


class LatencyColor(str, Enum):
    """Display bucket for the measured round-trip latency."""

    NEUTRAL = "neutral"  # no valid measurement
    GOOD = "good"  # < 100ms
    WARNING = "warning"  # < 250ms
    BAD = "bad"


class StatusColor(str, Enum):
    """Display color for a HealthStatus."""

    RED = "red"
    BLUE = "blue"
    YELLOW = "yellow"
    EMERALD = "emerald"
    GRAY = "gray"


# ---------------------------------------------------------------------------
# Wire snapshot
# ---------------------------------------------------------------------------


def _section(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = payload.get(key)
    if not isinstance(section, Mapping):
        raise SnapshotParseError(f"Malformed status payload: missing '{key}' object")
    return section


@dataclass(frozen=True)
class HostStatus:
    """Health of the score-host layer itself."""

    ok: bool
    version: str


@dataclass(frozen=True)
class ServiceStatus:
    """Health of the named service behind score-host."""

    ok: bool
    name: str
    maintenance: bool
    errored: bool
    on_update: bool
    version: str


@dataclass(frozen=True)
class ServiceSnapshot:
    """One successful /status response."""

    host: HostStatus
    service: ServiceStatus

    @property
    def host_ok(self) -> bool:
        return self.host.ok

    @property
    def host_version(self) -> str:
        return self.host.version

    @classmethod
    def from_payload(cls, payload: Any) -> "ServiceSnapshot":
        """Build a snapshot from the decoded JSON body.

        Only the two top-level objects are required; missing scalar fields
        fall back to ``False`` / ``""``.

        Raises:
            SnapshotParseError: If the body is not an object or a section is missing.
        """
        if not isinstance(payload, Mapping):
            raise SnapshotParseError(
                f"Malformed status payload: expected object, got {type(payload).__name__}"
            )

        host = _section(payload, "score-host")
        service = _section(payload, "service")

        return cls(
            host=HostStatus(
                ok=bool(host.get("ok", False)),
                version=str(host.get("version") or ""),
            ),
            service=ServiceStatus(
                ok=bool(service.get("ok", False)),
                name=str(service.get("name") or ""),
                maintenance=bool(service.get("maintenance", False)),
                errored=bool(service.get("errored", False)),
                on_update=bool(service.get("onUpdate", False)),
                version=str(service.get("version") or ""),
            ),
        )

    def to_payload(self) -> dict[str, Any]:
        """Return the snapshot in its wire shape."""
        return {
            "score-host": {"ok": self.host.ok, "version": self.host.version},
            "service": {
                "ok": self.service.ok,
                "name": self.service.name,
                "maintenance": self.service.maintenance,
                "errored": self.service.errored,
                "onUpdate": self.service.on_update,
                "version": self.service.version,
            },
        }


# ---------------------------------------------------------------------------
# Monitor state
# ---------------------------------------------------------------------------


@dataclass
class MonitorState:
    """Mutable state owned by a single ServiceMonitor."""

    last_snapshot: Optional[ServiceSnapshot] = None
    is_loading: bool = False
    is_action_in_flight: bool = False
    last_error: Optional[str] = None
    last_updated_at: Optional[datetime] = None
    latency_ms: int = 0  # 0 = no valid measurement


@dataclass(frozen=True)
class MonitorView:
    """Read-only projection of a monitor handed to the presentation layer."""

    domain: str
    base_url: str
    state: MonitorState
    health_status: HealthStatus
    status_label: str
    status_color: StatusColor
    latency_color: LatencyColor

    def to_dict(self) -> dict[str, Any]:
        snapshot = self.state.last_snapshot
        return {
            "domain": self.domain,
            "base_url": self.base_url,
            "snapshot": snapshot.to_payload() if snapshot else None,
            "is_loading": self.state.is_loading,
            "is_action_in_flight": self.state.is_action_in_flight,
            "last_error": self.state.last_error,
            "last_updated_at": (
                self.state.last_updated_at.isoformat() if self.state.last_updated_at else None
            ),
            "latency_ms": self.state.latency_ms,
            "latency_color": self.latency_color.value,
            "health_status": self.health_status.value,
            "status_label": self.status_label,
            "status_color": self.status_color.value,
        }
