from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from core.monitor.transport import DEFAULT_RELAY_URL, DEFAULT_TIMEOUT_SECONDS

DEFAULT_POLL_INTERVAL_SECONDS = 30.0


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class MonitorConfig:
    """Monitor configuration.

    `maintenance_password` should come from environment
    (SCORE_HOST_MAINTENANCE_PASSWORD). Do not log it.
    """

    domain: str
    maintenance_password: Optional[str] = field(default=None, repr=False)
    relay_url: Optional[str] = DEFAULT_RELAY_URL
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    request_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, domain: Optional[str] = None) -> "MonitorConfig":
        """Load configuration from environment variables.

        Args:
            domain: Overrides SCORE_HOST_DOMAIN (e.g. from the command line).

        Raises:
            RuntimeError: If the domain is missing or a number is invalid.
        """
        domain = (domain or os.environ.get("SCORE_HOST_DOMAIN", "")).strip()
        if not domain:
            raise RuntimeError("SCORE_HOST_DOMAIN environment variable is required")

        # An empty CORS_RELAY_URL means "call the target directly"
        relay_url = os.environ.get("CORS_RELAY_URL", DEFAULT_RELAY_URL).strip() or None

        return cls(
            domain=domain,
            maintenance_password=os.environ.get("SCORE_HOST_MAINTENANCE_PASSWORD") or None,
            relay_url=relay_url,
            poll_interval_seconds=_float_env(
                "MONITOR_POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS
            ),
            request_timeout_seconds=_float_env(
                "MONITOR_REQUEST_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
            ),
        )
