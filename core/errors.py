"""Error taxonomy for score-host requests.

Every failure of a status poll or maintenance command is turned into one of
these before it is recorded on the monitor state.
"""

from __future__ import annotations


class MonitorError(Exception):
    """Base exception for monitor request errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TransportError(MonitorError):
    """Network unreachable, connection refused or timed out."""


class ProtocolError(MonitorError):
    """Remote answered with a non-2xx status."""

    def __init__(self, status_code: int):
        super().__init__(f"HTTP error: {status_code}", status_code=status_code)


class SnapshotParseError(MonitorError, ValueError):
    """Response body is not a valid status payload."""


def transport_error_from(exc: Exception) -> TransportError:
    """Wrap a low-level client exception, keeping a readable message."""
    message = str(exc).strip() or f"Connection error ({type(exc).__name__})"
    return TransportError(message)
