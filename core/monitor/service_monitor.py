"""Polling health monitor for a single score-host service.

One ``ServiceMonitor`` per domain. It polls ``/status`` on a fixed interval,
samples round-trip latency, keeps the last snapshot and exposes derived
display values plus the maintenance toggle to the presentation layer.

Polls are not serialized: a slow poll and a timer-driven poll may both be in
flight and whichever finishes last wins the write to ``state``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional
from urllib.parse import quote

from core.errors import MonitorError
from core.monitor import derived
from core.monitor.config import DEFAULT_POLL_INTERVAL_SECONDS, MonitorConfig
from core.monitor.transport import StatusTransport
from core.types import (
    HealthStatus,
    LatencyColor,
    MonitorState,
    MonitorView,
    ServiceSnapshot,
    StatusColor,
)

logger = logging.getLogger(__name__)

Listener = Callable[["ServiceMonitor"], None]
NoticeCallback = Callable[[str], None]

NOTICE_PASSWORD_NOT_CONFIGURED = "Password not configured for this service"
NOTICE_MAINTENANCE_FAILED = "Could not change maintenance mode"

STATUS_HEADERS = {"Cache-Control": "no-store"}
MAINTENANCE_HEADERS = {"Pragma": "no-cache", "Cache-Control": "no-cache"}


def _redact(text: str, secret: str) -> str:
    """Mask ``secret`` and its URL-encoded forms in ``text``."""
    if not secret:
        return text
    encoded = quote(secret, safe="")
    # Relayed URLs encode the path a second time
    for form in (quote(encoded, safe=""), encoded, secret):
        text = text.replace(form, "***")
    return text


class ServiceMonitor:
    """Health monitor for one score-host domain."""

    def __init__(
        self,
        domain: str,
        *,
        maintenance_password: Optional[str] = None,
        transport: Optional[StatusTransport] = None,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        on_notice: Optional[NoticeCallback] = None,
    ) -> None:
        """Initialize the monitor. No network call happens here.

        Args:
            domain: Hostname serving ``/score-host/api``.
            maintenance_password: Default password for ``set_maintenance``.
            transport: Relay-aware transport. Created (and owned) when omitted.
            poll_interval_seconds: Delay between timer-driven polls.
            on_notice: Receives user-facing notices. Logged when omitted.
        """
        self.domain = domain
        self.base_url = f"https://{domain}/score-host/api"
        self.maintenance_password = maintenance_password
        self.poll_interval_seconds = poll_interval_seconds
        self.state = MonitorState()

        self._transport = transport or StatusTransport()
        self._owns_transport = transport is None
        self._on_notice = on_notice
        self._listeners: list[Listener] = []
        self._timer_task: asyncio.Task | None = None
        self._poll_tasks: set[asyncio.Task] = set()
        self._disposed = False

    @classmethod
    def from_config(
        cls,
        config: MonitorConfig,
        *,
        on_notice: Optional[NoticeCallback] = None,
    ) -> "ServiceMonitor":
        transport = StatusTransport(
            relay_url=config.relay_url,
            timeout_seconds=config.request_timeout_seconds,
        )
        monitor = cls(
            config.domain,
            maintenance_password=config.maintenance_password,
            transport=transport,
            poll_interval_seconds=config.poll_interval_seconds,
            on_notice=on_notice,
        )
        monitor._owns_transport = True
        return monitor

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def health_status(self) -> HealthStatus:
        return derived.health_status(self.state)

    @property
    def status_label(self) -> str:
        return derived.status_label(self.health_status)

    @property
    def status_color(self) -> StatusColor:
        return derived.status_color(self.health_status)

    @property
    def latency_color(self) -> LatencyColor:
        return derived.latency_color(self.state.latency_ms)

    def view(self) -> MonitorView:
        """Snapshot of the state and every derived value."""
        status = self.health_status
        return MonitorView(
            domain=self.domain,
            base_url=self.base_url,
            state=MonitorState(**vars(self.state)),
            health_status=status,
            status_label=derived.status_label(status),
            status_color=derived.status_color(status),
            latency_color=self.latency_color,
        )

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every state change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.warning("Monitor listener failed for %s", self.domain, exc_info=True)

    def _notice(self, message: str, on_notice: Optional[NoticeCallback] = None) -> None:
        if self._on_notice is None and on_notice is None:
            logger.warning("%s: %s", self.domain, message)
            return
        for callback in (on_notice, self._on_notice):
            if callback is None:
                continue
            try:
                callback(message)
            except Exception:
                logger.warning("Notice callback failed for %s", self.domain, exc_info=True)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def poll(self) -> bool:
        """Fetch ``/status`` once and record the outcome.

        Never raises. Returns True when a snapshot was stored.
        """
        if self._disposed:
            logger.debug("Ignoring poll for %s: monitor stopped", self.domain)
            return False

        start = time.perf_counter()
        if self.state.last_snapshot is None:
            self.state.is_loading = True
            self._notify()

        error: Optional[str] = None
        snapshot: Optional[ServiceSnapshot] = None
        latency_ms = 0
        try:
            payload = await self._transport.get_json(
                f"{self.base_url}/status", headers=STATUS_HEADERS
            )
            snapshot = ServiceSnapshot.from_payload(payload)
            latency_ms = round((time.perf_counter() - start) * 1000)
        except MonitorError as exc:
            error = str(exc)
            logger.error("Status poll failed for %s: %s", self.domain, exc)
        except Exception as exc:
            error = str(exc) or f"Unexpected error ({type(exc).__name__})"
            logger.exception("Unexpected error polling %s", self.domain)
        finally:
            # Results landing after stop() belong to a disposed monitor
            if not self._disposed:
                if snapshot is not None:
                    self.state.last_snapshot = snapshot
                    self.state.last_error = None
                    self.state.last_updated_at = datetime.now(timezone.utc)
                    self.state.latency_ms = max(0, latency_ms)
                elif error is not None:
                    self.state.latency_ms = 0
                    self.state.last_error = error
                self.state.is_loading = False
                self._notify()
            else:
                logger.debug("Discarding status result for %s: monitor stopped", self.domain)

        return snapshot is not None and not self._disposed

    async def refresh(self) -> bool:
        """Alias for ``poll()``."""
        return await self.poll()

    def maintenance_url(self, password: str, active: bool) -> str:
        """Privileged maintenance URL with a millisecond cache buster."""
        value = "true" if active else "false"
        target = f"{self.base_url}/manager/{quote(password, safe='')}/set-maintenance/{value}"
        separator = "&" if "?" in target else "?"
        return f"{target}{separator}t={int(time.time() * 1000)}"

    async def set_maintenance(
        self,
        password: Optional[str],
        active: bool,
        *,
        on_notice: Optional[NoticeCallback] = None,
    ) -> bool:
        """Toggle maintenance mode, then re-poll on success.

        Args:
            password: Manager password. ``None`` uses the configured one.
            active: Desired maintenance flag.
            on_notice: Also receives the notice raised by this call, if any.

        Returns:
            True if the remote accepted the change. Never raises.
        """
        if password is None:
            password = self.maintenance_password
        if not password:
            self._notice(NOTICE_PASSWORD_NOT_CONFIGURED, on_notice)
            return False
        if self._disposed:
            logger.debug("Ignoring maintenance change for %s: monitor stopped", self.domain)
            return False

        url = self.maintenance_url(password, active)
        self.state.is_action_in_flight = True
        self._notify()
        try:
            await self._transport.get(url, headers=MAINTENANCE_HEADERS)
            logger.info(
                "Maintenance mode %s for %s", "enabled" if active else "disabled", self.domain
            )
            await self.poll()
            return True
        except MonitorError as exc:
            logger.error(
                "Maintenance change failed for %s: %s", self.domain, _redact(str(exc), password)
            )
        except Exception as exc:
            logger.error(
                "Unexpected error changing maintenance for %s: %s (%s)",
                self.domain,
                _redact(str(exc), password),
                type(exc).__name__,
            )
        finally:
            if not self._disposed:
                self.state.is_action_in_flight = False
                self._notify()

        self._notice(NOTICE_MAINTENANCE_FAILED, on_notice)
        return False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def start(self) -> None:
        """Poll immediately, then every ``poll_interval_seconds``.

        Must be called from a running event loop.

        Raises:
            RuntimeError: If the monitor was already stopped.
        """
        if self._disposed:
            raise RuntimeError(f"ServiceMonitor for {self.domain} has been stopped")
        if self.is_running:
            return

        self._spawn_poll()
        self._timer_task = asyncio.create_task(
            self._run_timer(), name=f"score-host-timer:{self.domain}"
        )
        logger.info(
            "Monitoring %s every %.0fs", self.base_url, self.poll_interval_seconds
        )

    def stop(self) -> None:
        """Cancel the timer and dispose the state.

        In-flight requests are not cancelled; their results are discarded.
        """
        self._disposed = True
        if self._timer_task is not None:
            self._timer_task.cancel()
            self._timer_task = None
        self._listeners.clear()
        logger.info("Stopped monitoring %s", self.domain)

    async def aclose(self) -> None:
        """Stop the monitor and close the transport if this monitor owns it."""
        self.stop()
        if self._owns_transport:
            await self._transport.close()

    async def wait_for_pending_polls(self) -> None:
        """Wait for every poll spawned by the timer to settle."""
        if self._poll_tasks:
            await asyncio.gather(*list(self._poll_tasks), return_exceptions=True)

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval_seconds)
            self._spawn_poll()

    def _spawn_poll(self) -> asyncio.Task:
        task = asyncio.create_task(self.poll())
        self._poll_tasks.add(task)
        task.add_done_callback(self._poll_tasks.discard)
        return task
