"""Tests for ServiceMonitor start/stop, timer polling and overlapping polls."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from core.monitor.config import MonitorConfig
from core.monitor.service_monitor import ServiceMonitor
from core.monitor.transport import StatusTransport
from tests.support import DOMAIN, make_payload


class GatedHandler:
    """Async MockTransport handler that holds each response until released."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.gates: list[asyncio.Event] = []
        self.payloads: list[dict] = []
        self.received = asyncio.Event()

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        index = len(self.requests)
        self.requests.append(request)
        gate = asyncio.Event()
        self.gates.append(gate)
        self.received.set()
        await gate.wait()
        payload = self.payloads[index] if index < len(self.payloads) else make_payload()
        return httpx.Response(200, json=payload)


def _monitor(handler, interval: float = 30.0) -> ServiceMonitor:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ServiceMonitor(
        DOMAIN,
        transport=StatusTransport(relay_url=None, client=client),
        poll_interval_seconds=interval,
    )


@pytest.mark.asyncio
async def test_start_polls_immediately(monitor, handler):
    monitor.start()
    try:
        assert monitor.is_running is True
        await monitor.wait_for_pending_polls()
        assert len(handler.requests) == 1
        assert monitor.state.last_snapshot is not None
    finally:
        monitor.stop()

    assert monitor.is_running is False


@pytest.mark.asyncio
async def test_timer_keeps_polling(transport, handler):
    monitor = ServiceMonitor(DOMAIN, transport=transport, poll_interval_seconds=0.01)

    monitor.start()
    await asyncio.sleep(0.1)
    monitor.stop()
    await monitor.wait_for_pending_polls()

    assert len(handler.requests) >= 3


@pytest.mark.asyncio
async def test_start_twice_is_noop(monitor, handler):
    monitor.start()
    monitor.start()
    await monitor.wait_for_pending_polls()
    monitor.stop()

    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_timer_does_not_wait_for_slow_poll():
    """Test polls overlap when the previous one has not settled."""
    handler = GatedHandler()
    monitor = _monitor(handler, interval=0.01)

    monitor.start()
    await asyncio.sleep(0.1)
    monitor.stop()

    assert len(handler.requests) >= 2
    for gate in handler.gates:
        gate.set()
    await monitor.wait_for_pending_polls()


@pytest.mark.asyncio
async def test_last_completed_poll_wins():
    """Test an older poll finishing last overwrites a newer one."""
    handler = GatedHandler()
    handler.payloads = [make_payload(version="old"), make_payload(version="new")]
    monitor = _monitor(handler)

    first = asyncio.create_task(monitor.poll())
    await handler.received.wait()
    handler.received.clear()
    second = asyncio.create_task(monitor.poll())
    await handler.received.wait()

    handler.gates[1].set()
    await second
    assert monitor.state.last_snapshot.service.version == "new"

    handler.gates[0].set()
    await first
    assert monitor.state.last_snapshot.service.version == "old"


@pytest.mark.asyncio
async def test_results_after_stop_are_discarded():
    handler = GatedHandler()
    monitor = _monitor(handler)
    notified: list[ServiceMonitor] = []

    monitor.start()
    await handler.received.wait()
    monitor.subscribe(notified.append)
    monitor.stop()
    handler.gates[0].set()
    await monitor.wait_for_pending_polls()

    assert monitor.state.last_snapshot is None
    assert monitor.state.last_updated_at is None
    assert notified == []


@pytest.mark.asyncio
async def test_poll_after_stop_makes_no_request(monitor, handler):
    monitor.stop()

    assert await monitor.poll() is False
    assert handler.requests == []


@pytest.mark.asyncio
async def test_start_after_stop_raises(monitor):
    monitor.stop()

    with pytest.raises(RuntimeError, match="has been stopped"):
        monitor.start()


@pytest.mark.asyncio
async def test_aclose_closes_owned_transport():
    monitor = ServiceMonitor.from_config(MonitorConfig(domain=DOMAIN, relay_url=None))
    client = await monitor._transport._get_client()

    await monitor.aclose()

    assert monitor.is_disposed is True
    assert client.is_closed is True


@pytest.mark.asyncio
async def test_aclose_keeps_injected_transport(monitor, transport):
    await monitor.aclose()

    client = await transport._get_client()
    assert client.is_closed is False
    await client.aclose()


def test_from_config_copies_settings():
    config = MonitorConfig(
        domain=DOMAIN,
        maintenance_password="pw",
        relay_url=None,
        poll_interval_seconds=5.0,
        request_timeout_seconds=2.0,
    )

    monitor = ServiceMonitor.from_config(config)

    assert monitor.maintenance_password == "pw"
    assert monitor.poll_interval_seconds == 5.0
    assert monitor._transport.relay_url is None
    assert monitor._transport.timeout_seconds == 2.0
