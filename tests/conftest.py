"""Shared test fixtures for pytest.

Provides a StatusTransport backed by an httpx MockTransport and a monitor
wired to it.
"""

from __future__ import annotations

import httpx
import pytest

from core.monitor.service_monitor import ServiceMonitor
from core.monitor.transport import StatusTransport
from tests.support import DOMAIN, RecordingHandler, make_payload


@pytest.fixture
def payload_factory():
    return make_payload


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def transport(handler: RecordingHandler) -> StatusTransport:
    """Direct transport (no relay) backed by the recording handler."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return StatusTransport(relay_url=None, client=client)


@pytest.fixture
def notices() -> list[str]:
    return []


@pytest.fixture
def monitor(transport: StatusTransport, notices: list[str]) -> ServiceMonitor:
    return ServiceMonitor(DOMAIN, transport=transport, on_notice=notices.append)
