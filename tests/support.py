"""Status payloads and a recording httpx MockTransport handler for tests."""

from __future__ import annotations

from typing import Any

import httpx

DOMAIN = "scores.example.com"
BASE_URL = f"https://{DOMAIN}/score-host/api"
STATUS_URL = f"{BASE_URL}/status"


def make_payload(**service_overrides: Any) -> dict[str, Any]:
    """Status body for a healthy service, with optional service field overrides."""
    service = {
        "ok": True,
        "name": "silver",
        "maintenance": False,
        "errored": False,
        "onUpdate": False,
        "version": "2.4.1",
    }
    service.update(service_overrides)
    return {"score-host": {"ok": True, "version": "1.0.3"}, "service": service}


class RecordingHandler:
    """MockTransport handler answering from a queue and recording requests.

    Once the queue is empty every request gets ``default`` (a healthy status
    body unless overridden).
    """

    def __init__(self, responses: list[httpx.Response | Exception] | None = None) -> None:
        self.responses = list(responses or [])
        self.requests: list[httpx.Request] = []
        self.default: httpx.Response | Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            item = self.responses.pop(0)
        elif self.default is not None:
            item = self.default
        else:
            item = httpx.Response(200, json=make_payload())
        if isinstance(item, Exception):
            raise item
        return item

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]
