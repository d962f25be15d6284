#!/usr/bin/env python3
"""Serve the score-host monitor over HTTP.

Starts uvicorn on ``api.main:app``. The app lifespan starts one
ServiceMonitor for SCORE_HOST_DOMAIN, which polls ``/score-host/api/status``
every MONITOR_POLL_INTERVAL_SECONDS (30 by default) and keeps polling until
the server shuts down. Dashboards read the latest state from ``GET /monitor``.

Usage:
    python scripts/run_api.py [--host HOST] [--port PORT] [--reload]

Environment:
    SCORE_HOST_DOMAIN - Required. Domain serving /score-host/api.
    SCORE_HOST_MAINTENANCE_PASSWORD - Optional. Default password for
        POST /monitor/maintenance.
    CORS_RELAY_URL - Optional. Relay prefix; empty calls the domain directly.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

ENDPOINTS = (
    ("GET", "/health"),
    ("GET", "/monitor"),
    ("POST", "/monitor/refresh"),
    ("POST", "/monitor/maintenance"),
    ("GET", "/monitor/notices"),
)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Poll a score-host service and serve its health, latency and "
        "maintenance controls over HTTP."
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    # Request URLs may embed the manager password
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    domain = os.environ.get("SCORE_HOST_DOMAIN", "").strip()
    if not domain:
        print("Error: SCORE_HOST_DOMAIN environment variable is required", file=sys.stderr)
        return 1

    print(f"Monitoring https://{domain}/score-host/api from {args.host}:{args.port}")
    for method, path in ENDPOINTS:
        print(f"  - {method:<4} http://{args.host}:{args.port}{path}")
    print()

    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
