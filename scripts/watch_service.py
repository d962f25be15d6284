#!/usr/bin/env python3
"""Watch a score-host service from the terminal.

Prints one status line whenever the monitor state changes.

Usage:
    python scripts/watch_service.py example.com
    python scripts/watch_service.py example.com --once
    python scripts/watch_service.py example.com --set-maintenance on
    python scripts/watch_service.py --interval 10   # domain from SCORE_HOST_DOMAIN

Exit codes:
  0 = last poll succeeded
  2 = missing configuration
  3 = last poll (or maintenance change) failed
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from dataclasses import replace

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.monitor import MonitorConfig, ServiceMonitor  # noqa: E402

logger = logging.getLogger("score-host-watch")


def format_status(monitor: ServiceMonitor) -> str:
    state = monitor.state
    if state.is_loading:
        return f"{monitor.domain}: loading..."

    parts = [f"{monitor.domain}: {monitor.status_label} [{monitor.health_status.value}]"]
    if state.latency_ms:
        parts.append(f"{state.latency_ms}ms ({monitor.latency_color.value})")
    snapshot = state.last_snapshot
    if snapshot is not None:
        parts.append(f"{snapshot.service.name} v{snapshot.service.version}")
        parts.append(f"score-host v{snapshot.host_version} {'ok' if snapshot.host_ok else 'KO'}")
    if state.last_error:
        parts.append(f"error: {state.last_error}")
    return " | ".join(parts)


def _load_config(args: argparse.Namespace) -> MonitorConfig:
    config = MonitorConfig.from_env(domain=args.domain)
    if args.interval is not None:
        config = replace(config, poll_interval_seconds=args.interval)
    return config


async def run(args: argparse.Namespace) -> int:
    try:
        config = _load_config(args)
    except RuntimeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    monitor = ServiceMonitor.from_config(config, on_notice=lambda msg: print(f"! {msg}"))
    last_line = ""

    def _print_on_change(m: ServiceMonitor) -> None:
        nonlocal last_line
        line = format_status(m)
        if line != last_line:
            last_line = line
            print(line, flush=True)

    monitor.subscribe(_print_on_change)
    try:
        if args.set_maintenance is not None:
            ok = await monitor.set_maintenance(None, args.set_maintenance == "on")
            return 0 if ok else 3

        if args.once:
            ok = await monitor.poll()
            return 0 if ok else 3

        monitor.start()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            pass
        return 0 if monitor.state.last_error is None else 3
    finally:
        await monitor.aclose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Watch a score-host service status")
    parser.add_argument(
        "domain",
        nargs="?",
        default=None,
        help="Domain serving /score-host/api (default: SCORE_HOST_DOMAIN)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between polls (default: MONITOR_POLL_INTERVAL_SECONDS or 30)",
    )
    parser.add_argument("--once", action="store_true", help="Poll once and exit")
    parser.add_argument(
        "--set-maintenance",
        choices=["on", "off"],
        default=None,
        help="Toggle maintenance mode using SCORE_HOST_MAINTENANCE_PASSWORD, then exit",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    # Request URLs may embed the manager password
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 0


if __name__ == "__main__":
    sys.exit(main())
