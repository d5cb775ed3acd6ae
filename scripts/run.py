#!/usr/bin/env python3
"""Main monitor entrypoint — polls the alert feed and notifies for the home locality.

Usage::

    # Run with default config
    python scripts/run.py

    # Custom config file
    python scripts/run.py --config config/settings.yaml

    # Override home locality and log level
    python scripts/run.py --home "אשקלון" --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import structlog

from src.core.config import load_settings
from src.core.logging import setup_logging
from src.core.types import Alert, AlertSnapshot, ConnectionState
from src.feeds.oref import OrefFeed
from src.monitor.factory import create_notification_stack
from src.poller.scheduler import AlertPoller

logger = structlog.get_logger(__name__)


def _log_snapshot(snapshot: AlertSnapshot) -> None:
    if snapshot.connection_state == ConnectionState.DISCONNECTED:
        logger.warning("feed_unreachable_retrying")
    for alert in snapshot.relevant_alerts:
        logger.debug(
            "relevant_alert_active",
            alert_id=alert.id,
            title=alert.title,
            countdown=alert.shelter_countdown_seconds,
        )


def _log_home_alert(alert: Alert) -> None:
    logger.warning(
        "alert_in_home_area",
        alert_id=alert.id,
        title=alert.title,
        localities=list(alert.localities),
        countdown=alert.shelter_countdown_seconds,
    )


async def run(args: argparse.Namespace) -> int:
    """Start the poller and run until interrupted."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    home = args.home if args.home is not None else settings.home.locality

    logger.info(
        "monitor_starting",
        feed_url=settings.feed.url,
        interval_secs=settings.poller.interval_secs,
        home_locality=home,
        permission=settings.notifications.permission,
    )
    if not home:
        logger.warning("no_home_locality_configured")

    dispatcher = create_notification_stack(settings.notifications)
    feed = OrefFeed(settings.feed)
    poller = AlertPoller(
        feed,
        dispatcher=dispatcher,
        config=settings.poller,
        home_locality=home,
    )
    poller.on_snapshot(_log_snapshot)
    poller.on_home_alert(_log_home_alert)

    await poller.start()

    # ── Wait for shutdown signal ─────────────────────────────────
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass

    try:
        await stop_event.wait()
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")

    # ── Graceful shutdown ────────────────────────────────────────
    logger.info("monitor_shutting_down")

    try:
        await poller.stop()
    except Exception:
        logger.exception("poller_stop_error")

    await dispatcher.close()

    logger.info(
        "monitor_stopped",
        skipped_ticks=poller.skipped_ticks,
        cycle_errors=poller.error_count,
    )
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Watch Home Front Command alerts for a home locality.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--home",
        default=None,
        help="Home locality (overrides home.locality in the config)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override (DEBUG, INFO, WARNING, ERROR)",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
