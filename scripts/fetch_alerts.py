#!/usr/bin/env python3
"""Fetch the alert feed once and print ``{"alerts": [...], "lastUpdate": ...}``.

Usage::

    python scripts/fetch_alerts.py
    python scripts/fetch_alerts.py --config config/settings.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from src.core.config import load_settings
from src.core.logging import setup_logging
from src.feeds.oref import OrefFeed


async def fetch_once(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    setup_logging(level=args.log_level, fmt="console")

    async with OrefFeed(settings.feed) as feed:
        response = await feed.fetch_alerts()

    print(response.to_json())
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Print the currently active alerts as JSON.",
    )
    parser.add_argument("--config", default=None, help="Path to settings YAML")
    parser.add_argument("--log-level", default="WARNING", help="Log level override")
    args = parser.parse_args()
    sys.exit(asyncio.run(fetch_once(args)))


if __name__ == "__main__":
    main()
