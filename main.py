#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Asset Console - headless entry point.

Loads one registry from the configured backend and prints its facet
summary, which is a quick way to check a .env against a running server:

    python main.py assets
    python main.py users --search admin
"""

import argparse
import asyncio
import sys

from PyQt5.QtCore import QCoreApplication

from app.config import Config
from registries import REGISTRIES, build_registry
from services.notification_service import LoggingNotificationSink
from utils.logger import setup_logger


def _parse_args(argv):
    parser = argparse.ArgumentParser(description=f"{Config.APP_TITLE} registry summary")
    parser.add_argument("registry", choices=sorted(REGISTRIES))
    parser.add_argument("--search", default="", help="Search text applied after loading")
    return parser.parse_args(argv)


async def summarize(name: str, search: str = "") -> int:
    view = build_registry(name, notifier=LoggingNotificationSink())
    if not await view.load():
        return 1
    if search:
        view.set_search(search)

    print(f"{REGISTRIES[name].title}: {view.filtered_count} of {len(view.items)} item(s)")
    for facet in view.facets:
        counts = view.facet_counts(facet)
        summary = ", ".join(f"{value}={count}" for value, count in sorted(
            counts.items(), key=lambda pair: str(pair[0])
        ))
        print(f"  {facet}: {summary}")
    view.dispose()
    return 0


def main(argv=None):
    """Main application entry point."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    logger = setup_logger()

    app = QCoreApplication(sys.argv[:1])
    app.setApplicationName(Config.APP_NAME)
    app.setApplicationVersion(Config.VERSION)

    logger.info("=" * 80)
    logger.info(f"Starting {Config.APP_NAME} against {Config.API_BASE_URL}")
    logger.info("=" * 80)

    try:
        exit_code = asyncio.run(summarize(args.registry, args.search))
    except Exception as e:
        error_msg = f"Fatal error: {e}"
        print(f"\n[ERROR] {error_msg}")
        print(f"\nPlease check {Config.LOG_PATH} for details")
        logger.exception(error_msg)
        exit_code = 1

    logger.info(f"Closed with exit code: {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
