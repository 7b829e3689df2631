from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

from housing_monitor.config import load_settings
from housing_monitor.monitor import MonitorService
from housing_monitor.sources import DEFAULT_SOURCES, select_sources

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_CONFIG = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Affordable housing availability monitor with email alerts")
    parser.add_argument("--dry-run", action="store_true", help="Log alerts instead of sending email")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument(
        "--source",
        action="append",
        choices=[source.name for source in DEFAULT_SOURCES],
        help="Only check this source (repeatable)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
        sources = select_sources(args.source)
    except ValueError as exc:
        logging.basicConfig(level=logging.ERROR, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        LOGGER.error("Configuration error: %s", exc)
        return EXIT_CONFIG

    if args.headed:
        settings = dataclasses.replace(settings, headless=False)

    log_level = logging.DEBUG if args.debug else getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    LOGGER.info("Starting checks for %s", ", ".join(source.name for source in sources))
    service = MonitorService(settings, sources, dry_run=args.dry_run)
    try:
        summary = service.run_once()
    except Exception:
        LOGGER.exception("Fatal error, run aborted")
        return EXIT_FATAL

    LOGGER.info("Run done: checked=%s failed=%s", len(summary.results), len(summary.failed))
    return EXIT_OK


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
