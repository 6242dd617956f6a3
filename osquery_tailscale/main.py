"""Process entry‑point for the Tailscale osquery extension.

osqueryd autoloads extensions with::

    osquery-tailscale --socket /var/osquery/osquery.em --timeout 3 --interval 3

Credentials come from ``TAILSCALE_API_KEY`` / ``TAILSCALE_TAILNET`` (env or
*.env*).
"""
from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

import osquery
from loguru import logger

from osquery_tailscale import __version__
from osquery_tailscale.config import ConfigurationError, Settings, load_settings
from osquery_tailscale.plugins.tables import register_tables
from osquery_tailscale.services.tables import table_definitions
from osquery_tailscale.services.tailnet import TailnetService

EXTENSION_NAME = "tailscale"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    # Same flag set osqueryd passes to autoloaded extensions.
    parser = argparse.ArgumentParser(prog="osquery-tailscale", description="Tailscale tables for osquery")
    parser.add_argument("--socket", default=None, help="Path to osquery socket file")
    parser.add_argument("--timeout", type=int, default=None, help="Timeout")
    parser.add_argument("--interval", type=int, default=None, help="Interval")
    parser.add_argument("--verbose", action="store_true", default=None, help="Enable debug logging")
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def build_settings(argv: Optional[Sequence[str]] = None) -> Settings:
    """Merge command‑line flags over env settings and validate them."""
    args = parse_args(argv)
    settings = load_settings(
        socket=args.socket,
        timeout=args.timeout,
        interval=args.interval,
        verbose=args.verbose,
    )
    settings.validate_for_serving()
    return settings


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        settings = build_settings(argv)
    except ConfigurationError as exc:
        configure_logging(verbose=False)
        logger.error("{}", exc)
        logger.error("Usage: osquery-tailscale --socket SOCKET_PATH")
        return 2

    configure_logging(settings.verbose)

    with TailnetService.from_settings(settings) as service:
        register_tables(table_definitions(service))
        logger.info(
            "Starting extension {} v{} on {} (timeout={}s, interval={}s)",
            EXTENSION_NAME,
            __version__,
            settings.socket,
            settings.timeout,
            settings.interval,
        )
        # start_extension re-reads --socket/--timeout/--interval from sys.argv
        # and blocks serving requests until the host goes away.
        osquery.start_extension(name=EXTENSION_NAME, version=__version__)
        logger.info("Extension {} stopped", EXTENSION_NAME)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
