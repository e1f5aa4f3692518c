#!/usr/bin/env python3
"""
Remote Config CLI - Fetch and Watch Remote Configuration

Command-line tool for checking what a client would load from its endpoints.

Usage:
    # Fetch once from a YAML options file
    remote-config --config client.yaml

    # Fetch once from explicit endpoints (first success wins)
    remote-config --endpoint https://cdn.example.com/app/1.2.json \
                  --endpoint https://cdn.example.com/app/default.json

    # Keep polling every 60 seconds and print every event
    remote-config --config client.yaml --interval 60 --watch

Output is one JSON event per line.
Exit status: 0 on success, 1 when every endpoint failed, 2 on bad options.
"""

import argparse
import asyncio
import json
import signal
import sys
from pathlib import Path
from typing import Any

import yaml

from remote_config.client import ConfigClient
from remote_config.common.config import ConfigurationEvent, ConfigurationStatus, load_client_options
from remote_config.common.exceptions import OptionsError
from remote_config.common.logging_setup import get_service_logger, set_log_level
from remote_config.providers.log import logger_provider

logger = get_service_logger("cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_OPTIONS = 2


def print_event(event: ConfigurationEvent) -> None:
    print(json.dumps(event.to_dict(), default=str), flush=True)


def load_override(path: str) -> Any:
    """Load an override configuration file (JSON is valid YAML)"""
    override_path = Path(path)
    if not override_path.exists():
        raise OptionsError(f"Override file not found: {path}", path)
    try:
        with open(override_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise OptionsError(f"Error parsing override file {path}: {e}", path) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="remote-config",
        description="Fetch remote application configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to YAML client options file",
    )
    parser.add_argument(
        "--endpoint", "-e",
        action="append",
        dest="endpoints",
        help="Endpoint URL, repeat in priority order (replaces file endpoints)",
    )
    parser.add_argument(
        "--interval", "-i",
        type=float,
        default=None,
        help="Polling interval in seconds (with --watch)",
    )
    parser.add_argument(
        "--override",
        type=str,
        default=None,
        help="Local configuration file to deliver instead of fetching",
    )
    parser.add_argument(
        "--watch", "-w",
        action="store_true",
        help="Keep running and print every polled event",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


async def run(args: argparse.Namespace) -> int:
    """Fetch once, or watch until interrupted."""
    watching = args.watch

    async def callback(event: ConfigurationEvent) -> None:
        # The first event is printed by run() with its final configuration
        if watching and client.loaded:
            print_event(event)

    overrides: dict[str, Any] = {
        "callback": callback,
        "on_fetch_error": logger_provider(logger),
        "on_configuration_undefined": logger_provider(logger),
        "on_validation_error": logger_provider(logger),
    }
    if args.endpoints:
        overrides["endpoints"] = args.endpoints
    if args.interval is not None:
        overrides["interval"] = args.interval
    if args.override:
        overrides["override"] = load_override(args.override)

    options = load_client_options(args.config, **overrides)
    if not watching:
        options.interval = None

    client = ConfigClient(options)
    try:
        event = await client.refresh()
        print_event(event)

        if event.status == ConfigurationStatus.ERROR:
            return EXIT_FAILED

        if watching and client.polling.enabled:
            shutdown = asyncio.Event()
            _setup_signal_handlers(shutdown)
            await shutdown.wait()

        return EXIT_OK
    finally:
        await client.close()


def _setup_signal_handlers(shutdown: asyncio.Event) -> None:
    """Setup graceful shutdown signal handlers"""
    loop = asyncio.get_running_loop()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, shutdown.set)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            signal.signal(sig, lambda s, f: loop.call_soon_threadsafe(shutdown.set))


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        set_log_level(args.log_level)

    try:
        return asyncio.run(run(args))
    except OptionsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_OPTIONS
    except KeyboardInterrupt:
        print("\nStopped by user", file=sys.stderr)
        return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
