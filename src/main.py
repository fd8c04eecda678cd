"""
EO1 Web Controller - Main Entry Point

    eo1-controller [--config PATH]

The config path falls back to $CONFIG_FILE, then config/config.yaml.
"""

import os
import sys
import signal
import asyncio
import logging
import argparse
from functools import partial
from typing import List, Optional

from services.controller_server import ControllerServer

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config/config.yaml"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="eo1-controller",
        description="Local web controller for the Electric Objects EO1"
    )
    parser.add_argument(
        "--config",
        default=os.environ.get("CONFIG_FILE", DEFAULT_CONFIG_FILE),
        help="Path to the YAML config (default: $CONFIG_FILE or config/config.yaml)"
    )
    return parser.parse_args(argv)


def _request_stop(server: ControllerServer, signum: int) -> None:
    logger.info(f"Received {signal.Signals(signum).name}, shutting down...")
    asyncio.ensure_future(server.stop())


async def run(config_path: str) -> int:
    """Build the server from config and serve until stopped; returns an exit code"""
    try:
        server = ControllerServer(config_path=config_path)
    except Exception as e:
        logger.error(f"Cannot start with {config_path}: {e}")
        return 1

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, partial(_request_stop, server, signum))
        except NotImplementedError:
            # Windows event loops; Ctrl+C still raises KeyboardInterrupt
            pass

    try:
        await server.start()
    finally:
        await server.stop()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        return asyncio.run(run(args.config))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
