"""Run the gateway headless: an in-memory grid world driven by TickDriver.

    python -m app --port 8080 --width 80 --height 65
"""

from __future__ import annotations

import argparse
import sys

import uvicorn
from loguru import logger

from app.config import settings
from app.main import create_app
from spawnbridge.simulation import BridgeContext, GridWorld, TickDriver


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Monster Spawner API (headless)")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--width", type=int, default=settings.world_width)
    parser.add_argument("--height", type=int, default=settings.world_height)
    parser.add_argument("--location", default=settings.world_location)
    parser.add_argument("--tick-hz", type=float, default=settings.tick_hz)
    parser.add_argument("--log-level", default=settings.log_level)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    world = GridWorld(args.width, args.height, location=args.location)
    context = BridgeContext(
        world,
        match_radius=settings.name_match_radius,
        spawn_radius=settings.spawn_radius,
    )
    driver = TickDriver(context, tick_hz=args.tick_hz)
    app = create_app(context, driver=driver)

    logger.info(f"API Endpoint: http://{args.host}:{args.port}/api/spawn")
    logger.info('Example: {"Monster Name":"Stone Golem","Qty":3,"Custom Name":"Guardian"}')
    uvicorn.run(app, host=args.host, port=args.port, log_level="warning")
    return 0


if __name__ == "__main__":
    sys.exit(main())
