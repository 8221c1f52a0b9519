"""Protean Engine runner for the delivery domain.

In production (event_processing = "async") the Engine consumes domain events
from the broker and invokes the realtime emitter's event handlers.

Usage:
    python src/server.py
    python src/server.py --test-mode   # drain pending messages and exit
"""

import argparse
import asyncio

from protean.server.engine import Engine

from delivery.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def _get_domain():
    from delivery.domain import delivery

    delivery.init()
    return delivery


async def run(test_mode: bool = False):
    domain = _get_domain()
    logger.info("Starting delivery engine", test_mode=test_mode)
    engine = Engine(domain, test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Delivery Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    configure_logging()
    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
