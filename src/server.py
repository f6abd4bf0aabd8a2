"""Protean Engine runner for the Product Reviews service.

Starts Engine workers that process events asynchronously:
- OutboxProcessor: polls outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams, invokes event handlers (rating
  refresh, cache invalidation, and the Ordering/Identity/Catalogue lifecycle
  handlers)

Usage:
    python src/server.py
"""

import argparse
import asyncio

from protean.server.engine import Engine


def _get_domain():
    """Import and initialize the product_reviews domain."""
    from product_reviews.domain import reviews

    reviews.init()
    return reviews


async def run():
    engine = Engine(_get_domain())
    await engine.run()


def main():
    argparse.ArgumentParser(description="Product Reviews Engine runner").parse_args()
    asyncio.run(run())


if __name__ == "__main__":
    main()
