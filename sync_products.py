#!/usr/bin/env python
"""
Run a Printful product sync from the command line.

Exits with 1 when the run fails outright; runs that finish with per-product
errors (status "partial") still exit with 0.
"""

import argparse
import asyncio
import logging
import sys

from app.core.config import settings
from app.core.printful_client import printful_client
from app.db.session import async_session, engine
from app.services.product import cancel_stuck_sync_logs
from app.services.sync import ProductSync, SyncError

logger = logging.getLogger("sync_products")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Sync the Printful catalog into the local database")
    parser.add_argument("--max-products", type=int, help="Stop listing after this many products")
    parser.add_argument("--timeout", type=float, help="Overall run timeout in seconds")
    parser.add_argument("--batch-size", type=int, help="Products processed per batch")
    parser.add_argument("--retry-attempts", type=int, help="Retries for the catalog fetch phase")
    parser.add_argument("--sync-log-id", type=int, help="Report progress into an existing sync log")
    parser.add_argument(
        "--cleanup-stuck",
        action="store_true",
        help=f"Cancel runs with no progress for {settings.SYNC_STALE_AFTER_MINUTES} minutes before syncing",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


async def main(args) -> int:
    try:
        if args.cleanup_stuck:
            async with async_session() as db:
                stuck = await cancel_stuck_sync_logs(db, settings.SYNC_STALE_AFTER_MINUTES)
            print(f"Cancelled {len(stuck)} stuck sync runs")

        options = settings.sync_options(
            max_products=args.max_products,
            timeout=args.timeout,
            batch_size=args.batch_size,
            retry_attempts=args.retry_attempts,
        )
        sync = ProductSync(options=options)
        try:
            sync_log = await sync.run(sync_log_id=args.sync_log_id)
        except SyncError as e:
            if sync.tracker is not None:
                print(sync.summary())
            print(f"❌ Sync failed: {e}")
            return 1

        print(sync.summary())
        print(f"✅ Sync {sync_log.id} finished with status {sync_log.status}")
        return 0
    finally:
        await printful_client.close()
        await engine.dispose()


if __name__ == "__main__":
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(main(args)))
