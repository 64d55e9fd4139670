#!/usr/bin/env python3
"""Run the adapter lifecycle against a live CouchDB server.

Creates (if needed) the ``<service>-<collection>`` database, exercises every
CRUD operation once and clears the database again.
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from couchdb_adapter import NotFoundError, ServiceSchema, create_adapter
from couchdb_adapter.config.settings import get_settings

load_dotenv()

logger = logging.getLogger("smoke_couchdb")


async def run_smoke(uri: str, service: str, collection: str) -> bool:
    adapter = create_adapter(
        ServiceSchema(name=service, collection=collection), uri=uri, settings=get_settings()
    )
    await adapter.connect()
    try:
        doc = await adapter.insert({"_id": "1majority", "a": 1, "b": 2})
        logger.info(f"Inserted {doc['_id']} at rev {doc['_rev']}")

        removed = await adapter.remove_by_id("1majority")
        logger.info(f"Removed {removed['_id']}")
        try:
            await adapter.find_by_id("1majority")
            logger.error("Removed document is still retrievable")
            return False
        except NotFoundError:
            pass

        docs = await adapter.insert_many(
            [{"_id": str(i), "a": i, "b": 20} for i in range(2, 5)]
        )
        logger.info(f"Bulk inserted {len(docs)} documents")

        modified = await adapter.update_many({"b": 20}, {"c": 100})
        count = await adapter.count({"query": {"c": 100}})
        logger.info(f"update_many modified {modified}, count(c=100) = {count}")

        cleared = await adapter.clear()
        remaining = await adapter.find({})
        logger.info(f"Cleared {cleared} documents, {len(remaining)} remaining")

        return modified >= 3 and count == 3 and not remaining
    finally:
        await adapter.disconnect()


def main() -> int:
    parser = argparse.ArgumentParser(description="Smoke test the CouchDB adapter")
    parser.add_argument("--uri", default=None, help="CouchDB URI (default: COUCHDB_URL)")
    parser.add_argument("--service", default="smoke", help="Service name")
    parser.add_argument("--collection", default="posts", help="Collection name")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    ok = asyncio.run(run_smoke(args.uri, args.service, args.collection))
    print("✅ Smoke test passed" if ok else "❌ Smoke test failed")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
