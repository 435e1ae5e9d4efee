"""
Backfill pgvector columns from the JSON embeddings.

Copies `skills.name_embedding` -> `skills.name_embedding_vec` and
`candidates.bio_embedding` -> `candidates.bio_embedding_vec` for rows whose
vector column is still NULL. Idempotent and safe to re-run.

Usage:
    python backfill_vectors.py --target all --batch-size 100
"""
import argparse
import asyncio
import sys

from app.config import settings
from app.database.connection import Database
from app.services.vector_backfill import VectorBackfill
from app.services.vector_store import VECTOR_TARGETS, VectorStore
from app.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0])
    parser.add_argument(
        "--target",
        choices=sorted(VECTOR_TARGETS) + ["all"],
        default="all",
        help="Table to backfill (default: all)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.backfill_batch_size,
        help="Rows per batch (default: %(default)s)",
    )
    return parser.parse_args(argv)


async def backfill(target: str, batch_size: int) -> int:
    """Run the backfill; returns the number of rows still pending."""
    database = Database(settings)
    try:
        await database.connect()
        runner = VectorBackfill(database, VectorStore(database, config=settings))
        tables = sorted(VECTOR_TARGETS) if target == "all" else [target]

        remaining = 0
        for table in tables:
            print(f"\n🔄 Starting pgvector backfill for {table}...")
            report = await runner.run(VECTOR_TARGETS[table], batch_size=batch_size)
            print(f"   📈 Needed backfill: {report.needs_backfill}")
            print(f"   ✅ Updated: {report.updated}")
            print(f"   ⚠️  Skipped: {report.skipped}")
            print(f"   🔄 Remaining: {report.remaining}")
            remaining += report.remaining
        return remaining
    finally:
        await database.close()


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(settings.log_level, settings.log_format)
    try:
        remaining = asyncio.run(backfill(args.target, args.batch_size))
    except KeyboardInterrupt:
        print("\n\n⚠️  Backfill interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Backfill failed: {e}", exc_info=True)
        print(f"\n\n❌ FATAL ERROR: {e}")
        return 1

    if remaining:
        print("\n⚠️  Some rows still need backfill. You may need to re-run the script.")
    else:
        print("\n✅ All embeddings mirrored to pgvector.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
