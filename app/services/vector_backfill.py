"""Copy JSON embeddings into empty pgvector columns."""
import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from sqlalchemy import Integer, text
from sqlalchemy.dialects.postgresql import JSONB

from app.database.connection import Database
from app.services.vector_store import VectorStore, VectorTarget
from app.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class BackfillReport:
    """Counts for one backfill run over a table."""
    table: str
    needs_backfill: int = 0
    processed: int = 0
    updated: int = 0
    skipped: int = 0
    remaining: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class VectorBackfill:
    """
    Populate `*_vec` columns for rows whose JSON embedding was written while
    the mirror was unavailable. Idempotent and safe to re-run.
    """

    def __init__(self, database: Database, vector_store: VectorStore):
        self.database = database
        self.vector_store = vector_store

    async def count_pending(self, target: VectorTarget) -> int:
        """Rows with a JSON embedding but no vector."""
        statement = text(
            f"SELECT COUNT(*) FROM {target.table} "
            f"WHERE {target.json_column} IS NOT NULL AND {target.vector_column} IS NULL"
        )
        async with self.database.session() as session:
            result = await session.execute(statement)
            return int(result.scalar_one())

    async def _fetch_batch(self, target: VectorTarget, after_id: int, batch_size: int):
        statement = text(
            f"SELECT id, {target.json_column} AS embedding FROM {target.table} "
            f"WHERE {target.json_column} IS NOT NULL AND {target.vector_column} IS NULL "
            f"AND id > :after_id ORDER BY id LIMIT :limit"
        ).columns(id=Integer, embedding=JSONB)
        async with self.database.session() as session:
            result = await session.execute(statement, {"after_id": after_id, "limit": batch_size})
            return list(result)

    async def run(self, target: VectorTarget, batch_size: int = 100) -> BackfillReport:
        """Backfill one table in ID order, `batch_size` rows at a time."""
        report = BackfillReport(table=target.table)
        report.needs_backfill = await self.count_pending(target)
        logger.info(
            f"{target.table}: {report.needs_backfill} rows need {target.vector_column} backfill",
            extra={"table": target.table, "needs_backfill": report.needs_backfill}
        )
        if report.needs_backfill == 0:
            return report

        last_id = 0
        while True:
            rows = await self._fetch_batch(target, last_id, batch_size)
            if not rows:
                break

            for row in rows:
                embedding = _decode_embedding(row.embedding)
                if embedding is not None and await self.vector_store.mirror(target, row.id, embedding):
                    report.updated += 1
                else:
                    logger.warning(
                        f"Skipping {target.table} {row.id}: embedding could not be mirrored",
                        extra={"table": target.table, "record_id": row.id}
                    )
                    report.skipped += 1
                report.processed += 1

            last_id = rows[-1].id
            logger.info(
                f"{target.table}: processed {report.processed}/{report.needs_backfill}",
                extra={"table": target.table, "processed": report.processed}
            )
            if len(rows) < batch_size:
                break

        report.remaining = await self.count_pending(target)
        logger.info(
            f"{target.table} backfill complete: {report.updated} updated, {report.skipped} skipped, "
            f"{report.remaining} remaining",
            extra=report.to_dict()
        )
        return report


def _decode_embedding(value: Any) -> Optional[Any]:
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return None
    return value
