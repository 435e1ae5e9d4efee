"""
Mirror JSON embeddings into pgvector columns.

Every embedding lives twice: a JSONB array that is always written with the
record (authoritative) and a `vector(1536)` column used for index-accelerated
similarity queries. The mirror write here is best effort: it is bounded by a
timeout and never raises, so a slow or failing update leaves the JSON copy
untouched.
"""
import asyncio
from dataclasses import dataclass
from numbers import Real
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import text

from app.config import Settings, settings as default_settings
from app.database.connection import Database
from app.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class VectorTarget:
    """A table plus its JSON and vector embedding columns."""
    table: str
    json_column: str
    vector_column: str


SKILL_NAME_VECTOR = VectorTarget("skills", "name_embedding", "name_embedding_vec")
CANDIDATE_BIO_VECTOR = VectorTarget("candidates", "bio_embedding", "bio_embedding_vec")

VECTOR_TARGETS = {
    "skills": SKILL_NAME_VECTOR,
    "candidates": CANDIDATE_BIO_VECTOR,
}

BIO_EMBEDDING_FIELD = "bio_embedding"

# Updates touching only these fields come from auth/session flows and must not
# pay for a vector write.
AUTH_FIELDS = frozenset({
    "password",
    "password_hash",
    "password_reset_token",
    "password_reset_expires",
    "hash",
    "salt",
    "email_verification_token",
    "email_verification_expires",
    "email_verified",
    "phone_verified",
    "session_id",
})

SECURITY_SENSITIVE_FIELDS = (
    "password_reset_token",
    "password_reset_expires",
    "email_verification_token",
    "email_verified",
    "phone_verified",
)

TIMESTAMP_FIELDS = frozenset({"updated_at"})


def to_vector_literal(values: Iterable[float]) -> str:
    """Convert floats to pgvector's text literal, e.g. [0.1,0.2,0.3]."""
    return "[" + ",".join(repr(float(v)) for v in values) + "]"


def is_valid_embedding(value: Any, dimension: int) -> bool:
    """True for a list/tuple of exactly `dimension` real numbers."""
    if not isinstance(value, (list, tuple)) or len(value) != dimension:
        return False
    return all(isinstance(v, Real) and not isinstance(v, bool) for v in value)


def should_skip_bio_vector_write(
    operation: str,
    changed_fields: Optional[Iterable[str]] = None,
    previous: Optional[Mapping[str, Any]] = None,
    current: Optional[Mapping[str, Any]] = None,
    skip_requested: bool = False,
) -> Optional[str]:
    """
    Decide whether a candidate save should skip the bio vector mirror.

    Returns a short reason when the write should be skipped, None otherwise.
    A change set that includes the bio embedding is never skipped.
    """
    if skip_requested:
        return "skip requested"

    if operation != "update":
        return None

    changed = set(changed_fields or ())
    if BIO_EMBEDDING_FIELD in changed:
        return None

    if not changed:
        return "no fields changed"

    meaningful = changed - TIMESTAMP_FIELDS
    if meaningful & AUTH_FIELDS or not meaningful:
        return f"auth-only update: {', '.join(sorted(changed))}"

    if previous is not None and current is not None:
        if previous.get(BIO_EMBEDDING_FIELD) == current.get(BIO_EMBEDDING_FIELD):
            sensitive_changed = any(
                previous.get(field) != current.get(field) for field in SECURITY_SENSITIVE_FIELDS
            )
            if sensitive_changed:
                return "auth field changed"
            return "bio embedding unchanged"

    return None


class VectorStore:
    """Best-effort writer for pgvector columns."""

    def __init__(
        self,
        database: Database,
        dimension: Optional[int] = None,
        timeout: Optional[float] = None,
        config: Optional[Settings] = None,
    ):
        config = config or default_settings
        self.database = database
        self.dimension = dimension or config.embedding_dimension
        self.timeout = timeout or config.vector_write_timeout_seconds

    async def mirror(self, target: VectorTarget, record_id: int, embedding: Any) -> bool:
        """
        Copy an embedding into the target's vector column.

        Returns True when the column was updated. Missing or malformed
        embeddings are skipped silently; timeouts and database errors are
        logged as warnings. Never raises.
        """
        if not is_valid_embedding(embedding, self.dimension):
            if isinstance(embedding, (list, tuple)):
                logger.warning(
                    f"{target.table} {record_id}: invalid embedding length "
                    f"(expected {self.dimension}, got {len(embedding)})",
                    extra={"table": target.table, "record_id": record_id}
                )
            return False

        try:
            await asyncio.wait_for(
                self._update_vector(target, record_id, to_vector_literal(embedding)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Timeout updating {target.vector_column} for {target.table} {record_id} "
                f"after {self.timeout} seconds",
                extra={"table": target.table, "record_id": record_id}
            )
            return False
        except Exception as e:
            logger.warning(
                f"Error updating {target.vector_column} for {target.table} {record_id}: {e}",
                extra={"table": target.table, "record_id": record_id, "error": str(e)}
            )
            return False

        logger.debug(
            f"Updated {target.vector_column} for {target.table} {record_id}",
            extra={"table": target.table, "record_id": record_id}
        )
        return True

    async def _update_vector(self, target: VectorTarget, record_id: int, literal: str) -> None:
        statement = text(
            f"UPDATE {target.table} "
            f"SET {target.vector_column} = CAST(:vec AS vector({self.dimension})) "
            f"WHERE id = :id"
        )
        async with self.database.session() as session:
            await session.execute(statement, {"vec": literal, "id": record_id})
            await session.commit()
