"""Derive group text and name embedding for skills before they are saved."""
from typing import Any, Dict, Optional

from app.exceptions import EmbeddingError
from app.repositories.skill_repo import SkillRepository
from app.services.embedding_service import EmbeddingService
from app.taxonomy.group_text import build_group_text
from app.utils.logging import get_logger

logger = get_logger(__name__)

# Changing any of these invalidates the group text.
SKILL_TEXT_FIELDS = frozenset({"name", "sub_category_id", "billing_class"})


class SkillEmbeddingService:
    """Builds `group_text` + `name_embedding` for a skill, always as a pair."""

    def __init__(self, skill_repo: SkillRepository, embedding_service: EmbeddingService):
        self.skill_repo = skill_repo
        self.embedding_service = embedding_service

    async def refresh(self, skill_data: Dict[str, Any], skill_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Compute derived fields for the given (merged) skill values.

        Returns `{"group_text": ..., "name_embedding": ...}` or an empty dict
        when the embedding cannot be produced, so a stale group text is never
        stored next to an older embedding.
        """
        path = await self.skill_repo.resolve_path(
            skill_data.get("name"),
            skill_data.get("sub_category_id"),
            skill_data.get("billing_class"),
        )
        group_text = build_group_text(path)
        if not group_text:
            logger.info(
                "Skill has no taxonomy names, skipping embedding generation",
                extra={"skill_id": skill_id}
            )
            return {}

        try:
            embedding = await self.embedding_service.generate_embedding(group_text)
        except EmbeddingError as e:
            logger.error(
                f"Error generating embedding for skill {skill_id}: {e}",
                extra={"skill_id": skill_id, "group_text": group_text, "error": str(e)}
            )
            return {}

        if embedding is None:
            return {}

        logger.info(
            f"Generated name embedding for skill {skill_id}",
            extra={"skill_id": skill_id, "group_text": group_text}
        )
        return {"group_text": group_text, "name_embedding": embedding}
