"""Derive the candidate bio embedding before a profile is saved."""
from decimal import Decimal
from typing import Any, Dict, Optional

from app.exceptions import EmbeddingError
from app.repositories.skill_repo import SkillRepository
from app.services.embedding_service import EmbeddingService
from app.utils.cleaning import is_blank, normalize_text
from app.utils.logging import get_logger

logger = get_logger(__name__)

BIO_FIELDS = ("job_title", "primary_skill_id", "experience_years")


def build_bio_text(job_title: str, skill_name: str, experience_years: Any) -> str:
    """Searchable bio string, e.g. "Plumber Pipe Fitting 5 years experience"."""
    if isinstance(experience_years, (float, Decimal)) and experience_years == int(experience_years):
        experience_years = int(experience_years)
    return normalize_text(f"{job_title} {skill_name} {experience_years} years experience")


def has_bio_fields(candidate_data: Dict[str, Any]) -> bool:
    """True when job title, primary skill and experience are all present."""
    return all(not is_blank(candidate_data.get(field)) for field in BIO_FIELDS) and bool(
        candidate_data.get("experience_years")
    )


class CandidateEmbeddingService:
    """Builds `bio_embedding` from job title, primary skill name and experience."""

    def __init__(self, skill_repo: SkillRepository, embedding_service: EmbeddingService):
        self.skill_repo = skill_repo
        self.embedding_service = embedding_service

    async def refresh(self, candidate_data: Dict[str, Any], candidate_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Compute the bio embedding for the given (merged) candidate values.

        Returns `{"bio_embedding": [...]}` or an empty dict when any bio field
        is missing, no provider is configured or the provider fails.
        """
        if not has_bio_fields(candidate_data):
            return {}

        if not self.embedding_service.is_configured:
            logger.warning(
                "Embedding provider not configured, skipping bio embedding generation",
                extra={"candidate_id": candidate_id}
            )
            return {}

        skill = await self.skill_repo.get_by_id(candidate_data["primary_skill_id"])
        skill_name = skill.name if skill and skill.name else ""
        bio_text = build_bio_text(
            candidate_data["job_title"], skill_name, candidate_data["experience_years"]
        )

        try:
            embedding = await self.embedding_service.generate_embedding(bio_text)
        except EmbeddingError as e:
            logger.error(
                f"Error generating bio embedding for candidate {candidate_id}: {e}",
                extra={"candidate_id": candidate_id, "error": str(e)}
            )
            return {}

        if embedding is None:
            return {}

        return {"bio_embedding": embedding}
