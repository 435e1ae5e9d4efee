"""Controller for skill and candidate saves that keep embeddings in sync."""
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.models import Candidate, Skill
from app.models.profile_models import CandidateRecord, SkillRecord
from app.repositories.candidate_repo import CandidateRepository, candidate_to_dict
from app.repositories.skill_repo import SkillRepository
from app.services.candidate_embedding_service import BIO_FIELDS, CandidateEmbeddingService
from app.services.embedding_service import EmbeddingService
from app.services.skill_embedding_service import SKILL_TEXT_FIELDS, SkillEmbeddingService
from app.services.vector_store import (
    AUTH_FIELDS,
    CANDIDATE_BIO_VECTOR,
    SKILL_NAME_VECTOR,
    VectorStore,
    should_skip_bio_vector_write,
)
from app.utils.logging import get_logger

logger = get_logger(__name__)


def _same_value(stored: Any, incoming: Any) -> bool:
    # Numeric columns load as Decimal while request bodies carry floats.
    if isinstance(stored, Decimal) and isinstance(incoming, (int, float)) and not isinstance(incoming, bool):
        return stored == Decimal(str(incoming))
    return stored == incoming


def _changed_values(previous: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if not _same_value(previous.get(key), value)}


def skill_record(skill: Skill) -> SkillRecord:
    return SkillRecord(
        id=skill.id,
        name=skill.name,
        sub_category_id=skill.sub_category_id,
        billing_class=skill.billing_class,
        group_text=skill.group_text,
        has_embedding=bool(skill.name_embedding),
    )


def candidate_record(candidate: Candidate) -> CandidateRecord:
    return CandidateRecord(
        id=candidate.id,
        first_name=candidate.first_name,
        last_name=candidate.last_name,
        job_title=candidate.job_title,
        primary_skill_id=candidate.primary_skill_id,
        experience_years=float(candidate.experience_years) if candidate.experience_years is not None else None,
        terms_accepted=bool(candidate.terms_accepted),
        has_bio_embedding=bool(candidate.bio_embedding),
    )


class ProfileController:
    """
    Save path for skills and candidates.

    Order of operations on every save:
    1. diff the incoming values against the stored record;
    2. regenerate derived embedding fields when their inputs changed;
    3. commit the record (JSON embedding included);
    4. mirror the embedding into its pgvector column, best effort.
    """

    def __init__(
        self,
        session: AsyncSession,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
    ):
        self.skill_repo = SkillRepository(session)
        self.candidate_repo = CandidateRepository(session)
        self.skill_embeddings = SkillEmbeddingService(self.skill_repo, embedding_service)
        self.candidate_embeddings = CandidateEmbeddingService(self.skill_repo, embedding_service)
        self.vector_store = vector_store

    async def save_skill(self, data: Dict[str, Any], skill_id: Optional[int] = None) -> SkillRecord:
        """Create (skill_id=None) or update a skill."""
        if skill_id is None:
            changes = dict(data)
            merged = dict(changes)
        else:
            existing = await self.skill_repo.get_by_id(skill_id)
            if existing is None:
                raise HTTPException(status_code=404, detail="Skill not found")
            previous = {key: getattr(existing, key) for key in data}
            changes = _changed_values(previous, data)
            if not changes:
                logger.info(f"Skill {skill_id} unchanged, nothing to save", extra={"skill_id": skill_id})
                return skill_record(existing)
            merged = {
                "name": existing.name,
                "sub_category_id": existing.sub_category_id,
                "billing_class": existing.billing_class,
                **changes,
            }

        if skill_id is None or changes.keys() & SKILL_TEXT_FIELDS:
            changes.update(await self.skill_embeddings.refresh(merged, skill_id))

        if skill_id is None:
            skill = await self.skill_repo.create(changes)
        else:
            skill = await self.skill_repo.update(skill_id, changes)

        if "name_embedding" in changes:
            await self.vector_store.mirror(SKILL_NAME_VECTOR, skill.id, changes["name_embedding"])

        return skill_record(skill)

    async def save_candidate(
        self,
        data: Dict[str, Any],
        candidate_id: Optional[int] = None,
        skip_vector_update: bool = False,
    ) -> CandidateRecord:
        """
        Create (candidate_id=None) or update a candidate.

        `skip_vector_update` lets callers such as auth flows opt out of the
        pgvector mirror explicitly.
        """
        operation = "create" if candidate_id is None else "update"
        previous: Dict[str, Any] = {}

        if candidate_id is None:
            changes = dict(data)
        else:
            existing = await self.candidate_repo.get_by_id(candidate_id)
            if existing is None:
                raise HTTPException(status_code=404, detail="Candidate not found")
            previous = candidate_to_dict(existing)
            changes = _changed_values(previous, data)
            if not changes:
                logger.info(
                    f"Candidate {candidate_id} unchanged, nothing to save",
                    extra={"candidate_id": candidate_id}
                )
                return candidate_record(existing)

        auth_only = bool(changes) and set(changes) <= AUTH_FIELDS
        if not auth_only and (operation == "create" or changes.keys() & set(BIO_FIELDS)):
            merged = {**previous, **changes}
            changes.update(await self.candidate_embeddings.refresh(merged, candidate_id))

        if candidate_id is None:
            candidate = await self.candidate_repo.create(changes)
        else:
            candidate = await self.candidate_repo.update(candidate_id, changes)

        skip_reason = should_skip_bio_vector_write(
            operation,
            changed_fields=changes.keys(),
            previous=previous,
            current=candidate_to_dict(candidate),
            skip_requested=skip_vector_update,
        )
        if skip_reason:
            logger.info(
                f"Skipping bio_embedding_vec update for candidate {candidate.id} ({skip_reason})",
                extra={"candidate_id": candidate.id}
            )
        elif candidate.bio_embedding:
            mirrored = await self.vector_store.mirror(CANDIDATE_BIO_VECTOR, candidate.id, candidate.bio_embedding)
            if mirrored and operation == "create":
                logger.info(f"Updated bio_embedding_vec for new candidate {candidate.id}")

        return candidate_record(candidate)
