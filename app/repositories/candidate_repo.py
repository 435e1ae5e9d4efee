"""Repository for candidate profile operations."""
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import case, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database.models import Candidate
from app.utils.cleaning import escape_like
from app.utils.logging import get_logger

logger = get_logger(__name__)


def candidate_to_dict(candidate: Candidate) -> Dict[str, Any]:
    """Column values of a candidate, keyed by attribute name."""
    return {column.key: getattr(candidate, column.key) for column in Candidate.__table__.columns}


class CandidateRepository:
    """Repository for candidate CRUD and lookup operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, candidate_id: int, depth: int = 0) -> Optional[Candidate]:
        """Get candidate by ID; depth >= 1 populates the primary skill."""
        query = select(Candidate).where(Candidate.id == candidate_id)
        if depth >= 1:
            query = query.options(selectinload(Candidate.primary_skill))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_by_ids(self, candidate_ids: Sequence[int], accepted_only: bool = True) -> List[Candidate]:
        """
        Fetch candidates by ID, preserving the order of `candidate_ids`.

        IDs that do not exist (or have not accepted terms) are dropped.
        """
        if not candidate_ids:
            return []

        query = (
            select(Candidate)
            .where(Candidate.id.in_(list(candidate_ids)))
            .options(selectinload(Candidate.primary_skill))
        )
        if accepted_only:
            query = query.where(Candidate.terms_accepted.is_(True))
        result = await self.session.execute(query)
        by_id = {c.id: c for c in result.scalars().all()}
        return [by_id[cid] for cid in candidate_ids if cid in by_id]

    async def find_ids_by_primary_skills(self, skill_ids: Sequence[int], limit: int = 50) -> List[int]:
        """
        IDs of accepted candidates whose primary skill is in `skill_ids`.

        Ordered by the position of their skill in `skill_ids`, then by ID.
        """
        if not skill_ids:
            return []

        skill_rank = case(
            {skill_id: rank for rank, skill_id in enumerate(skill_ids)},
            value=Candidate.primary_skill_id,
        )
        query = (
            select(Candidate.id)
            .where(
                Candidate.terms_accepted.is_(True),
                Candidate.primary_skill_id.in_(list(skill_ids)),
            )
            .order_by(skill_rank, Candidate.id)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def find_ids_by_keyword(self, keyword: str, limit: int = 50) -> List[int]:
        """IDs of accepted candidates whose first name, last name or job title contains `keyword`."""
        if not keyword or not keyword.strip():
            return []

        pattern = f"%{escape_like(keyword.strip())}%"
        query = (
            select(Candidate.id)
            .where(
                Candidate.terms_accepted.is_(True),
                or_(
                    Candidate.first_name.ilike(pattern, escape="\\"),
                    Candidate.last_name.ilike(pattern, escape="\\"),
                    Candidate.job_title.ilike(pattern, escape="\\"),
                ),
            )
            .order_by(Candidate.id)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create(self, candidate_data: dict) -> Candidate:
        """Create a new candidate record."""
        try:
            candidate = Candidate(**candidate_data)
            self.session.add(candidate)
            await self.session.commit()
            await self.session.refresh(candidate)
            logger.info(
                f"Created candidate record: id={candidate.id}",
                extra={"candidate_id": candidate.id}
            )
            return candidate
        except IntegrityError as e:
            await self.session.rollback()
            logger.error(f"Failed to create candidate: {e}", extra={"error": str(e)})
            raise

    async def update(self, candidate_id: int, update_data: dict) -> Optional[Candidate]:
        """Update candidate record."""
        candidate = await self.get_by_id(candidate_id)
        if not candidate:
            return None

        for key, value in update_data.items():
            if hasattr(candidate, key):
                setattr(candidate, key, value)

        await self.session.commit()
        await self.session.refresh(candidate)
        logger.info(f"Updated candidate record: id={candidate_id}", extra={"candidate_id": candidate_id})
        return candidate
