"""Skill search for the skill picker, with a timed diagnostics variant."""
import time
from dataclasses import dataclass, field
from typing import List, Optional, Type

from app.config import Settings, settings as default_settings
from app.database.connection import Database
from app.database.models import Skill
from app.exceptions import EmbeddingError
from app.models.search_models import SearchMethod, SearchTimings, SkillSummary
from app.repositories.skill_repo import SkillRepository, skill_path
from app.repositories.vector_search_repo import SkillVectorHit, VectorSearchRepository
from app.services.embedding_service import EmbeddingService
from app.taxonomy.group_text import TaxonomyPath
from app.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SkillSearchResult:
    """Skills found plus the method that served them and stage timings."""
    skills: List[SkillSummary] = field(default_factory=list)
    method: SearchMethod = "text"
    timings: SearchTimings = field(default_factory=SearchTimings)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)


def summary_from_path(skill_id: int, path: TaxonomyPath) -> SkillSummary:
    return SkillSummary(
        id=str(skill_id),
        name=path.skill,
        billing_class=path.billing_class,
        sub_category=path.subcategory or None,
        category=path.category or None,
        discipline=path.discipline or None,
        full_path=path.full_path,
    )


def summary_from_skill(skill: Skill) -> SkillSummary:
    """Summary of a skill loaded with its hierarchy."""
    return summary_from_path(skill.id, skill_path(skill))


def summary_from_hit(hit: SkillVectorHit) -> SkillSummary:
    return summary_from_path(
        hit.id,
        TaxonomyPath(
            discipline=hit.discipline_name,
            category=hit.category_name,
            subcategory=hit.subcategory_name,
            skill=hit.name,
            billing_class=hit.billing_class,
        ),
    )


class SkillSearchService:
    """
    Nearest-neighbour skill search over `skills.name_embedding_vec`.

    Falls back to a substring match on skill name and group text whenever the
    vector path is unavailable or fails.
    """

    def __init__(
        self,
        database: Database,
        embedding_service: EmbeddingService,
        config: Optional[Settings] = None,
        vector_repo_cls: Type[VectorSearchRepository] = VectorSearchRepository,
        skill_repo_cls: Type[SkillRepository] = SkillRepository,
    ):
        self.database = database
        self.embedding_service = embedding_service
        self.config = config or default_settings
        self.vector_repo_cls = vector_repo_cls
        self.skill_repo_cls = skill_repo_cls

    async def search(self, query: str, limit: Optional[int] = None) -> SkillSearchResult:
        """
        Search skills for a query.

        Raises only when the text fallback itself fails.
        """
        started = time.perf_counter()
        timings = SearchTimings()
        search_query = (query or "").strip()
        limit = limit or self.config.default_skill_search_limit

        if len(search_query) < self.config.min_query_length:
            timings.total_ms = _elapsed_ms(started)
            return SkillSearchResult(skills=[], method="text", timings=timings)

        if self.embedding_service.is_configured:
            try:
                skills = await self._vector_search(search_query, limit, timings)
                timings.total_ms = _elapsed_ms(started)
                logger.info(
                    f"pgvector skill search completed: {len(skills)} skills",
                    extra={"query": search_query[:100], "method": "pgvector", "timings": timings.model_dump()}
                )
                return SkillSearchResult(skills=skills, method="pgvector", timings=timings)
            except Exception as e:
                logger.error(
                    f"Vector skill search failed, falling back to text search: {e}",
                    extra={"query": search_query[:100], "error": str(e)},
                    exc_info=not isinstance(e, EmbeddingError)
                )
        else:
            logger.info(
                "Embedding provider not configured, using text search",
                extra={"query": search_query[:100]}
            )

        skills = await self._text_search(search_query, limit, timings)
        timings.total_ms = _elapsed_ms(started)
        logger.info(
            f"Text skill search completed: {len(skills)} skills",
            extra={"query": search_query[:100], "method": "text", "timings": timings.model_dump()}
        )
        return SkillSearchResult(skills=skills, method="text", timings=timings)

    async def _vector_search(self, search_query: str, limit: int, timings: SearchTimings) -> List[SkillSummary]:
        embedding_started = time.perf_counter()
        try:
            query_vector = await self.embedding_service.generate_embedding(search_query)
        finally:
            timings.embedding_ms = _elapsed_ms(embedding_started)
        if query_vector is None:
            raise EmbeddingError("Embedding provider returned no embedding")

        db_started = time.perf_counter()
        async with self.database.session() as session:
            repo = self.vector_repo_cls(session, dimension=self.config.embedding_dimension)
            hits = await repo.nearest_skills_with_hierarchy(query_vector, limit)
        timings.db_ms = _elapsed_ms(db_started)

        return [summary_from_hit(hit) for hit in hits]

    async def _text_search(self, search_query: str, limit: int, timings: SearchTimings) -> List[SkillSummary]:
        db_started = time.perf_counter()
        async with self.database.session() as session:
            repo = self.skill_repo_cls(session)
            skills = await repo.search_text(search_query, limit=limit)
        timings.db_ms = _elapsed_ms(db_started)
        return [summary_from_skill(skill) for skill in skills]

    async def get_skill(self, skill_id: int) -> Optional[SkillSummary]:
        """Single skill with its taxonomy path, or None."""
        async with self.database.session() as session:
            repo = self.skill_repo_cls(session)
            skill = await repo.get_by_id(skill_id, depth=2)
        if skill is None:
            return None
        return summary_from_skill(skill)
