"""
Hybrid candidate search: bio vectors, skill vectors and keyword fallback.

Retrieval runs in up to three independent steps:

1. Bio-vector search: nearest candidates by `bio_embedding_vec`.
2. Skill-vector search: nearest skills by `name_embedding_vec`, resolved to
   the candidates whose primary skill is one of them.
3. Keyword search on first name, last name and job title. This runs only
   when both vector searches came back empty.

Steps 1 and 2 run concurrently, each in its own session; a failure in either
is logged and counts as "found nothing". Results are merged bio > skill >
keyword (see `merge.py`) and materialized in merge order. Only a failure of
that final fetch is reported to the caller.
"""
import asyncio
import time
from dataclasses import dataclass, field
from typing import List, Optional, Type

from app.ai_search.merge import MatchCandidate, merge_candidate_ids
from app.config import Settings, settings as default_settings
from app.database.connection import Database
from app.database.models import Candidate
from app.exceptions import EmbeddingError, SearchAuthorizationError, SearchExecutionError
from app.models.auth_models import SearchClaims
from app.models.search_models import CandidateSearchResponse, CandidateSummary, SearchMethod
from app.repositories.candidate_repo import CandidateRepository
from app.repositories.vector_search_repo import VectorSearchRepository
from app.services.embedding_service import EmbeddingService
from app.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CandidateMatchSet:
    """Outcome of the retrieval steps, before records are fetched."""
    matches: List[MatchCandidate] = field(default_factory=list)
    method: SearchMethod = "text"
    bio_ids: List[int] = field(default_factory=list)
    skill_ids: List[int] = field(default_factory=list)
    keyword_ids: List[int] = field(default_factory=list)

    @property
    def candidate_ids(self) -> List[int]:
        return [m.candidate_id for m in self.matches]


def to_candidate_summary(candidate: Candidate) -> CandidateSummary:
    """Map a candidate row to the search result card."""
    return CandidateSummary(
        id=candidate.id,
        first_name=candidate.first_name or "",
        last_name=candidate.last_name or "",
        job_title=candidate.job_title or "",
        location=candidate.location or "",
        nationality=candidate.nationality or "",
        experience_years=float(candidate.experience_years or 0),
        saudi_experience=float(candidate.saudi_experience or 0),
        profile_picture_url=candidate.profile_picture_url or None,
        billing_class=candidate.billing_class or None,
    )


class CandidateSearchService:
    """Employer-facing candidate search over the hybrid retrieval pipeline."""

    def __init__(
        self,
        database: Database,
        embedding_service: EmbeddingService,
        config: Optional[Settings] = None,
        vector_repo_cls: Type[VectorSearchRepository] = VectorSearchRepository,
        candidate_repo_cls: Type[CandidateRepository] = CandidateRepository,
    ):
        self.database = database
        self.embedding_service = embedding_service
        self.config = config or default_settings
        self.vector_repo_cls = vector_repo_cls
        self.candidate_repo_cls = candidate_repo_cls

    @staticmethod
    def authorize(claims: Optional[SearchClaims]) -> None:
        """Only employers may search; raise SearchAuthorizationError otherwise."""
        if claims is None:
            raise SearchAuthorizationError("Unauthorized", status_code=401)
        if claims.kind == "admin":
            raise SearchAuthorizationError("Admin search not yet supported", status_code=403)
        if claims.kind != "employer":
            raise SearchAuthorizationError("Unauthorized", status_code=403)

    async def search(
        self,
        query: str,
        limit: Optional[int] = None,
        claims: Optional[SearchClaims] = None,
    ) -> CandidateSearchResponse:
        """
        Search candidates for a free-text query.

        Args:
            query: Free-text query (job role, skill, name ...)
            limit: Maximum number of candidates (default from settings)
            claims: Caller identity; must be an employer

        Returns:
            CandidateSearchResponse; an empty result is a valid answer.

        Raises:
            SearchAuthorizationError: Caller may not search.
            ValueError: Query missing.
            SearchExecutionError: Results could not be materialized.
        """
        self.authorize(claims)

        if not query or not isinstance(query, str):
            raise ValueError("Query is required")

        search_query = query.strip()
        limit = limit or self.config.default_search_limit
        if len(search_query) < self.config.min_query_length:
            return CandidateSearchResponse(candidates=[], total=0)

        started = time.perf_counter()
        match_set = await self.find_candidate_ids(search_query, limit)
        candidates = await self.fetch_candidates(match_set.candidate_ids)

        logger.info(
            f"Candidate search completed: {len(candidates)} results via {match_set.method}",
            extra={
                "query": search_query[:100],
                "method": match_set.method,
                "bio_count": len(match_set.bio_ids),
                "skill_count": len(match_set.skill_ids),
                "keyword_count": len(match_set.keyword_ids),
                "total_results": len(candidates),
                "employer_id": claims.employer_id if claims else None,
                "elapsed_ms": round((time.perf_counter() - started) * 1000, 1),
            }
        )

        summaries = [to_candidate_summary(c) for c in candidates]
        return CandidateSearchResponse(candidates=summaries, total=len(summaries))

    async def find_candidate_ids(self, search_query: str, limit: int) -> CandidateMatchSet:
        """Run the retrieval steps and merge their IDs."""
        query_vector = await self._embed_query(search_query)

        bio_ids: List[int] = []
        skill_ids: List[int] = []
        if query_vector is not None:
            bio_ids, skill_ids = await asyncio.gather(
                self._bio_vector_ids(query_vector),
                self._skill_vector_ids(query_vector),
            )

        keyword_ids: List[int] = []
        if not bio_ids and not skill_ids:
            keyword_ids = await self._keyword_ids(search_query)

        method: SearchMethod = "pgvector" if bio_ids or skill_ids else "text"
        matches = merge_candidate_ids(bio_ids, skill_ids, keyword_ids, limit)

        logger.info(
            f"Total candidates after combining: {len(matches)} "
            f"(bio: {len(bio_ids)}, skill: {len(skill_ids)}, keyword: {len(keyword_ids)})",
            extra={"query": search_query[:100], "method": method}
        )
        return CandidateMatchSet(
            matches=matches,
            method=method,
            bio_ids=bio_ids,
            skill_ids=skill_ids,
            keyword_ids=keyword_ids,
        )

    async def fetch_candidates(self, candidate_ids: List[int]) -> List[Candidate]:
        """Materialize candidates in merge order."""
        if not candidate_ids:
            return []
        try:
            async with self.database.session() as session:
                repo = self.candidate_repo_cls(session)
                return await repo.find_by_ids(candidate_ids)
        except Exception as e:
            logger.error(
                f"Failed to fetch search results: {e}",
                extra={"candidate_ids": candidate_ids, "error": str(e)},
                exc_info=True
            )
            raise SearchExecutionError("Search failed") from e

    async def _embed_query(self, search_query: str) -> Optional[List[float]]:
        if not self.embedding_service.is_configured:
            logger.info("Embedding provider not configured, using keyword search")
            return None
        try:
            return await self.embedding_service.generate_embedding(search_query)
        except EmbeddingError as e:
            logger.warning(
                f"Query embedding failed, falling back to keyword search: {e}",
                extra={"query": search_query[:100], "error": str(e)}
            )
        except Exception as e:
            logger.warning(
                f"Vector search failed, falling back to keyword search: {e}",
                extra={"query": search_query[:100], "error": str(e)},
                exc_info=True
            )
        return None

    async def _bio_vector_ids(self, query_vector: List[float]) -> List[int]:
        threshold = self.config.vector_distance_threshold
        try:
            async with self.database.session() as session:
                repo = self.vector_repo_cls(session, dimension=self.config.embedding_dimension)
                hits = await repo.nearest_candidates(
                    query_vector, threshold, self.config.bio_vector_limit
                )
        except Exception as e:
            logger.warning(
                f"Bio vector search failed: {e}",
                extra={"error": str(e)},
                exc_info=True
            )
            return []

        ids = [hit.id for hit in hits if hit.distance < threshold]
        logger.debug(f"Bio vector search found {len(ids)} candidates")
        return ids[:self.config.bio_vector_limit]

    async def _skill_vector_ids(self, query_vector: List[float]) -> List[int]:
        threshold = self.config.vector_distance_threshold
        try:
            async with self.database.session() as session:
                vector_repo = self.vector_repo_cls(session, dimension=self.config.embedding_dimension)
                hits = await vector_repo.nearest_skills(
                    query_vector, threshold, self.config.skill_vector_limit
                )
                skill_ids = [hit.id for hit in hits if hit.distance < threshold]
                skill_ids = skill_ids[:self.config.skill_vector_limit]
                if not skill_ids:
                    logger.debug("No skills within distance threshold")
                    return []

                candidate_repo = self.candidate_repo_cls(session)
                ids = await candidate_repo.find_ids_by_primary_skills(
                    skill_ids, limit=self.config.skill_candidate_limit
                )
        except Exception as e:
            logger.warning(
                f"Skill vector search failed: {e}",
                extra={"error": str(e)},
                exc_info=True
            )
            return []

        logger.debug(
            f"Skill vector search found {len(ids)} candidates across {len(skill_ids)} skills",
            extra={"skill_ids": skill_ids}
        )
        return ids

    async def _keyword_ids(self, search_query: str) -> List[int]:
        try:
            async with self.database.session() as session:
                repo = self.candidate_repo_cls(session)
                ids = await repo.find_ids_by_keyword(search_query, limit=self.config.keyword_limit)
        except Exception as e:
            logger.error(
                f"Keyword search failed: {e}",
                extra={"query": search_query[:100], "error": str(e)},
                exc_info=True
            )
            raise SearchExecutionError("Search failed") from e

        logger.debug(f"Keyword search found {len(ids)} candidates")
        return ids
