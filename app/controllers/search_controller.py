"""Controller for candidate and skill search operations."""
import time
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import JSONResponse

from app.ai_search.candidate_search_service import CandidateSearchService
from app.ai_search.skill_search_service import SkillSearchService
from app.exceptions import SearchAuthorizationError, SearchExecutionError
from app.models.auth_models import SearchClaims
from app.models.search_models import (
    CandidateSearchResponse,
    SearchTimings,
    SkillDetailResponse,
    SkillSearchDebugResponse,
    SkillSearchResponse,
)
from app.utils.logging import get_logger

logger = get_logger(__name__)


class SearchController:
    """Translates search service outcomes into HTTP responses."""

    def __init__(
        self,
        candidate_search: CandidateSearchService,
        skill_search: SkillSearchService,
    ):
        self.candidate_search = candidate_search
        self.skill_search = skill_search

    async def search_candidates(
        self,
        query: str,
        limit: Optional[int],
        claims: Optional[SearchClaims],
    ) -> CandidateSearchResponse:
        """Employer candidate search; 200 with an empty list is a valid outcome."""
        try:
            return await self.candidate_search.search(query, limit=limit, claims=claims)
        except SearchAuthorizationError as e:
            raise HTTPException(status_code=e.status_code, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except SearchExecutionError as e:
            raise HTTPException(status_code=500, detail=str(e) or "Search failed")
        except Exception as e:
            logger.error(
                f"Search error: {e}",
                extra={"query": (query or "")[:100], "error": str(e)},
                exc_info=True
            )
            raise HTTPException(status_code=500, detail="Search failed")

    async def search_skills(self, query: str, limit: Optional[int]) -> SkillSearchResponse:
        """Skill picker search."""
        try:
            result = await self.skill_search.search(query, limit=limit)
        except Exception as e:
            logger.error(
                f"Error searching skills: {e}",
                extra={"query": (query or "")[:100], "error": str(e)},
                exc_info=True
            )
            raise HTTPException(status_code=500, detail="Failed to search skills")
        return SkillSearchResponse(skills=result.skills)

    async def search_skills_debug(self, query: str, limit: Optional[int]):
        """
        Skill search reporting the method used and per-stage timings.

        Fatal failures return HTTP 500 with an empty result instead of raising.
        """
        started = time.perf_counter()
        try:
            result = await self.skill_search.search(query, limit=limit)
        except Exception as e:
            logger.error(
                f"Skills search debug fatal error: {e}",
                extra={"query": (query or "")[:100], "error": str(e)},
                exc_info=True
            )
            body = SkillSearchDebugResponse(
                error="Failed to search skills",
                skills=[],
                method="text",
                timings=SearchTimings(total_ms=round((time.perf_counter() - started) * 1000, 1)),
            )
            return JSONResponse(
                status_code=500,
                content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
            )

        return SkillSearchDebugResponse(skills=result.skills, method=result.method, timings=result.timings)

    async def get_skill(self, skill_id: int) -> SkillDetailResponse:
        """Single skill with its taxonomy path."""
        try:
            skill = await self.skill_search.get_skill(skill_id)
        except Exception as e:
            logger.error(f"Error fetching skill {skill_id}: {e}", extra={"skill_id": skill_id}, exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to fetch skill")
        if skill is None:
            raise HTTPException(status_code=404, detail="Skill not found")
        return SkillDetailResponse(skill=skill)
