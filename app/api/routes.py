"""API route definitions."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import (
    get_embedding_service,
    get_profile_controller,
    get_search_claims,
    get_search_controller,
)
from app.controllers.profile_controller import ProfileController
from app.controllers.search_controller import SearchController
from app.database.connection import Database, get_database
from app.models.auth_models import SearchClaims
from app.models.profile_models import (
    CandidateCreate,
    CandidateRecord,
    CandidateUpdate,
    SkillCreate,
    SkillRecord,
    SkillUpdate,
)
from app.models.search_models import (
    CandidateSearchResponse,
    SkillDetailResponse,
    SkillSearchDebugResponse,
    SkillSearchResponse,
)
from app.services.embedding_service import EmbeddingService
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/candidates/search", response_model=CandidateSearchResponse, status_code=200)
async def search_candidates(
    q: str = Query("", description="Free-text query: job role, skill or candidate name"),
    limit: Optional[int] = Query(None, ge=1, le=100),
    claims: Optional[SearchClaims] = Depends(get_search_claims),
    controller: SearchController = Depends(get_search_controller),
):
    """
    Hybrid candidate search for employers.

    Candidates whose bio vector is close to the query come first, then
    candidates whose primary skill is close to the query. Name/job title
    keyword matches are used only when neither vector search finds anything.
    """
    return await controller.search_candidates(q, limit, claims)


@router.get(
    "/skills/search",
    response_model=SkillSearchResponse,
    response_model_exclude_none=True,
    status_code=200,
)
async def search_skills(
    q: str = Query(""),
    limit: Optional[int] = Query(None, ge=1, le=100),
    controller: SearchController = Depends(get_search_controller),
):
    """Skill picker: nearest skills by group text embedding, text match fallback."""
    return await controller.search_skills(q, limit)


@router.get(
    "/skills/search-debug",
    response_model=SkillSearchDebugResponse,
    response_model_exclude_none=True,
    status_code=200,
)
async def search_skills_debug(
    q: str = Query(""),
    limit: Optional[int] = Query(None, ge=1, le=100),
    controller: SearchController = Depends(get_search_controller),
):
    """
    Same as /skills/search, plus the method that served the request
    ("pgvector" or "text") and timings (totalMs, embeddingMs, dbMs).
    """
    return await controller.search_skills_debug(q, limit)


@router.get(
    "/skills/{skill_id}",
    response_model=SkillDetailResponse,
    response_model_exclude_none=True,
    status_code=200,
)
async def get_skill(
    skill_id: int,
    controller: SearchController = Depends(get_search_controller),
):
    """Fetch one skill with its discipline > category > subcategory path."""
    return await controller.get_skill(skill_id)


@router.post("/skills", response_model=SkillRecord, status_code=201)
async def create_skill(
    skill: SkillCreate,
    controller: ProfileController = Depends(get_profile_controller),
):
    """Create a skill; group text and embedding are generated on save."""
    return await controller.save_skill(skill.model_dump())


@router.patch("/skills/{skill_id}", response_model=SkillRecord, status_code=200)
async def update_skill(
    skill_id: int,
    skill: SkillUpdate,
    controller: ProfileController = Depends(get_profile_controller),
):
    """Update a skill; group text and embedding are regenerated when the name or hierarchy changes."""
    return await controller.save_skill(skill.model_dump(exclude_unset=True), skill_id=skill_id)


@router.post("/candidates", response_model=CandidateRecord, status_code=201)
async def create_candidate(
    candidate: CandidateCreate,
    skip_vector_update: bool = Query(False),
    controller: ProfileController = Depends(get_profile_controller),
):
    """Create a candidate; the bio embedding is generated when job title, primary skill and experience are set."""
    return await controller.save_candidate(
        candidate.model_dump(), skip_vector_update=skip_vector_update
    )


@router.patch("/candidates/{candidate_id}", response_model=CandidateRecord, status_code=200)
async def update_candidate(
    candidate_id: int,
    candidate: CandidateUpdate,
    skip_vector_update: bool = Query(False),
    controller: ProfileController = Depends(get_profile_controller),
):
    """Update a candidate. Auth-only updates never re-embed or touch the vector column."""
    return await controller.save_candidate(
        candidate.model_dump(exclude_unset=True),
        candidate_id=candidate_id,
        skip_vector_update=skip_vector_update,
    )


@router.get("/health")
async def health_check(
    database: Database = Depends(get_database),
    embedding_service: EmbeddingService = Depends(get_embedding_service),
):
    """Health check: database connectivity and embedding provider configuration."""
    health_status = {
        "status": "healthy",
        "service": "Talent Match",
        "checks": {
            "database": "ok",
            "embedding_provider": "configured" if embedding_service.is_configured else "not_configured",
        },
    }

    if not await database.ping():
        health_status["status"] = "degraded"
        health_status["checks"]["database"] = "error"
        logger.warning("Health check: database unreachable")

    return health_status
