"""FastAPI dependency factories."""
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.ai_search.candidate_search_service import CandidateSearchService
from app.ai_search.skill_search_service import SkillSearchService
from app.config import Settings, settings
from app.controllers.profile_controller import ProfileController
from app.controllers.search_controller import SearchController
from app.database.connection import Database, get_database, get_db_session
from app.models.auth_models import SearchClaims
from app.services.embedding_service import EmbeddingService
from app.services.vector_store import VectorStore


def get_settings() -> Settings:
    return settings


def get_embedding_service(request: Request) -> EmbeddingService:
    """Embedding client bound to the application's shared HTTP client."""
    return request.app.state.embedding_service


def get_vector_store(
    database: Database = Depends(get_database),
    config: Settings = Depends(get_settings),
) -> VectorStore:
    return VectorStore(database, config=config)


def get_search_claims(request: Request) -> Optional[SearchClaims]:
    """Claims placed on the request by the upstream authentication layer."""
    claims = getattr(request.state, "claims", None)
    if claims is None or isinstance(claims, SearchClaims):
        return claims
    return SearchClaims.model_validate(claims)


async def get_search_controller(
    database: Database = Depends(get_database),
    embedding_service: EmbeddingService = Depends(get_embedding_service),
    config: Settings = Depends(get_settings),
) -> SearchController:
    """Create SearchController with dependencies."""
    return SearchController(
        candidate_search=CandidateSearchService(database, embedding_service, config=config),
        skill_search=SkillSearchService(database, embedding_service, config=config),
    )


async def get_profile_controller(
    session: AsyncSession = Depends(get_db_session),
    embedding_service: EmbeddingService = Depends(get_embedding_service),
    vector_store: VectorStore = Depends(get_vector_store),
) -> ProfileController:
    """Create ProfileController with dependencies."""
    return ProfileController(session, embedding_service, vector_store)
