"""Skill picker search with pgvector and text fallback."""

import asyncio

from app.ai_search.skill_search_service import SkillSearchService
from app.config import Settings
from app.exceptions import EmbeddingError
from fakes import FakeDatabase, FakeEmbeddingService, make_skill, skill_repo_class, vector_repo_class

SKILLS = [
    make_skill(1, "Pipe Fitting"),
    make_skill(2, "Pipe Welding", billing_class="C", subcategory="Welding", category="Metalwork"),
    make_skill(3, "Electrical Wiring", subcategory="Wiring", category="Electrical"),
]


def make_service(embedding, vector_repo=None, skill_repo=None):
    return SkillSearchService(
        FakeDatabase(),
        embedding,
        config=Settings(),
        vector_repo_cls=vector_repo or vector_repo_class(),
        skill_repo_cls=skill_repo or skill_repo_class(SKILLS),
    )


def test_vector_search_returns_hierarchy_and_timings():
    service = make_service(FakeEmbeddingService(), vector_repo=vector_repo_class(picker_hits=SKILLS[:2]))

    result = asyncio.run(service.search("pipe", limit=5))

    assert result.method == "pgvector"
    assert [s.name for s in result.skills] == ["Pipe Fitting", "Pipe Welding"]
    first = result.skills[0]
    assert first.id == "1"
    assert first.discipline == "Trades"
    assert first.full_path == "Trades > Plumbing > Pipework > Pipe Fitting"
    assert result.timings.embedding_ms is not None
    assert result.timings.db_ms is not None
    assert result.timings.total_ms >= 0


def test_embedding_failure_falls_back_to_text_search():
    embedding = FakeEmbeddingService(error=EmbeddingError("Failed to generate embedding: 500"))
    service = make_service(embedding, vector_repo=vector_repo_class(picker_hits=SKILLS))

    result = asyncio.run(service.search("pipe"))

    assert result.method == "text"
    assert [s.name for s in result.skills] == ["Pipe Fitting", "Pipe Welding"]
    assert result.timings.embedding_ms is not None
    assert result.timings.db_ms is not None


def test_vector_query_failure_falls_back_to_text_search():
    vector_repo = vector_repo_class(skill_error=RuntimeError('type "vector" does not exist'))
    service = make_service(FakeEmbeddingService(), vector_repo=vector_repo)

    result = asyncio.run(service.search("wiring"))

    assert result.method == "text"
    assert [s.id for s in result.skills] == ["3"]


def test_unconfigured_provider_uses_text_search():
    embedding = FakeEmbeddingService(configured=False)
    service = make_service(embedding)

    result = asyncio.run(service.search("pipe", limit=1))

    assert result.method == "text"
    assert len(result.skills) == 1
    assert result.timings.embedding_ms is None
    assert embedding.calls == []


def test_short_query_returns_nothing():
    embedding = FakeEmbeddingService()
    result = asyncio.run(make_service(embedding).search("p"))
    assert result.skills == []
    assert embedding.calls == []


def test_get_skill():
    service = make_service(FakeEmbeddingService())

    skill = asyncio.run(service.get_skill(2))
    assert skill.name == "Pipe Welding"
    assert skill.billing_class == "C"
    assert skill.category == "Metalwork"

    assert asyncio.run(service.get_skill(99)) is None
