"""HTTP surface: status codes, response shapes and dependency wiring."""

from fastapi.testclient import TestClient

from app.ai_search.candidate_search_service import CandidateSearchService
from app.ai_search.skill_search_service import SkillSearchService
from app.api.dependencies import get_profile_controller, get_search_claims, get_search_controller
from app.config import Settings
from app.controllers.profile_controller import ProfileController
from app.controllers.search_controller import SearchController
from app.database.models import Skill
from app.exceptions import EmbeddingError
from app.main import create_app
from app.models.auth_models import SearchClaims
from app.taxonomy.group_text import TaxonomyPath
from fakes import (
    FakeDatabase,
    FakeEmbeddingService,
    FakeSession,
    FakeVectorStore,
    InMemoryCandidateStore,
    InMemorySkillStore,
    candidate_repo_class,
    make_candidate,
    make_skill,
    skill_repo_class,
    vector_repo_class,
)

SKILLS = [make_skill(1, "Pipe Fitting"), make_skill(2, "Pipe Welding", billing_class="C")]


def make_client(
    embedding=None,
    vector_repo=None,
    candidate_repo=None,
    skill_repo=None,
    claims=SearchClaims(kind="employer", employer_id=42),
    database=None,
):
    app = create_app(Settings())
    embedding = embedding or FakeEmbeddingService()
    database = database or FakeDatabase()
    app.state.database = database
    app.state.embedding_service = embedding

    config = Settings()
    vector_repo = vector_repo or vector_repo_class()
    controller = SearchController(
        candidate_search=CandidateSearchService(
            database,
            embedding,
            config=config,
            vector_repo_cls=vector_repo,
            candidate_repo_cls=candidate_repo or candidate_repo_class(),
        ),
        skill_search=SkillSearchService(
            database,
            embedding,
            config=config,
            vector_repo_cls=vector_repo,
            skill_repo_cls=skill_repo or skill_repo_class(SKILLS),
        ),
    )
    app.dependency_overrides[get_search_controller] = lambda: controller
    if claims is not None:
        app.dependency_overrides[get_search_claims] = lambda: claims
    return TestClient(app)


def test_candidate_search_returns_cards():
    candidates = {
        5: make_candidate(5, first_name="Omar", job_title="Plumber", experience_years=5),
        12: make_candidate(12, first_name="Sara", job_title="Pipe Fitter"),
    }
    client = make_client(
        vector_repo=vector_repo_class(bio_hits=[(5, 0.2)], skill_hits=[(1, 0.3)]),
        candidate_repo=candidate_repo_class(candidates=candidates, skill_owners={1: [5, 12]}),
    )

    response = client.get("/candidates/search", params={"q": "plumber"})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert [c["id"] for c in body["candidates"]] == [5, 12]
    assert body["candidates"][0]["firstName"] == "Omar"
    assert body["candidates"][0]["jobTitle"] == "Plumber"
    assert body["candidates"][0]["experienceYears"] == 5.0


def test_candidate_search_without_claims_is_401():
    client = make_client(claims=None)
    response = client.get("/candidates/search", params={"q": "plumber"})
    assert response.status_code == 401


def test_candidate_search_as_admin_is_403():
    client = make_client(claims=SearchClaims(kind="admin"))
    response = client.get("/candidates/search", params={"q": "plumber"})
    assert response.status_code == 403
    assert response.json()["detail"] == "Admin search not yet supported"


def test_candidate_search_without_query_is_400():
    client = make_client()
    assert client.get("/candidates/search", params={"q": ""}).status_code == 400
    assert client.get("/candidates/search").status_code == 400


def test_blank_candidate_query_is_empty_result():
    client = make_client()
    response = client.get("/candidates/search", params={"q": "   "})
    assert response.status_code == 200
    assert response.json() == {"candidates": [], "total": 0}


def test_candidate_search_fetch_failure_is_500():
    client = make_client(
        vector_repo=vector_repo_class(bio_hits=[(5, 0.2)]),
        candidate_repo=candidate_repo_class(fetch_error=RuntimeError("connection reset")),
    )
    response = client.get("/candidates/search", params={"q": "plumber"})
    assert response.status_code == 500


def test_skill_search_shape():
    client = make_client(vector_repo=vector_repo_class(picker_hits=SKILLS))

    response = client.get("/skills/search", params={"q": "pipe", "limit": 5})

    assert response.status_code == 200
    skill = response.json()["skills"][0]
    assert skill["id"] == "1"
    assert skill["subCategory"] == "Pipework"
    assert skill["fullPath"] == "Trades > Plumbing > Pipework > Pipe Fitting"
    assert skill["billingClass"] == "B"


def test_skill_search_debug_reports_method_and_timings():
    client = make_client(embedding=FakeEmbeddingService(error=EmbeddingError("provider down")))

    response = client.get("/skills/search-debug", params={"q": "pipe"})

    assert response.status_code == 200
    body = response.json()
    assert body["method"] == "text"
    assert len(body["skills"]) == 2
    assert set(body["timings"]) >= {"totalMs", "embeddingMs", "dbMs"}
    assert "error" not in body


def test_skill_search_debug_fatal_failure_is_500_with_empty_result():
    client = make_client(
        embedding=FakeEmbeddingService(configured=False),
        skill_repo=skill_repo_class(SKILLS, search_error=RuntimeError("connection refused")),
    )

    response = client.get("/skills/search-debug", params={"q": "pipe"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to search skills"
    assert body["skills"] == []
    assert body["method"] == "text"
    assert "totalMs" in body["timings"]


def test_get_skill_and_404():
    client = make_client()

    response = client.get("/skills/2")
    assert response.status_code == 200
    assert response.json()["skill"]["name"] == "Pipe Welding"

    assert client.get("/skills/99").status_code == 404


def test_candidate_auth_update_route_skips_vector_write():
    app = create_app(Settings())
    embedding = FakeEmbeddingService()
    vector_store = FakeVectorStore()
    controller = ProfileController(FakeSession(), embedding, vector_store)
    controller.skill_repo = InMemorySkillStore([Skill(id=3, name="Pipe Fitting")])
    controller.candidate_repo = InMemoryCandidateStore([
        make_candidate(1, job_title="Plumber", primary_skill_id=3, experience_years=5, bio_embedding=[0.1])
    ])
    controller.candidate_embeddings.skill_repo = controller.skill_repo
    app.dependency_overrides[get_profile_controller] = lambda: controller
    client = TestClient(app)

    response = client.patch("/candidates/1", json={"password_reset_token": "f00d"})

    assert response.status_code == 200
    assert response.json()["id"] == 1
    assert embedding.calls == []
    assert vector_store.calls == []


def test_create_skill_route():
    app = create_app(Settings())
    embedding = FakeEmbeddingService()
    vector_store = FakeVectorStore()
    controller = ProfileController(FakeSession(), embedding, vector_store)
    controller.skill_repo = InMemorySkillStore(
        paths={10: TaxonomyPath(discipline="Trades", category="Plumbing", subcategory="Pipework")}
    )
    controller.skill_embeddings.skill_repo = controller.skill_repo
    app.dependency_overrides[get_profile_controller] = lambda: controller
    client = TestClient(app)

    response = client.post("/skills", json={"name": "Pipe Fitting", "sub_category_id": 10, "billing_class": "B"})

    assert response.status_code == 201
    body = response.json()
    assert body["group_text"].startswith("Major Discipline: Trades")
    assert body["has_embedding"] is True
    assert len(vector_store.calls) == 1

    invalid = client.post("/skills", json={"name": "Pipe Fitting", "billing_class": "Z"})
    assert invalid.status_code == 422


def test_health_reports_database_and_provider():
    client = make_client(
        embedding=FakeEmbeddingService(configured=False),
        database=FakeDatabase(healthy=False),
    )

    body = client.get("/health").json()

    assert body["status"] == "degraded"
    assert body["checks"] == {"database": "error", "embedding_provider": "not_configured"}
