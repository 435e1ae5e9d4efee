"""SQL issued by the repositories, compiled for PostgreSQL."""

import asyncio
from types import SimpleNamespace

from sqlalchemy.dialects import postgresql

from app.repositories.candidate_repo import CandidateRepository
from app.repositories.skill_repo import SkillRepository
from app.repositories.vector_search_repo import VectorHit, VectorSearchRepository
from app.utils.cleaning import escape_like
from fakes import make_candidate, unit_vector


class CapturedResult:
    def __init__(self, rows):
        self.rows = list(rows)

    def scalars(self):
        return self

    def all(self):
        return self.rows

    def __iter__(self):
        return iter(self.rows)


class CapturingSession:
    """Keeps every statement and its parameters; answers with canned rows."""

    def __init__(self, rows=()):
        self.rows = rows
        self.statements = []
        self.params = []

    async def execute(self, statement, params=None):
        self.statements.append(statement)
        self.params.append(params)
        return CapturedResult(self.rows)


def compile_sql(statement, literal_binds=False):
    compiled = statement.compile(
        dialect=postgresql.dialect(),
        compile_kwargs={"literal_binds": literal_binds},
    )
    return " ".join(str(compiled).split()), compiled.params


def test_nearest_candidates_uses_strict_threshold_and_distance_order():
    session = CapturingSession(rows=[SimpleNamespace(id=3, distance=0.12), SimpleNamespace(id=8, distance=0.4)])
    repo = VectorSearchRepository(session, dimension=1536)

    hits = asyncio.run(repo.nearest_candidates(unit_vector(), 0.7, 50))

    sql, _ = compile_sql(session.statements[0])
    assert "(c.bio_embedding_vec <=> CAST(%(query_vec)s AS vector(1536))) < %(max_distance)s" in sql
    assert "<= %(max_distance)s" not in sql
    assert "c.terms_accepted = TRUE" in sql
    assert "ORDER BY c.bio_embedding_vec <=> CAST(%(query_vec)s AS vector(1536)) LIMIT %(limit)s" in sql

    params = session.params[0]
    assert params["max_distance"] == 0.7
    assert params["limit"] == 50
    assert params["query_vec"].startswith("[1.0,0.0,")
    assert hits == [VectorHit(id=3, distance=0.12), VectorHit(id=8, distance=0.4)]


def test_nearest_skills_uses_strict_threshold():
    session = CapturingSession()
    repo = VectorSearchRepository(session, dimension=1536)

    assert asyncio.run(repo.nearest_skills(unit_vector(), 0.7, 10)) == []

    sql, _ = compile_sql(session.statements[0])
    assert "(s.name_embedding_vec <=> CAST(%(query_vec)s AS vector(1536))) < %(max_distance)s" in sql
    assert "ORDER BY s.name_embedding_vec <=> CAST(%(query_vec)s AS vector(1536)) LIMIT %(limit)s" in sql
    assert session.params[0]["limit"] == 10


def test_skill_picker_query_joins_hierarchy_without_threshold():
    row = SimpleNamespace(
        id=1, name="Pipe Fitting", billing_class="B", distance=0.2,
        subcategory_name="Pipework", category_name="Plumbing", discipline_name="Trades",
    )
    session = CapturingSession(rows=[row])
    repo = VectorSearchRepository(session, dimension=1536)

    hits = asyncio.run(repo.nearest_skills_with_hierarchy(unit_vector(), 5))

    sql, _ = compile_sql(session.statements[0])
    assert "LEFT JOIN subcategories sc ON s.sub_category_id = sc.id" in sql
    assert "LEFT JOIN disciplines d ON c.discipline_id = d.id" in sql
    assert "max_distance" not in sql
    assert hits[0].discipline_name == "Trades"
    assert hits[0].distance == 0.2


def test_primary_skill_lookup_orders_by_skill_rank():
    session = CapturingSession(rows=[12, 9])
    repo = CandidateRepository(session)

    ids = asyncio.run(repo.find_ids_by_primary_skills([5, 2], limit=50))

    sql, _ = compile_sql(session.statements[0], literal_binds=True)
    assert "candidates.terms_accepted IS true" in sql
    assert "candidates.primary_skill_id IN (5, 2)" in sql
    assert "ORDER BY CASE candidates.primary_skill_id WHEN 5 THEN 0 WHEN 2 THEN 1 END, candidates.id" in sql
    assert "LIMIT 50" in sql
    assert ids == [12, 9]


def test_primary_skill_lookup_without_skills_skips_query():
    session = CapturingSession()
    assert asyncio.run(CandidateRepository(session).find_ids_by_primary_skills([])) == []
    assert session.statements == []


def test_keyword_lookup_escapes_wildcards():
    session = CapturingSession(rows=[4])
    repo = CandidateRepository(session)

    ids = asyncio.run(repo.find_ids_by_keyword("  50% off_ ", limit=25))

    sql, params = compile_sql(session.statements[0])
    assert "candidates.first_name ILIKE" in sql
    assert "candidates.last_name ILIKE" in sql
    assert "candidates.job_title ILIKE" in sql
    assert " ESCAPE " in sql
    assert "candidates.terms_accepted IS true" in sql
    assert "ORDER BY candidates.id" in sql
    patterns = [value for value in params.values() if isinstance(value, str)]
    assert patterns == ["%50\\% off\\_%"] * 3
    assert 25 in params.values()
    assert ids == [4]


def test_blank_keyword_skips_query():
    session = CapturingSession()
    assert asyncio.run(CandidateRepository(session).find_ids_by_keyword("   ")) == []
    assert session.statements == []


def test_find_by_ids_keeps_requested_order():
    session = CapturingSession(rows=[make_candidate(2), make_candidate(7), make_candidate(3)])
    repo = CandidateRepository(session)

    found = asyncio.run(repo.find_by_ids([3, 99, 7, 2]))

    assert [c.id for c in found] == [3, 7, 2]
    sql, _ = compile_sql(session.statements[0])
    assert "candidates.terms_accepted IS true" in sql


def test_skill_text_search_matches_name_or_group_text():
    session = CapturingSession()
    repo = SkillRepository(session)

    asyncio.run(repo.search_text(" pipe_", limit=10))

    sql, params = compile_sql(session.statements[0])
    assert "skills.name ILIKE" in sql
    assert "skills.group_text ILIKE" in sql
    assert "ORDER BY skills.name" in sql
    assert [v for v in params.values() if isinstance(v, str)] == ["%pipe\\_%"] * 2


def test_escape_like():
    assert escape_like("50%") == "50\\%"
    assert escape_like("a_b") == "a\\_b"
    assert escape_like("C:\\temp") == "C:\\\\temp"
    assert escape_like("Pipe Fitting") == "Pipe Fitting"
