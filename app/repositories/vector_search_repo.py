"""Raw pgvector nearest-neighbour queries."""
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.vector_store import to_vector_literal


@dataclass(frozen=True)
class VectorHit:
    """One nearest-neighbour row: record ID and cosine distance to the query."""
    id: int
    distance: float


@dataclass(frozen=True)
class SkillVectorHit:
    """Skill nearest-neighbour row joined with its taxonomy names."""
    id: int
    distance: float
    name: Optional[str]
    billing_class: Optional[str]
    subcategory_name: Optional[str]
    category_name: Optional[str]
    discipline_name: Optional[str]


class VectorSearchRepository:
    """Cosine-distance (`<=>`) searches over the pgvector mirror columns."""

    def __init__(self, session: AsyncSession, dimension: int = 1536):
        self.session = session
        self.dimension = dimension

    def _cast(self) -> str:
        return f"CAST(:query_vec AS vector({self.dimension}))"

    async def nearest_candidates(
        self, query_vector: List[float], max_distance: float, limit: int
    ) -> List[VectorHit]:
        """Accepted candidates with bio distance strictly below `max_distance`, nearest first."""
        statement = text(f"""
            SELECT c.id, c.bio_embedding_vec <=> {self._cast()} AS distance
            FROM candidates c
            WHERE c.bio_embedding_vec IS NOT NULL
              AND c.terms_accepted = TRUE
              AND (c.bio_embedding_vec <=> {self._cast()}) < :max_distance
            ORDER BY c.bio_embedding_vec <=> {self._cast()}
            LIMIT :limit
        """)
        result = await self.session.execute(
            statement,
            {"query_vec": to_vector_literal(query_vector), "max_distance": max_distance, "limit": limit},
        )
        return [VectorHit(id=int(row.id), distance=float(row.distance)) for row in result]

    async def nearest_skills(
        self, query_vector: List[float], max_distance: float, limit: int
    ) -> List[VectorHit]:
        """Skills with name distance strictly below `max_distance`, nearest first."""
        statement = text(f"""
            SELECT s.id, s.name_embedding_vec <=> {self._cast()} AS distance
            FROM skills s
            WHERE s.name_embedding_vec IS NOT NULL
              AND (s.name_embedding_vec <=> {self._cast()}) < :max_distance
            ORDER BY s.name_embedding_vec <=> {self._cast()}
            LIMIT :limit
        """)
        result = await self.session.execute(
            statement,
            {"query_vec": to_vector_literal(query_vector), "max_distance": max_distance, "limit": limit},
        )
        return [VectorHit(id=int(row.id), distance=float(row.distance)) for row in result]

    async def nearest_skills_with_hierarchy(
        self, query_vector: List[float], limit: int
    ) -> List[SkillVectorHit]:
        """Skill picker query: nearest skills with their taxonomy names, no threshold."""
        statement = text(f"""
            SELECT
                s.id,
                s.name,
                s.billing_class,
                s.name_embedding_vec <=> {self._cast()} AS distance,
                sc.name AS subcategory_name,
                c.name AS category_name,
                d.name AS discipline_name
            FROM skills s
            LEFT JOIN subcategories sc ON s.sub_category_id = sc.id
            LEFT JOIN categories c ON sc.category_id = c.id
            LEFT JOIN disciplines d ON c.discipline_id = d.id
            WHERE s.name_embedding_vec IS NOT NULL
            ORDER BY s.name_embedding_vec <=> {self._cast()}
            LIMIT :limit
        """)
        result = await self.session.execute(
            statement, {"query_vec": to_vector_literal(query_vector), "limit": limit}
        )
        return [
            SkillVectorHit(
                id=int(row.id),
                distance=float(row.distance),
                name=row.name,
                billing_class=row.billing_class,
                subcategory_name=row.subcategory_name,
                category_name=row.category_name,
                discipline_name=row.discipline_name,
            )
            for row in result
        ]
