"""Repository for skill taxonomy operations."""
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database.models import Category, Skill, Subcategory
from app.taxonomy.group_text import TaxonomyPath
from app.utils.cleaning import escape_like
from app.utils.logging import get_logger

logger = get_logger(__name__)


def _hierarchy_options():
    return selectinload(Skill.sub_category).selectinload(Subcategory.category).selectinload(Category.discipline)


def skill_path(skill: Skill) -> TaxonomyPath:
    """Taxonomy path of a skill loaded with its hierarchy."""
    subcategory = skill.sub_category
    category = subcategory.category if subcategory else None
    discipline = category.discipline if category else None
    return TaxonomyPath(
        discipline=discipline.name if discipline else None,
        category=category.name if category else None,
        subcategory=subcategory.name if subcategory else None,
        skill=skill.name,
        billing_class=skill.billing_class,
    )


class SkillRepository:
    """Repository for skill CRUD and hierarchy lookups."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, skill_id: int, depth: int = 0) -> Optional[Skill]:
        """Get skill by ID; depth >= 1 populates subcategory, category and discipline."""
        query = select(Skill).where(Skill.id == skill_id)
        if depth >= 1:
            query = query.options(_hierarchy_options())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_subcategory(self, subcategory_id: int) -> Optional[Subcategory]:
        """Get a subcategory with its category and discipline populated."""
        result = await self.session.execute(
            select(Subcategory)
            .where(Subcategory.id == subcategory_id)
            .options(selectinload(Subcategory.category).selectinload(Category.discipline))
        )
        return result.scalar_one_or_none()

    async def resolve_path(
        self,
        name: Optional[str],
        sub_category_id: Optional[int],
        billing_class: Optional[str],
    ) -> TaxonomyPath:
        """Resolve names along the containment chain starting at a subcategory ID."""
        subcategory = await self.get_subcategory(sub_category_id) if sub_category_id else None
        if subcategory is None:
            if sub_category_id:
                logger.warning(
                    f"Subcategory {sub_category_id} not found while resolving skill hierarchy",
                    extra={"sub_category_id": sub_category_id}
                )
            return TaxonomyPath(skill=name, billing_class=billing_class)

        category = subcategory.category
        discipline = category.discipline if category else None
        return TaxonomyPath(
            discipline=discipline.name if discipline else None,
            category=category.name if category else None,
            subcategory=subcategory.name,
            skill=name,
            billing_class=billing_class,
        )

    async def search_text(self, query: str, limit: int = 10) -> List[Skill]:
        """Skills whose name or group text contains `query`, sorted by name."""
        pattern = f"%{escape_like(query.strip())}%"
        result = await self.session.execute(
            select(Skill)
            .where(
                or_(
                    Skill.name.ilike(pattern, escape="\\"),
                    Skill.group_text.ilike(pattern, escape="\\"),
                )
            )
            .options(_hierarchy_options())
            .order_by(Skill.name)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def create(self, skill_data: dict) -> Skill:
        """Create a new skill record."""
        try:
            skill = Skill(**skill_data)
            self.session.add(skill)
            await self.session.commit()
            await self.session.refresh(skill)
            logger.info(f"Created skill record: id={skill.id}", extra={"skill_id": skill.id})
            return skill
        except IntegrityError as e:
            await self.session.rollback()
            logger.error(f"Failed to create skill: {e}", extra={"error": str(e)})
            raise

    async def update(self, skill_id: int, update_data: dict) -> Optional[Skill]:
        """Update skill record."""
        skill = await self.get_by_id(skill_id)
        if not skill:
            return None

        for key, value in update_data.items():
            if hasattr(skill, key):
                setattr(skill, key, value)

        await self.session.commit()
        await self.session.refresh(skill)
        logger.info(f"Updated skill record: id={skill_id}", extra={"skill_id": skill_id})
        return skill
