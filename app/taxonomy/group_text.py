"""
Canonical "group text" for a skill's position in the taxonomy.

The group text is the string we embed for skill vector search, e.g.

    Major Discipline: Trades | Category: Plumbing | Skill: Pipe Fitting | Class: B

Blank levels are dropped entirely, and a blank skill name is inferred from the
nearest non-blank subcategory or category. When only a discipline is known the
text is "Major Discipline: <name>" plus the class.
"""
from dataclasses import dataclass
from typing import List, Optional

from app.utils.cleaning import is_blank, normalize_taxonomy_text

SEGMENT_SEPARATOR = " | "
PATH_SEPARATOR = " > "

DISCIPLINE_LABEL = "Major Discipline"
CATEGORY_LABEL = "Category"
SUBCATEGORY_LABEL = "Subcategory"
SKILL_LABEL = "Skill"
BILLING_CLASS_LABEL = "Class"


@dataclass(frozen=True)
class TaxonomyPath:
    """Resolved names along discipline > category > subcategory > skill."""
    discipline: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    skill: Optional[str] = None
    billing_class: Optional[str] = None

    @property
    def full_path(self) -> str:
        """Display path, e.g. "Trades > Plumbing > Pipe Fitting"."""
        parts = [self.discipline, self.category, self.subcategory, self.skill]
        return PATH_SEPARATOR.join(p for p in parts if not is_blank(p))


def infer_skill_name(
    skill: Optional[str],
    subcategory: Optional[str],
    category: Optional[str],
    discipline: Optional[str],
) -> Optional[str]:
    """
    Return the effective leaf name.

    The first non-blank of skill, subcategory, category, discipline wins.
    Returns None only when all four are blank.
    """
    for candidate in (skill, subcategory, category, discipline):
        if not is_blank(candidate):
            return candidate
    return None


def build_group_text(path: TaxonomyPath) -> Optional[str]:
    """
    Build the labeled group text for a taxonomy path.

    Returns None when no hierarchy level is present; callers must then skip
    embedding generation for the record.
    """
    effective_skill = infer_skill_name(
        path.skill, path.subcategory, path.category, path.discipline
    )
    if effective_skill is None:
        return None

    # A discipline-only path is fully described by its discipline segment.
    if all(is_blank(v) for v in (path.skill, path.subcategory, path.category)):
        effective_skill = None

    segments: List[str] = []
    for label, value in (
        (DISCIPLINE_LABEL, path.discipline),
        (CATEGORY_LABEL, path.category),
        (SUBCATEGORY_LABEL, path.subcategory),
        (SKILL_LABEL, effective_skill),
        (BILLING_CLASS_LABEL, path.billing_class),
    ):
        normalized = normalize_taxonomy_text(value) if value is not None else None
        if normalized:
            segments.append(f"{label}: {normalized}")

    return SEGMENT_SEPARATOR.join(segments)
