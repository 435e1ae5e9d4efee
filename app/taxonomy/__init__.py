"""Skill taxonomy text building."""
from app.taxonomy.group_text import (
    TaxonomyPath,
    build_group_text,
    infer_skill_name,
)

__all__ = [
    "TaxonomyPath",
    "build_group_text",
    "infer_skill_name",
]
