"""Utility functions for text cleaning and normalization."""
import re
from typing import Any, Optional


def is_blank(value: Any) -> bool:
    """True for None or strings that are empty after stripping."""
    if value is None:
        return True
    return not str(value).strip()


def normalize_text(text: Optional[str]) -> Optional[str]:
    """Normalize text by collapsing whitespace runs."""
    if not text:
        return None

    text = re.sub(r'\s+', ' ', text.strip())

    return text if text else None


def normalize_taxonomy_text(text: Optional[str]) -> Optional[str]:
    """
    Normalize a taxonomy label for group text.

    Trims, collapses whitespace and pads slashes and ampersands with
    single spaces, e.g. "Plumbing/Heating  &Gas" -> "Plumbing / Heating & Gas".
    """
    text = normalize_text(text)
    if not text:
        return None

    text = re.sub(r'\s*/\s*', ' / ', text)
    text = re.sub(r'\s*&\s*', ' & ', text)

    return text.strip() or None


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return (
        value.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
