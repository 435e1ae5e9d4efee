"""Utility modules."""
from app.utils.cleaning import escape_like, is_blank, normalize_taxonomy_text, normalize_text
from app.utils.logging import setup_logging, get_logger

__all__ = [
    "escape_like",
    "is_blank",
    "normalize_taxonomy_text",
    "normalize_text",
    "setup_logging",
    "get_logger",
]
