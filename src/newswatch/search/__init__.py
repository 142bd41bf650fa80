"""Grounded search stage."""

from newswatch.search.base import GroundingSearcher
from newswatch.search.claude import (
    ClaudeGroundingSearcher,
    extract_grounding_articles,
    filter_candidates,
)

__all__ = [
    "ClaudeGroundingSearcher",
    "GroundingSearcher",
    "extract_grounding_articles",
    "filter_candidates",
]
