from typing import Protocol

from newswatch.data import GroundingArticle


class UrlResolver(Protocol):
    """Interface for turning search-backend URLs into canonical URLs."""

    async def resolve_all(self, articles: list[GroundingArticle]) -> list[GroundingArticle]:
        """Return one article per input, with its URI canonicalised where possible."""
        ...
