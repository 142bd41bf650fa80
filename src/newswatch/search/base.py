from collections.abc import Set
from typing import Protocol

from newswatch.data import GroundingArticle, Usage


class GroundingSearcher(Protocol):
    """Interface for search backends that return attested source citations."""

    async def search(
        self,
        query: str,
        known_urls: Set[str],
    ) -> tuple[list[GroundingArticle], Usage]:
        """Run one query and return candidate article citations.

        Args:
            query: The search query string.
            known_urls: URLs already ingested; matching citations are dropped.

        Returns:
            Tuple of (filtered candidates, usage).
        """
        ...
