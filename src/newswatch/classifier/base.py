"""Protocol for article classification."""

from typing import Protocol

from newswatch.data import GroundingArticle, NewsDraft, Usage


class ArticleClassifier(Protocol):
    """Interface for classifying and summarising candidate articles."""

    async def classify(
        self,
        batch: list[GroundingArticle],
    ) -> tuple[list[NewsDraft], Usage]:
        """Classify one batch of resolved candidates.

        Args:
            batch: Candidates whose URLs have already been canonicalised.

        Returns:
            Tuple of (validated drafts, usage). Items the backend returns that
            fail validation are dropped.
        """
        ...
