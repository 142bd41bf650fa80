"""Claude-based article classifier using a strict JSON array response."""

import logging
import os
from collections.abc import Sequence
from datetime import UTC, datetime

import anthropic

from newswatch.classifier.snippet import PageSnippetFetcher
from newswatch.classifier.validation import ValidationStatus, parse_classification
from newswatch.data import Entity, GroundingArticle, NewsDraft, Usage, usage_from_response
from newswatch.errors import ConfigurationError

logger = logging.getLogger(__name__)

PROMPT_SNIPPET_CHARS = 500

SYSTEM_PROMPT = """\
You are a news analyst specialising in {domain}. From the article list you \
are given, keep ONLY articles that are genuinely about {domain} and return \
them as a JSON array (no markdown fences, no commentary).

Exclude:
- Articles whose excerpt does not concretely discuss {domain}
- Personal blog posts and diaries
- Company home pages, service overviews, job listings and directory pages
- Anything you cannot judge from the available content
If in doubt, exclude it.

For each kept article produce an object with these fields:
- "title": a {language} headline that makes clear who did what
- "url": the article URL copied EXACTLY from the list; never modify or invent URLs
- "source": the site name
- "date": publication date as YYYY-MM-DD ({today} if unknown)
- "category": one of: product, partnership, funding, policy, market, technology
- "impact": impact on our business, one of: high, medium, low
- "summary": a {language} summary of at most 100 characters based on the excerpt
- "relatedEntityIds": ids from the entity list below that the article concerns

Entity list:
{entities}

Return [] if no article qualifies.\
"""


def format_entities(entities: Sequence[Entity]) -> str:
    if not entities:
        return "(none)"
    return "\n".join(f"{e.id}: {e.name}" for e in entities)


def _article_to_prompt_text(article: GroundingArticle, snippet: str, index: int) -> str:
    """Format a candidate for inclusion in the classification prompt."""
    parts = [f"{index + 1}. URL: {article.uri}", f"   Title: {article.title}"]
    if snippet:
        parts.append(f"   Excerpt: {snippet[:PROMPT_SNIPPET_CHARS]}")
    return "\n".join(parts)


class ClaudeArticleClassifier:
    """Classify and summarise candidate articles with Claude.

    Args:
        entities: Reference entities the model may tag items with.
        api_key: API key (defaults to CLAUDE_API_KEY env var).
        model: Anthropic model to use.
        domain: Description of the monitored industry.
        language: Language for titles and summaries.
        snippet_fetcher: Fetches page excerpts; None disables excerpts.

    Raises:
        ConfigurationError: If no API key is available.
    """

    def __init__(
        self,
        entities: Sequence[Entity] = (),
        *,
        api_key: str | None = None,
        model: str = "claude-haiku-4-5-20251001",
        domain: str = "the monitored industry",
        language: str = "English",
        snippet_fetcher: PageSnippetFetcher | None = None,
    ) -> None:
        resolved_key = api_key or os.environ.get("CLAUDE_API_KEY")
        if not resolved_key:
            raise ConfigurationError(
                "Claude API key required. Pass api_key or set CLAUDE_API_KEY env var."
            )
        self._client = anthropic.AsyncAnthropic(api_key=resolved_key)
        self._model = model
        self._domain = domain
        self._language = language
        self._entities = tuple(entities)
        self._snippet_fetcher = snippet_fetcher

    async def classify(
        self,
        batch: list[GroundingArticle],
    ) -> tuple[list[NewsDraft], Usage]:
        """Classify one batch of candidates.

        Args:
            batch: Resolved candidates (at most the configured batch size).

        Returns:
            Tuple of (validated drafts, usage).
        """
        if not batch:
            return ([], Usage())

        if self._snippet_fetcher is not None:
            snippets = await self._snippet_fetcher.fetch_all([a.uri for a in batch])
        else:
            snippets = [""] * len(batch)

        now = datetime.now(tz=UTC)
        system = SYSTEM_PROMPT.format(
            domain=self._domain,
            language=self._language,
            today=now.date().isoformat(),
            entities=format_entities(self._entities),
        )
        article_texts = [
            _article_to_prompt_text(a, s, i) for i, (a, s) in enumerate(zip(batch, snippets))
        ]
        user_prompt = f"Articles ({len(batch)}):\n\n" + "\n\n".join(article_texts)

        response = await self._client.messages.create(
            model=self._model,
            max_tokens=4096,
            system=system,
            messages=[{"role": "user", "content": user_prompt}],
        )
        usage = usage_from_response(self._model, response)

        response_text = ""
        for block in response.content:
            if getattr(block, "type", None) == "text":
                response_text += block.text

        drafts: list[NewsDraft] = []
        for outcome in parse_classification(response_text, batch, now=now):
            if outcome.draft is None:
                logger.debug(f"Dropped classified item: {outcome.reason}")
                continue
            if outcome.status is ValidationStatus.RECOVERED:
                logger.info(f"Recovered url by title match: {outcome.draft.url}")
            drafts.append(outcome.draft)

        return (drafts, usage)
