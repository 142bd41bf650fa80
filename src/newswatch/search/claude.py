import logging
import os
from collections.abc import Iterable, Set

import anthropic

from newswatch.data import GroundingArticle, Usage, usage_from_response
from newswatch.errors import ConfigurationError
from newswatch.url import is_specific_article_url

logger = logging.getLogger(__name__)

SEARCH_PROMPT = """\
Find the latest news articles related to the search query below.
Only include articles about {domain} published in the last {recency_days} days \
and written in {language}.

Search query: {query}

Briefly list the title and a short overview of each article you found. \
You do not need to include URLs.\
"""


def extract_grounding_articles(response: object) -> list[GroundingArticle]:
    """Collect citations from the ``web_search_tool_result`` blocks of *response*.

    The model's own text is never inspected: only results returned by the
    search tool count as sources.
    """
    articles: list[GroundingArticle] = []
    for block in getattr(response, "content", None) or []:
        if getattr(block, "type", None) != "web_search_tool_result":
            continue
        content = getattr(block, "content", None)
        # An error result carries an error object instead of a list
        if not isinstance(content, list):
            continue
        for result in content:
            url = getattr(result, "url", None)
            if not url:
                continue
            articles.append(GroundingArticle(uri=url, title=getattr(result, "title", "") or ""))
    return articles


def filter_candidates(
    articles: Iterable[GroundingArticle],
    known_urls: Set[str],
    wrapper_hosts: Iterable[str] = (),
) -> list[GroundingArticle]:
    """Drop home pages, known URLs and duplicates within one result set."""
    wrapper_hosts = tuple(wrapper_hosts)
    seen: set[str] = set()
    candidates: list[GroundingArticle] = []
    for article in articles:
        if not is_specific_article_url(article.uri, wrapper_hosts):
            continue
        if article.uri in known_urls or article.uri in seen:
            continue
        seen.add(article.uri)
        candidates.append(article)
    return candidates


class ClaudeGroundingSearcher:
    """Search for recent articles using Claude's built-in web search tool.

    Args:
        api_key: Anthropic API key (defaults to CLAUDE_API_KEY env var).
        model: Model to use for search.
        max_searches_per_query: Max web searches per query.
        domain: Description of the monitored industry, used in the prompt.
        language: Language the articles must be written in.
        recency_days: Only articles from this many recent days are requested.
        wrapper_hosts: Redirect hosts whose URLs bypass the home-page filter.

    Raises:
        ConfigurationError: If no API key is available.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = "claude-haiku-4-5-20251001",
        max_searches_per_query: int = 1,
        domain: str = "the monitored industry",
        language: str = "English",
        recency_days: int = 7,
        wrapper_hosts: Iterable[str] = (),
    ) -> None:
        resolved_key = api_key or os.environ.get("CLAUDE_API_KEY")
        if not resolved_key:
            raise ConfigurationError(
                "Claude API key required. Pass api_key or set CLAUDE_API_KEY env var."
            )
        self._client = anthropic.AsyncAnthropic(api_key=resolved_key)
        self._model = model
        self._max_searches = max_searches_per_query
        self._domain = domain
        self._language = language
        self._recency_days = recency_days
        self._wrapper_hosts = tuple(wrapper_hosts)

    async def search(
        self,
        query: str,
        known_urls: Set[str],
    ) -> tuple[list[GroundingArticle], Usage]:
        """Run one grounded search and return the filtered candidates.

        Args:
            query: The search query string.
            known_urls: URLs already ingested.

        Returns:
            Tuple of (candidate articles, usage).
        """
        prompt = SEARCH_PROMPT.format(
            domain=self._domain,
            recency_days=self._recency_days,
            language=self._language,
            query=query,
        )

        response = await self._client.messages.create(
            model=self._model,
            max_tokens=2048,
            tools=[
                {
                    "type": "web_search_20250305",
                    "name": "web_search",
                    "max_uses": self._max_searches,
                }
            ],
            messages=[{"role": "user", "content": prompt}],
        )

        found = extract_grounding_articles(response)
        logger.info(f"[Search] {query[:30]!r} -> {len(found)} citations")

        candidates = filter_candidates(found, known_urls, self._wrapper_hosts)
        return (candidates, usage_from_response(self._model, response))
