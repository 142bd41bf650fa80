"""Canonicalisation of redirect-wrapper URLs returned by the search backend."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import urljoin

import httpx

from newswatch.data import GroundingArticle
from newswatch.url import is_wrapper_url

logger = logging.getLogger(__name__)


class ResolutionOutcome(StrEnum):
    """Which branch produced a ``Resolution``."""

    RESOLVED = "resolved"
    NOT_REDIRECT = "not_redirect"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Resolution:
    """Result of resolving one URL.

    ``url`` is the canonical target for ``RESOLVED`` and the original URL for
    every other outcome.
    """

    original: str
    url: str
    outcome: ResolutionOutcome
    error: str | None = None


class HttpRedirectResolver:
    """Resolve redirect URLs by reading the ``Location`` header.

    Redirects are not followed and response bodies are never read.

    Args:
        batch_size: Number of concurrent resolutions per batch.
        timeout: Time limit in seconds for each whole resolution.
        wrapper_hosts: When non-empty, only URLs on these hosts are resolved;
            all others are passed through as ``SKIPPED``.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        *,
        batch_size: int = 5,
        timeout: float = 5.0,
        wrapper_hosts: Iterable[str] = (),
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._batch_size = batch_size
        self._timeout = timeout
        self._wrapper_hosts = tuple(wrapper_hosts)
        self._transport = transport

    async def resolve(self, client: httpx.AsyncClient, url: str) -> Resolution:
        """Resolve a single URL, falling back to the original on any failure."""
        if self._wrapper_hosts and not is_wrapper_url(url, self._wrapper_hosts):
            return Resolution(original=url, url=url, outcome=ResolutionOutcome.SKIPPED)

        try:
            async with asyncio.timeout(self._timeout):
                request = client.build_request("GET", url)
                response = await client.send(request, stream=True, follow_redirects=False)
                try:
                    location = response.headers.get("location")
                finally:
                    await response.aclose()
        except TimeoutError:
            logger.debug(f"Redirect resolution timed out for {url}")
            return Resolution(
                original=url, url=url, outcome=ResolutionOutcome.FAILED, error="timeout"
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"Redirect resolution failed for {url}: {e}")
            return Resolution(
                original=url, url=url, outcome=ResolutionOutcome.FAILED, error=str(e)
            )

        if not location:
            return Resolution(original=url, url=url, outcome=ResolutionOutcome.NOT_REDIRECT)
        return Resolution(
            original=url, url=urljoin(url, location), outcome=ResolutionOutcome.RESOLVED
        )

    async def resolve_all(self, articles: list[GroundingArticle]) -> list[GroundingArticle]:
        """Resolve every article URI in fixed-size concurrent batches.

        Order is preserved and every input yields exactly one output.
        """
        resolved: list[GroundingArticle] = []
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            for i in range(0, len(articles), self._batch_size):
                batch = articles[i : i + self._batch_size]
                results = await asyncio.gather(
                    *(self.resolve(client, a.uri) for a in batch), return_exceptions=True
                )
                for article, result in zip(batch, results, strict=True):
                    if isinstance(result, BaseException):
                        logger.warning(f"Unexpected error resolving {article.uri}: {result}")
                        resolved.append(article)
                        continue
                    resolved.append(GroundingArticle(uri=result.url, title=article.title))
        return resolved
