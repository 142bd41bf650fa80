"""Bounded page-text snippets used to ground classification."""

import asyncio
import logging

import httpx
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; NewswatchBot/1.0)"
DEFAULT_MAX_BYTES = 512 * 1024


def html_to_text(html: str | bytes, encoding: str | None = None) -> str:
    """Visible text of *html* with scripts and styles removed.

    Entities are decoded and whitespace runs collapse to a single space.
    Bytes are decoded with *encoding* when given, else by sniffing the page.
    """
    if isinstance(html, bytes):
        soup = BeautifulSoup(html, "html.parser", from_encoding=encoding)
    else:
        soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return " ".join(soup.get_text(" ", strip=True).split())


class PageSnippetFetcher:
    """Fetch the leading text of article pages.

    Any failure yields an empty snippet: classification prefers real page
    content but never depends on it. ``timeout`` bounds the whole fetch, not
    just each network read, and at most ``max_bytes`` of a body is read.

    Args:
        max_chars: Maximum snippet length.
        timeout: Per-page time limit in seconds.
        batch_size: Number of concurrent fetches.
        user_agent: User-Agent header sent with each request.
        max_bytes: Body bytes read before the download is cut off.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        *,
        max_chars: int = 2000,
        timeout: float = 5.0,
        batch_size: int = 5,
        user_agent: str = DEFAULT_USER_AGENT,
        max_bytes: int = DEFAULT_MAX_BYTES,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._max_chars = max_chars
        self._timeout = timeout
        self._batch_size = batch_size
        self._user_agent = user_agent
        self._max_bytes = max_bytes
        self._transport = transport

    async def _read_head(self, client: httpx.AsyncClient, url: str) -> tuple[bytes, str | None]:
        """Return up to ``max_bytes`` of the body and its declared charset."""
        async with client.stream("GET", url) as response:
            if not response.is_success:
                return b"", None
            body = bytearray()
            async for chunk in response.aiter_bytes():
                body.extend(chunk)
                if len(body) >= self._max_bytes:
                    break
            return bytes(body[: self._max_bytes]), response.charset_encoding

    async def fetch(self, client: httpx.AsyncClient, url: str) -> str:
        try:
            async with asyncio.timeout(self._timeout):
                body, encoding = await self._read_head(client, url)
        except TimeoutError:
            logger.debug(f"Snippet fetch timed out for {url}")
            return ""
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"Snippet fetch failed for {url}: {e}")
            return ""
        if not body:
            return ""
        return html_to_text(body, encoding)[: self._max_chars]

    async def fetch_all(self, urls: list[str]) -> list[str]:
        """Return one snippet per URL, in input order."""
        snippets: list[str] = []
        async with httpx.AsyncClient(
            timeout=self._timeout,
            headers={"User-Agent": self._user_agent},
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            for i in range(0, len(urls), self._batch_size):
                batch = urls[i : i + self._batch_size]
                results = await asyncio.gather(
                    *(self.fetch(client, url) for url in batch), return_exceptions=True
                )
                for result in results:
                    snippets.append("" if isinstance(result, BaseException) else result)
        return snippets
