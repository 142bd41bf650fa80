"""URL handling utilities."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

# Bare locale roots such as /en or /ja/
_LOCALE_ROOT = re.compile(r"^/[a-z]{2}/?$")
_ARTICLE_TOKENS = ("article", "news", "press")


def extract_domain(url: str) -> str:
    """Extract domain name from URL.

    Args:
        url: The URL to extract the domain from.

    Returns:
        The domain name (without 'www.' prefix), or "Unknown" if extraction fails.
    """
    try:
        parsed = urlparse(url)
        domain = parsed.netloc
        if not domain:
            logger.warning(f"Could not get domain from url {url}")
            return "Unknown"
        if domain.startswith("www."):
            domain = domain[4:]
        return domain
    except ValueError:
        return "Unknown"


def is_wrapper_url(url: str, wrapper_hosts: Iterable[str]) -> bool:
    """Whether *url* points at one of the search backend's redirect hosts."""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return False
    return any(host == h or host.endswith("." + h) for h in wrapper_hosts)


def is_specific_article_url(url: str, wrapper_hosts: Iterable[str] = ()) -> bool:
    """Heuristic check that *url* is an article page rather than a home page.

    Wrapper URLs always pass: their path says nothing about the target until
    they are resolved.

    Examples:
        >>> is_specific_article_url("https://example.jp/")
        False
        >>> is_specific_article_url("https://example.jp/news/2026/0412")
        True
    """
    if is_wrapper_url(url, wrapper_hosts):
        return True
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False

    path = parsed.path or "/"
    if path == "/" or _LOCALE_ROOT.match(path):
        return False

    segments = [s for s in path.split("/") if s]
    if len(segments) >= 2:
        return True
    if any(ch.isdigit() for ch in path):
        return True
    return any(token in path for token in _ARTICLE_TOKENS)
