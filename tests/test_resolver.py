"""Tests for HttpRedirectResolver."""

import asyncio
import time

import httpx
import pytest

from newswatch.data import GroundingArticle
from newswatch.resolver.redirect import HttpRedirectResolver, ResolutionOutcome

WRAPPER_HOST = "vertexaisearch.cloud.google.com"


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.startswith("/redirect/"):
        target = path.removeprefix("/redirect/")
        return httpx.Response(302, headers={"location": f"https://news.example.jp/{target}"})
    if path == "/relative":
        return httpx.Response(301, headers={"location": "/news/2026/relative"})
    if path == "/down":
        raise httpx.ConnectError("connection refused", request=request)
    return httpx.Response(200, text="<html>not a redirect</html>")


@pytest.fixture
def transport() -> httpx.MockTransport:
    return httpx.MockTransport(_handler)


@pytest.fixture
def resolver(transport: httpx.MockTransport) -> HttpRedirectResolver:
    return HttpRedirectResolver(transport=transport)


async def test_resolve_reads_location(resolver: HttpRedirectResolver, transport) -> None:
    async with httpx.AsyncClient(transport=transport) as client:
        resolution = await resolver.resolve(client, "https://wrap.example/redirect/a/1")

    assert resolution.outcome == ResolutionOutcome.RESOLVED
    assert resolution.url == "https://news.example.jp/a/1"
    assert resolution.original == "https://wrap.example/redirect/a/1"


async def test_relative_location_is_joined(resolver: HttpRedirectResolver, transport) -> None:
    async with httpx.AsyncClient(transport=transport) as client:
        resolution = await resolver.resolve(client, "https://wrap.example/relative")

    assert resolution.url == "https://wrap.example/news/2026/relative"


async def test_no_redirect_keeps_original(resolver: HttpRedirectResolver, transport) -> None:
    async with httpx.AsyncClient(transport=transport) as client:
        resolution = await resolver.resolve(client, "https://news.example.jp/a/2")

    assert resolution.outcome == ResolutionOutcome.NOT_REDIRECT
    assert resolution.url == "https://news.example.jp/a/2"


async def test_failure_keeps_original(resolver: HttpRedirectResolver, transport) -> None:
    async with httpx.AsyncClient(transport=transport) as client:
        resolution = await resolver.resolve(client, "https://wrap.example/down")

    assert resolution.outcome == ResolutionOutcome.FAILED
    assert resolution.url == "https://wrap.example/down"
    assert resolution.error


async def test_non_wrapper_hosts_are_skipped(transport: httpx.MockTransport) -> None:
    resolver = HttpRedirectResolver(wrapper_hosts=[WRAPPER_HOST], transport=transport)
    async with httpx.AsyncClient(transport=transport) as client:
        resolution = await resolver.resolve(client, "https://wrap.example/redirect/a/1")

    assert resolution.outcome == ResolutionOutcome.SKIPPED
    assert resolution.url == "https://wrap.example/redirect/a/1"


async def test_resolve_all_preserves_order_and_titles(transport: httpx.MockTransport) -> None:
    resolver = HttpRedirectResolver(batch_size=2, transport=transport)
    articles = [
        GroundingArticle(uri="https://wrap.example/redirect/a/1", title="one"),
        GroundingArticle(uri="https://wrap.example/down", title="two"),
        GroundingArticle(uri="https://news.example.jp/a/3", title="three"),
    ]

    resolved = await resolver.resolve_all(articles)

    assert resolved == [
        GroundingArticle(uri="https://news.example.jp/a/1", title="one"),
        GroundingArticle(uri="https://wrap.example/down", title="two"),
        GroundingArticle(uri="https://news.example.jp/a/3", title="three"),
    ]


async def test_resolve_all_empty(resolver: HttpRedirectResolver) -> None:
    assert await resolver.resolve_all([]) == []


async def test_slow_response_fails_within_timeout() -> None:
    async def slow_handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(302, headers={"location": "https://news.example.jp/a/1"})

    transport = httpx.MockTransport(slow_handler)
    resolver = HttpRedirectResolver(timeout=0.1, transport=transport)

    started = time.monotonic()
    resolved = await resolver.resolve_all([GroundingArticle(uri="https://wrap.example/x/1")])

    assert time.monotonic() - started < 2.0
    assert resolved == [GroundingArticle(uri="https://wrap.example/x/1")]


async def test_timeout_is_a_failed_resolution() -> None:
    async def slow_handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200)

    transport = httpx.MockTransport(slow_handler)
    resolver = HttpRedirectResolver(timeout=0.1, transport=transport)
    async with httpx.AsyncClient(transport=transport) as client:
        resolution = await resolver.resolve(client, "https://wrap.example/x/1")

    assert resolution.outcome == ResolutionOutcome.FAILED
    assert resolution.error == "timeout"
