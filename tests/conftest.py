"""Shared fixtures for newswatch tests."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock

import pytest

from newswatch.data import Category, ImpactLevel, NewsDraft, NewsItem

FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


@pytest.fixture
def make_draft() -> Callable[..., NewsDraft]:
    def _make(url: str, **overrides: Any) -> NewsDraft:
        fields: dict[str, Any] = {
            "title": f"Title for {url}",
            "url": url,
            "source": "Example Source",
            "date": "2026-10-10",
            "category": Category.POLICY,
            "impact": ImpactLevel.MEDIUM,
            "summary": "A short summary.",
            "crawled_at": "2026-10-10T09:00:00+00:00",
            "url_verified": True,
        }
        fields.update(overrides)
        return NewsDraft(**fields)

    return _make


@pytest.fixture
def make_item(make_draft: Callable[..., NewsDraft]) -> Callable[..., NewsItem]:
    def _make(item_id: str, url: str, **overrides: Any) -> NewsItem:
        return make_draft(url, **overrides).with_id(item_id)

    return _make


def make_text_response(text: str, input_tokens: int = 500, output_tokens: int = 200) -> MagicMock:
    """Create a mock Anthropic API response carrying one text block."""
    text_block = MagicMock()
    text_block.type = "text"
    text_block.text = text

    usage = MagicMock()
    usage.input_tokens = input_tokens
    usage.output_tokens = output_tokens
    usage.server_tool_use = None

    response = MagicMock()
    response.content = [text_block]
    response.usage = usage
    return response
