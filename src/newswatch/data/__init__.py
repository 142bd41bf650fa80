"""Data models for newswatch."""

from newswatch.data.models import (
    APICallUsage,
    Category,
    CrawlResult,
    Entity,
    GroundingArticle,
    ImpactLevel,
    NewsDraft,
    NewsItem,
    SearchQueryGroup,
    Usage,
    usage_from_response,
)

__all__ = [
    "APICallUsage",
    "Category",
    "CrawlResult",
    "Entity",
    "GroundingArticle",
    "ImpactLevel",
    "NewsDraft",
    "NewsItem",
    "SearchQueryGroup",
    "Usage",
    "usage_from_response",
]
