"""Core data models for newswatch."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class Category(StrEnum):
    """Closed set of news categories accepted from the classifier."""

    PRODUCT = "product"
    PARTNERSHIP = "partnership"
    FUNDING = "funding"
    POLICY = "policy"
    MARKET = "market"
    TECHNOLOGY = "technology"


class ImpactLevel(StrEnum):
    """Impact tier of a news item on the monitoring organisation."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class SearchQueryGroup:
    """A named group of search queries run on a weekday schedule.

    ``schedule`` holds weekday numbers with 0=Sunday, 1=Monday, ... 6=Saturday.
    """

    id: str
    label: str
    queries: tuple[str, ...]
    schedule: frozenset[int]
    target_entity_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Entity:
    """A monitored entity that classified items may be tagged with."""

    id: str
    name: str


@dataclass(frozen=True)
class GroundingArticle:
    """A source citation attested by the search backend."""

    uri: str
    title: str = ""


class NewsDraft(BaseModel):
    """A classified news item that has not been assigned an id yet."""

    title: str
    url: str
    source: str
    date: str
    category: Category
    impact: ImpactLevel = ImpactLevel.MEDIUM
    summary: str = Field(max_length=150)
    related_entity_ids: list[str] = Field(default_factory=list)
    crawled_at: str | None = None
    is_manual: bool = False
    url_verified: bool = False

    model_config = {"frozen": True}

    def sort_key(self) -> datetime:
        """Crawl time, falling back to the publish date."""
        raw = self.crawled_at or self.date
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return datetime.min
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(UTC).replace(tzinfo=None)
        return parsed

    def published_on(self) -> date | None:
        try:
            return date.fromisoformat(self.date[:10])
        except ValueError:
            return None

    def with_id(self, item_id: str) -> "NewsItem":
        return NewsItem(id=item_id, **self.model_dump())


class NewsItem(NewsDraft):
    """A classified, persisted news item."""

    id: str


@dataclass(frozen=True)
class APICallUsage:
    """Usage from a single API call."""

    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    web_searches: int = 0


@dataclass
class Usage:
    """Accumulated API usage across pipeline stages."""

    api_calls: list[APICallUsage] = field(default_factory=list)

    @property
    def input_tokens(self) -> int:
        return sum(c.input_tokens for c in self.api_calls)

    @property
    def output_tokens(self) -> int:
        return sum(c.output_tokens for c in self.api_calls)

    @property
    def web_searches(self) -> int:
        return sum(c.web_searches for c in self.api_calls)

    def __add__(self, other: "Usage") -> "Usage":
        return Usage(api_calls=self.api_calls + other.api_calls)

    def __iadd__(self, other: "Usage") -> "Usage":
        self.api_calls.extend(other.api_calls)
        return self

    def summary(self) -> dict[str, int]:
        return {
            "api_calls": len(self.api_calls),
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "web_searches": self.web_searches,
        }


def usage_from_response(model: str, response: object) -> Usage:
    """Build a ``Usage`` from an Anthropic Messages API response."""
    raw = getattr(response, "usage", None)
    if raw is None:
        return Usage(api_calls=[APICallUsage(model=model)])

    web_searches = 0
    server_tool_use = getattr(raw, "server_tool_use", None)
    if server_tool_use is not None:
        web_searches = getattr(server_tool_use, "web_search_requests", 0) or 0

    return Usage(
        api_calls=[
            APICallUsage(
                model=model,
                input_tokens=getattr(raw, "input_tokens", 0) or 0,
                output_tokens=getattr(raw, "output_tokens", 0) or 0,
                web_searches=web_searches,
            )
        ]
    )


@dataclass
class CrawlResult:
    """Counters and errors reported by a single crawl run."""

    timestamp: str
    queries_executed: int = 0
    grounding_urls_found: int = 0
    article_urls_filtered: int = 0
    duplicates_skipped: int = 0
    new_articles: int = 0
    errors: list[str] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)

    def to_dict(self) -> dict[str, object]:
        return {
            "queriesExecuted": self.queries_executed,
            "groundingUrlsFound": self.grounding_urls_found,
            "articleUrlsFiltered": self.article_urls_filtered,
            "duplicatesSkipped": self.duplicates_skipped,
            "newArticles": self.new_articles,
            "errors": list(self.errors),
            "timestamp": self.timestamp,
            "usage": self.usage.summary(),
        }
