"""Pydantic configuration models for newswatch components."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from newswatch.data import Entity, SearchQueryGroup

# ============================================================
# Domain
# ============================================================


class DomainConfig(BaseModel):
    """The monitored industry and the language articles are written in."""

    description: str = "the monitored industry"
    language: str = "English"

    model_config = {"frozen": True}


# ============================================================
# Stage Configs
# ============================================================


class SearchConfig(BaseModel):
    """Configuration for ClaudeGroundingSearcher."""

    model: str = "claude-haiku-4-5-20251001"
    max_searches_per_query: int = Field(default=1, ge=1)
    recency_days: int = Field(default=7, ge=1)

    model_config = {"frozen": True}


class ResolverConfig(BaseModel):
    """Configuration for HttpRedirectResolver."""

    batch_size: int = Field(default=5, ge=1)
    timeout_seconds: float = Field(default=5.0, gt=0)
    wrapper_hosts: tuple[str, ...] = ()

    model_config = {"frozen": True}


class ClassifierConfig(BaseModel):
    """Configuration for ClaudeArticleClassifier and its snippet fetcher."""

    model: str = "claude-haiku-4-5-20251001"
    batch_size: int = Field(default=10, ge=1)
    fetch_snippets: bool = True
    snippet_chars: int = Field(default=2000, ge=0)
    snippet_timeout_seconds: float = Field(default=5.0, gt=0)
    user_agent: str = "Mozilla/5.0 (compatible; NewswatchBot/1.0)"

    model_config = {"frozen": True}


class GovernorConfig(BaseModel):
    """Concurrency and wall-clock limits for a crawl run."""

    time_limit_seconds: float = Field(default=250.0, ge=0)
    concurrency: int = Field(default=3, ge=1)

    model_config = {"frozen": True}


# ============================================================
# Store Config
# ============================================================


class StoreConfig(BaseModel):
    """Key-value backend behind the news repository.

    ``none`` disables persistence: reads use the bundled dataset and writes
    are dropped.
    """

    backend: Literal["sqlite", "memory", "none"] = "sqlite"
    path: Path = Path("data/newswatch.db")
    retention_days: int = Field(default=180, ge=1)
    analysis_ttl_days: int = Field(default=30, ge=1)

    model_config = {"frozen": True}


# ============================================================
# Static Reference Data
# ============================================================


class QueryGroupConfig(BaseModel):
    """A weekday-scheduled group of search queries (0=Sunday ... 6=Saturday)."""

    id: str
    label: str
    queries: list[str]
    schedule: list[int] = Field(default_factory=lambda: [0, 1, 2, 3, 4, 5, 6])
    target_entity_ids: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    def to_group(self) -> SearchQueryGroup:
        return SearchQueryGroup(
            id=self.id,
            label=self.label,
            queries=tuple(self.queries),
            schedule=frozenset(d for d in self.schedule if 0 <= d <= 6),
            target_entity_ids=tuple(self.target_entity_ids),
        )


class EntityConfig(BaseModel):
    id: str
    name: str

    model_config = {"frozen": True}

    def to_entity(self) -> Entity:
        return Entity(id=self.id, name=self.name)


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for per-run JSON logs."""

    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class NewswatchConfig(BaseModel):
    """Root configuration for newswatch."""

    domain: DomainConfig = Field(default_factory=DomainConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    governor: GovernorConfig = Field(default_factory=GovernorConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    query_groups: list[QueryGroupConfig] = Field(default_factory=list)
    entities: list[EntityConfig] = Field(default_factory=list)

    model_config = {"frozen": True}
