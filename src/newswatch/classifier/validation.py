"""Strict per-item validation of classifier JSON responses.

Each raw item becomes an ``ItemValidation`` tagged ``accepted``, ``recovered``
or ``rejected``. A bad item never invalidates its siblings.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from newswatch.data import Category, GroundingArticle, ImpactLevel, NewsDraft

logger = logging.getLogger(__name__)

SUMMARY_MAX_CHARS = 150
TITLE_MATCH_PREFIX = 15

_JSON_ARRAY = re.compile(r"\[.*\]", re.DOTALL)


class ValidationStatus(StrEnum):
    ACCEPTED = "accepted"
    RECOVERED = "recovered"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ItemValidation:
    """Outcome of validating one item returned by the classifier."""

    status: ValidationStatus
    draft: NewsDraft | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.draft is not None


class RawClassification(BaseModel):
    """Schema of one element of the classifier's JSON array."""

    title: str = Field(min_length=1)
    url: str = Field(min_length=1)
    summary: str = Field(min_length=1)
    category: Category
    source: str | None = None
    date: str | None = None
    impact: ImpactLevel = ImpactLevel.MEDIUM
    related_entity_ids: list[str] = Field(default_factory=list, alias="relatedEntityIds")

    model_config = {"populate_by_name": True}

    @field_validator("impact", mode="before")
    @classmethod
    def unknown_impact_is_medium(cls, v: Any) -> Any:
        if not isinstance(v, str) or v not in {level.value for level in ImpactLevel}:
            return ImpactLevel.MEDIUM
        return v

    @field_validator("related_entity_ids", mode="before")
    @classmethod
    def keep_string_ids(cls, v: Any) -> list[str]:
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, str)]


def extract_json_array(text: str) -> list[Any] | None:
    """Pull the JSON array out of a model response, or return None."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = [line for line in cleaned.split("\n") if not line.strip().startswith("```")]
        cleaned = "\n".join(lines).strip()

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        match = _JSON_ARRAY.search(cleaned)
        if not match:
            return None
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError:
            return None

    if not isinstance(parsed, list):
        return None
    return parsed


def _normalise_date(raw: str | None, today: date) -> str:
    if raw:
        try:
            return date.fromisoformat(raw.strip()[:10]).isoformat()
        except ValueError:
            pass
    return today.isoformat()


def recover_url(title: str, batch: list[GroundingArticle]) -> str | None:
    """Find the batch input whose title prefix appears in *title*."""
    for article in batch:
        if article.title and article.title[:TITLE_MATCH_PREFIX] in title:
            return article.uri
    return None


def validate_item(
    raw: Any,
    batch: list[GroundingArticle],
    *,
    now: datetime | None = None,
) -> ItemValidation:
    """Validate one raw item against the schema and the batch's input URLs."""
    if not isinstance(raw, dict):
        return ItemValidation(ValidationStatus.REJECTED, reason="not an object")

    try:
        item = RawClassification.model_validate(raw)
    except ValidationError as e:
        return ItemValidation(ValidationStatus.REJECTED, reason=f"schema: {e.error_count()} errors")

    status = ValidationStatus.ACCEPTED
    url = item.url
    if url not in {a.uri for a in batch}:
        recovered = recover_url(item.title, batch)
        if recovered is None:
            return ItemValidation(ValidationStatus.REJECTED, reason=f"unverifiable url {url}")
        url = recovered
        status = ValidationStatus.RECOVERED

    now = now or datetime.now(tz=UTC)
    draft = NewsDraft(
        title=item.title,
        url=url,
        source=item.source or "unknown",
        date=_normalise_date(item.date, now.date()),
        category=item.category,
        impact=item.impact,
        summary=item.summary[:SUMMARY_MAX_CHARS],
        related_entity_ids=item.related_entity_ids,
        crawled_at=now.isoformat(),
        is_manual=False,
        url_verified=True,
    )
    return ItemValidation(status, draft=draft)


def parse_classification(
    text: str,
    batch: list[GroundingArticle],
    *,
    now: datetime | None = None,
) -> list[ItemValidation]:
    """Validate every item of the classifier response *text*.

    Returns an empty list if no JSON array can be found.
    """
    items = extract_json_array(text)
    if items is None:
        logger.warning(f"Failed to parse classification JSON: {text[:200]!r}")
        return []
    return [validate_item(raw, batch, now=now) for raw in items]
