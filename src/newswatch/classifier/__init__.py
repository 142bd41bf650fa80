"""Article classification stage."""

from newswatch.classifier.base import ArticleClassifier
from newswatch.classifier.claude import ClaudeArticleClassifier
from newswatch.classifier.snippet import PageSnippetFetcher, html_to_text
from newswatch.classifier.validation import (
    ItemValidation,
    ValidationStatus,
    extract_json_array,
    parse_classification,
    validate_item,
)

__all__ = [
    "ArticleClassifier",
    "ClaudeArticleClassifier",
    "ItemValidation",
    "PageSnippetFetcher",
    "ValidationStatus",
    "extract_json_array",
    "html_to_text",
    "parse_classification",
    "validate_item",
]
