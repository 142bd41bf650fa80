"""URL resolution stage."""

from newswatch.resolver.base import UrlResolver
from newswatch.resolver.redirect import HttpRedirectResolver, Resolution, ResolutionOutcome

__all__ = ["HttpRedirectResolver", "Resolution", "ResolutionOutcome", "UrlResolver"]
