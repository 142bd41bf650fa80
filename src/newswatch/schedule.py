"""Weekday-based selection of search query groups."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from newswatch.data import SearchQueryGroup


def weekday_number(day: date) -> int:
    """Return the weekday of *day* with 0=Sunday, 1=Monday, ... 6=Saturday."""
    return day.isoweekday() % 7


class QueryScheduler:
    """Selects which query groups run on a given day.

    Args:
        groups: Static query group configuration.
    """

    def __init__(self, groups: Sequence[SearchQueryGroup]) -> None:
        self._groups = tuple(groups)

    def get_todays_queries(self, today: date | None = None) -> list[SearchQueryGroup]:
        """Return the groups scheduled for *today* (defaults to the current date)."""
        weekday = weekday_number(today or date.today())
        return [g for g in self._groups if weekday in g.schedule]

    def get_all_queries(self) -> list[SearchQueryGroup]:
        """Return every group regardless of schedule."""
        return list(self._groups)

    def get_todays_query_count(self, today: date | None = None) -> int:
        return sum(len(g.queries) for g in self.get_todays_queries(today))
