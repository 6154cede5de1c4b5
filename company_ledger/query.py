"""Filtered views over the ledger.

``filter_entries`` is the pure predicate pipeline; ``QueryView`` keeps the
current search term and category filter and memoizes the filtered result per
store version so repeated reads (table display, export, summary) don't rescan
the collection.
"""

from __future__ import annotations

from collections.abc import Sequence

from .logging_setup import get_logger
from .models import ALL_CATEGORIES, LedgerEntry
from .store import EntryStore

_logger = get_logger("company_ledger.query")


def matches_search(entry: LedgerEntry, search_term: str) -> bool:
    """Case-insensitive substring match on particular, company or category."""

    needle = search_term.lower()
    return (
        needle in entry.particular.lower()
        or needle in entry.company_name.lower()
        or needle in entry.category.lower()
    )


def matches_category(entry: LedgerEntry, category_filter: str) -> bool:
    return category_filter == ALL_CATEGORIES or entry.category == category_filter


def filter_entries(
    entries: Sequence[LedgerEntry],
    search_term: str = "",
    category_filter: str = ALL_CATEGORIES,
) -> tuple[LedgerEntry, ...]:
    """Return the entries matching both the search term and the category.

    Input order is preserved; entries are returned unchanged.
    """

    return tuple(
        e
        for e in entries
        if matches_search(e, search_term) and matches_category(e, category_filter)
    )


class QueryView:
    """Current search/category selection over an :class:`EntryStore`."""

    def __init__(
        self,
        store: EntryStore,
        *,
        search_term: str = "",
        category_filter: str = ALL_CATEGORIES,
    ) -> None:
        self._store = store
        self._search_term = search_term
        self._category_filter = category_filter
        self._cache_key: tuple[int, str, str] | None = None
        self._cached: tuple[LedgerEntry, ...] = ()

    @property
    def search_term(self) -> str:
        return self._search_term

    @search_term.setter
    def search_term(self, value: str) -> None:
        self._search_term = value

    @property
    def category_filter(self) -> str:
        return self._category_filter

    @category_filter.setter
    def category_filter(self, value: str) -> None:
        self._category_filter = value

    @property
    def entries(self) -> tuple[LedgerEntry, ...]:
        key = (self._store.version, self._search_term, self._category_filter)
        if key != self._cache_key:
            self._cached = filter_entries(
                self._store.entries, self._search_term, self._category_filter
            )
            self._cache_key = key
            _logger.debug(
                "query:refreshed version=%d search=%r category=%r matches=%d",
                key[0],
                key[1],
                key[2],
                len(self._cached),
            )
        return self._cached
