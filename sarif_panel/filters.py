"""
Filter state - row filters, column visibility, keywords and column order.

One ``FilterState`` is owned by the index store.  All mutation goes through
the named mutators below; each one notifies subscribers only when it
actually changed something.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .reactive import Observable
from .schemas.state import (
    COLUMNS_KEY,
    FilterMap,
    PersistedState,
    VisibilityMap,
    default_column_filters,
    default_row_filters,
    merge_filters,
)

logger = logging.getLogger(__name__)


class FilterState(Observable):
    """Owned filter/column preferences.

    Row filters map a category (``Level``, ``Baseline``, ``Suppression``)
    to per-value visibility.  Column filters map a column name to
    visibility.  Both are seeded from the defaults and overlaid with a
    persisted state, so categories, values and columns added by newer
    builds are always present.
    """

    def __init__(self, persisted: Optional[PersistedState] = None) -> None:
        super().__init__()
        persisted = persisted or PersistedState()
        self._row_filters: FilterMap = merge_filters(default_row_filters(), persisted.filters_row)
        column_filters = merge_filters(default_column_filters(), persisted.filters_column)
        self._column_filters: VisibilityMap = column_filters[COLUMNS_KEY]
        self._keywords = ""
        self._column_order: List[str] = list(dict.fromkeys(persisted.column_order))

    # -- Reads --

    @property
    def row_filters(self) -> FilterMap:
        """Live row filter map.  Do not mutate; use ``set_row_filter``."""
        return self._row_filters

    @property
    def column_filters(self) -> VisibilityMap:
        """Live column visibility map.  Do not mutate; use ``set_column_visible``."""
        return self._column_filters

    @property
    def keywords(self) -> str:
        return self._keywords

    @property
    def column_order(self) -> List[str]:
        return list(self._column_order)

    def visible_values(self, category: str) -> List[str]:
        """Lower-cased values of *category* that are currently visible."""
        return [
            value.lower()
            for value, visible in self._row_filters.get(category, {}).items()
            if visible
        ]

    def is_column_visible(self, name: str) -> bool:
        return bool(self._column_filters.get(name, False))

    def to_persisted(self) -> PersistedState:
        return PersistedState(
            filters_row={category: dict(values) for category, values in self._row_filters.items()},
            filters_column={COLUMNS_KEY: dict(self._column_filters)},
            column_order=list(self._column_order),
        )

    # -- Mutators --

    def set_row_filter(self, category: str, value: str, visible: bool) -> None:
        values = self._row_filters.setdefault(category, {})
        if values.get(value) == visible:
            return
        values[value] = visible
        self.notify()

    def set_column_visible(self, name: str, visible: bool) -> None:
        if self._column_filters.get(name) == visible:
            return
        self._column_filters[name] = visible
        self.notify()

    def seed_column(self, name: str, visible: bool = False) -> bool:
        """Add a visibility entry for *name* unless one exists.

        Returns whether an entry was added.
        """
        if name in self._column_filters:
            return False
        self._column_filters[name] = visible
        self.notify()
        return True

    def set_keywords(self, keywords: str) -> None:
        if keywords == self._keywords:
            return
        self._keywords = keywords
        self.notify()

    def set_column_order(self, names: List[str]) -> None:
        order = list(dict.fromkeys(names))
        if order == self._column_order:
            return
        self._column_order = order
        self.notify()

    def clear_filters(self) -> None:
        """Reset the keywords and make every row filter value visible."""
        changed = bool(self._keywords)
        self._keywords = ""
        for values in self._row_filters.values():
            for value, visible in values.items():
                if not visible:
                    values[value] = True
                    changed = True
        if changed:
            logger.debug("Filters cleared")
            self.notify()

    def keyword_tokens(self) -> List[str]:
        """Whitespace-delimited, lower-cased keyword tokens."""
        return self._keywords.lower().split()


__all__ = ["FilterState"]
