"""
Table Store - generic grouping, filtering and sorting over a record list.

Given a record source, a grouping function and a filter predicate, a
``TableStore`` produces the flat row sequence a table renders:

1. records passing ``filter`` are kept in source order,
2. they are partitioned by ``group_by`` in first-seen key order; records
   whose key is ``None`` form a headerless partition,
3. each partition is stably sorted by the active sort column and direction,
4. each partition contributes its group row followed by its item rows when
   expanded; a group with no passing record is not emitted at all.

All four steps are derived views memoized on the revisions of their inputs,
so reading ``rows`` after any mutation yields a consistent result.
Subclasses bind concrete columns and a filter by overriding ``columns``,
``filter`` and ``dependencies``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, Generic, Hashable, List, Optional, Protocol, Sequence, Tuple, TypeVar

from ..columns import Column
from ..reactive import Observable, ObservableValue, derived
from .rows import Row, RowGroup, RowItem, RowKind

logger = logging.getLogger(__name__)

T = TypeVar("T")
G = TypeVar("G")


class SortDir(Enum):
    """Sort direction of the active sort column"""
    ASC = "ascending"
    DESC = "descending"


class ItemsSource(Protocol):
    """Anything exposing an ordered record list and a change revision."""

    @property
    def results(self) -> Sequence[Any]:
        ...

    @property
    def revision(self) -> int:
        ...


class TableStore(Generic[T, G]):
    """Groups, filters and sorts the records of ``items_source``.

    Parameters
    ----------
    group_by : callable
        Maps a record to its (hashable) group key, or ``None`` for no group.
    items_source : ItemsSource
        Supplies ``results`` and a ``revision`` bumped on every change.
    selection : ObservableValue
        Selection slot shared with the other stores of the same view.
    default_expanded : bool
        Expansion flag given to a group key the first time it is seen.
    """

    def __init__(
        self,
        group_by: Callable[[T], Optional[G]],
        items_source: ItemsSource,
        selection: ObservableValue,
        default_expanded: bool = True,
    ):
        self.group_by = group_by
        self.items_source = items_source
        self.selection = selection
        self.default_expanded = default_expanded

        # Sort state and group expansion.
        self._view = Observable()
        self._sort_column = ""
        self._sort_dir = SortDir.ASC

        self._row_item_cache: Dict[int, RowItem[T]] = {}
        self._group_cache: Dict[Any, RowGroup[T, G]] = {}

    # -- Binding points --

    @property
    def columns(self) -> List[Column[T]]:
        return []

    @property
    def filter(self) -> Callable[[T], bool]:
        return lambda item: True

    def dependencies(self) -> Tuple[Hashable, ...]:
        """Revisions the filtered/sorted view depends on."""
        return (self.items_source.revision, self._view.revision)

    def is_line_through(self, item: T) -> bool:
        return False

    def menu_context(self, item: T) -> Optional[Dict[str, str]]:
        return None

    # -- Sort state --

    @property
    def sort_column(self) -> str:
        return self._sort_column

    @sort_column.setter
    def sort_column(self, name: str) -> None:
        if name == self._sort_column:
            return
        self._sort_column = name
        self._view.notify()

    @property
    def sort_dir(self) -> SortDir:
        return self._sort_dir

    def toggle_sort(self, name: str) -> None:
        """Flip the direction of the active column, or sort ascending by *name*."""
        if name == self._sort_column:
            self._sort_dir = SortDir.DESC if self._sort_dir is SortDir.ASC else SortDir.ASC
        else:
            self._sort_column = name
            self._sort_dir = SortDir.ASC
        self._view.notify()

    # -- Expansion --

    def toggle_expanded(self, group: RowGroup[T, G]) -> None:
        self.set_expanded(group, not group.expanded)

    def set_expanded(self, group: RowGroup[T, G], expanded: bool) -> None:
        if group.headerless or group.expanded == expanded:
            return
        group.expanded = expanded
        self._view.notify()

    # -- Derived views --

    @derived(lambda self: self.items_source.revision)
    def row_items(self) -> List[RowItem[T]]:
        """One row per record; rows are reused for records seen before."""
        cache: Dict[int, RowItem[T]] = {}
        rows = []
        for item in self.items_source.results:
            row = self._row_item_cache.get(id(item))
            if row is None or row.item is not item:
                row = RowItem(item)
            cache[id(item)] = row
            rows.append(row)
        self._row_item_cache = cache
        return rows

    @derived(lambda self: self.items_source.revision)
    def groups(self) -> List[RowGroup[T, G]]:
        """Partitions in first-seen key order; group rows are reused by key."""
        groups: Dict[Any, RowGroup[T, G]] = {}
        for row in self.row_items:
            key = self.group_by(row.item)
            group = groups.get(key)
            if group is None:
                group = self._group_cache.get(key)
                if group is None:
                    group = RowGroup(key, expanded=self.default_expanded)
                group.items = []
                groups[key] = group
            group.items.append(row)
            row.group = group
        self._group_cache = groups
        return list(groups.values())

    def _find_sort_column(self) -> Optional[Column[T]]:
        for column in self.columns:
            if column.name == self._sort_column:
                return column
        return None

    @derived(lambda self: self.dependencies())
    def groups_filtered_sorted(self) -> List[RowGroup[T, G]]:
        """Groups with at least one passing record, in first-seen order of the
        filtered sequence."""
        predicate = self.filter
        column = self._find_sort_column()
        reverse = self._sort_dir is SortDir.DESC
        for group in self.groups:  # also links rows to their groups
            group.items_filtered = []

        ordered: Dict[Any, RowGroup[T, G]] = {}
        for row in self.row_items:
            if not predicate(row.item):
                continue
            group = ordered.setdefault(row.group.key, row.group)
            group.items_filtered.append(row)

        if column is not None:
            for group in ordered.values():
                # sorted() is stable in both directions.
                group.items_filtered = sorted(
                    group.items_filtered, key=lambda row: column.sort_value(row.item), reverse=reverse
                )
        return list(ordered.values())

    @derived(lambda self: self.dependencies())
    def rows(self) -> List[Row]:
        rows: List[Row] = []
        for group in self.groups_filtered_sorted:
            if group.headerless:
                rows.extend(group.items_filtered)
                continue
            rows.append(group)
            if group.expanded:
                rows.extend(group.items_filtered)
        return rows

    @property
    def items_filtered_count(self) -> int:
        return sum(len(group.items_filtered) for group in self.groups_filtered_sorted)

    # -- Selection --

    def select(self, item: T) -> None:
        """Select the row of *item*, expanding its group so it is rendered."""
        if not self.groups:  # also links rows to their groups
            return
        row = self._row_item_cache.get(id(item))
        if row is None or row.item is not item:
            logger.debug("select(): item is not part of this table")
            return
        if row.group is not None:
            self.set_expanded(row.group, True)
        self.selection.set(row)

    def select_row(self, row: Row) -> None:
        """Select *row*; selecting a group row also toggles its expansion."""
        self.selection.set(row)
        if row.kind is RowKind.GROUP:
            self.toggle_expanded(row)
