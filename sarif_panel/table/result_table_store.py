"""
Result Table Store - the table store bound to SARIF results.

Supplies the concrete columns (fixed ones plus one per dynamic property
key), the row filter (level, baseline and suppression visibility plus the
keyword search), column reordering, and the per-result lookups the table
needs while rendering (struck-through, triage status, context menu).
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Hashable, List, Optional, Protocol, Sequence, Tuple, TypeVar

from ..columns import DYNAMIC_COLUMN_WIDTH, PLACEHOLDER, Column, DynamicColumnSet, property_column
from ..filters import FilterState
from ..reactive import ObservableValue, derived
from ..schemas.sarif import Result
from ..schemas.state import ResultStatus
from ..status import StatusTracker
from .table_store import ItemsSource, TableStore

logger = logging.getLogger(__name__)

G = TypeVar("G")

GITHUB_ALERT_PROPERTY = "github/alertNumber"


class ResultsSource(ItemsSource, Protocol):
    """Record source that also owns the dynamic column set."""

    dynamic_columns: DynamicColumnSet


class ResultTableStore(TableStore[Result, G]):
    """A table of results grouped by ``group_by``.

    Parameters
    ----------
    group_name : str
        Name of the grouping; a column with this name is never shown since
        the group header already carries its value.
    group_by : callable
        Result -> group key.
    results_source : ResultsSource
        Normally the ``LogStore``.
    filter_state : FilterState
        Row filters, column visibility, keywords and column order.
    status_tracker : StatusTracker
        Triage statuses, rendered by the ``Status`` column.
    results_fixed : sequence of str
        Keys of results the user considers resolved.
    selection : ObservableValue
        Shared selection slot.
    fallback_sort_column : str
        Sort column used when there are no optional columns.
    default_expanded : bool
        Initial expansion of newly seen groups.
    dynamic_column_width : int
        Width given to property columns.
    """

    def __init__(
        self,
        group_name: str,
        group_by: Callable[[Result], Optional[G]],
        results_source: ResultsSource,
        filter_state: FilterState,
        status_tracker: StatusTracker,
        results_fixed: Sequence[str],
        selection: ObservableValue,
        fallback_sort_column: str = "Line",
        default_expanded: bool = True,
        dynamic_column_width: int = DYNAMIC_COLUMN_WIDTH,
    ):
        super().__init__(group_by, results_source, selection, default_expanded)
        self.group_name = group_name
        self.dynamic_column_width = dynamic_column_width
        self.results_source = results_source
        self.filter_state = filter_state
        self.status_tracker = status_tracker
        self.results_fixed = results_fixed
        self._dynamic_column_cache: Dict[str, Column[Result]] = {}

        self.columns_permanent: List[Column[Result]] = []
        self.columns_optional: List[Column[Result]] = [
            Column("Line", 50, _line_text, _line_number),
            Column("File", 250, lambda result: result.relative_uri or ""),
            Column("Status", 100, self._status_text),
            Column("Message", 300, lambda result: result.message_text or ""),
            Column("Baseline", 100, lambda result: result.baseline_state or ""),
            Column("Suppression", 100, lambda result: result.suppression or ""),
            Column("Rule", 220, _rule_text),
        ]

        self._sort_column = self.columns_optional[0].name if self.columns_optional else fallback_sort_column

    # -- Columns --

    @derived(lambda self: self.results_source.dynamic_columns.revision)
    def dynamic_property_columns(self) -> List[Column[Result]]:
        columns = []
        for key in self.results_source.dynamic_columns.names:
            column = self._dynamic_column_cache.get(key)
            if column is None:
                column = self._dynamic_column_cache[key] = property_column(key, self.dynamic_column_width)
            columns.append(column)
        return columns

    @property
    def columns(self) -> List[Column[Result]]:
        return [*self.columns_permanent, *self.columns_optional, *self.dynamic_property_columns]

    @derived(lambda self: (self.filter_state.revision, self.results_source.dynamic_columns.revision))
    def visible_columns(self) -> List[Column[Result]]:
        """Visible columns, user-ordered names first, then registry order."""
        unordered = [
            *[col for col in self.columns_permanent if col.name != self.group_name],
            *[
                col for col in [*self.columns_optional, *self.dynamic_property_columns]
                if col.name != self.group_name and self.filter_state.is_column_visible(col.name)
            ],
        ]

        order = self.filter_state.column_order
        if not order:
            return unordered

        by_name = {col.name: col for col in unordered}
        ordered = [by_name[name] for name in order if name in by_name]
        ordered_names = {col.name for col in ordered}
        ordered.extend(col for col in unordered if col.name not in ordered_names)
        return ordered

    def move_column(self, from_index: int, to_index: int) -> None:
        """Move the visible column at *from_index* to *to_index* and persist the order.

        Out-of-range indices are ignored.
        """
        names = [col.name for col in self.visible_columns]
        if not (0 <= from_index < len(names) and 0 <= to_index < len(names)):
            logger.debug("move_column(%d, %d) out of range for %d columns", from_index, to_index, len(names))
            return
        moved = names.pop(from_index)
        names.insert(to_index, moved)
        self.filter_state.set_column_order(names)

    # -- Filtering --

    def dependencies(self) -> Tuple[Hashable, ...]:
        return (
            *super().dependencies(),
            self.filter_state.revision,
            self.results_source.dynamic_columns.revision,
            self.status_tracker.revision,
        )

    @property
    def filter(self) -> Callable[[Result], bool]:
        filter_state = self.filter_state
        levels = set(filter_state.visible_values("Level"))
        baselines = set(filter_state.visible_values("Baseline"))
        suppressions = set(filter_state.visible_values("Suppression"))
        keywords = filter_state.keyword_tokens()
        columns = self.visible_columns

        def predicate(result: Result) -> bool:
            if (result.level or "") not in levels:
                return False
            if (result.baseline_state or "") not in baselines:
                return False
            if (result.suppression or "") not in suppressions:
                return False
            if not keywords:
                return True
            fields = [col.text(result).lower() for col in columns]
            return any(keyword in field for field in fields for keyword in keywords)

        return predicate

    # -- Per-result lookups --

    def is_line_through(self, result: Result) -> bool:
        return result.key in self.results_fixed

    def get_result_status(self, result: Result) -> ResultStatus:
        return self.status_tracker.get_status(result.key)

    def menu_context(self, result: Result) -> Optional[Dict[str, str]]:
        # Only code scanning alerts can be dismissed from the context menu.
        if not result.properties.get(GITHUB_ALERT_PROPERTY):
            return None
        return {"webviewSection": "isGithubAlert", "resultId": result.key}

    def _status_text(self, result: Result) -> str:
        status = self.status_tracker.get_status(result.key)
        if status is ResultStatus.TRUE_POSITIVE:
            return "TP"
        if status is ResultStatus.FALSE_POSITIVE:
            return "FP"
        return PLACEHOLDER


def _line_number(result: Result) -> int:
    region = result.region
    if region is None or region.start_line is None:
        return 0
    return region.start_line


def _line_text(result: Result) -> str:
    region = result.region
    if region is None or region.start_line is None:
        return PLACEHOLDER
    return str(region.start_line)


def _rule_text(result: Result) -> str:
    name = result.rule.name if result.rule is not None else None
    return f"{name or PLACEHOLDER} {result.rule_id or PLACEHOLDER}"
