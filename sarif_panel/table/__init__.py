"""
Table stores: the generic grouping/filtering/sorting engine and its
binding to SARIF results.
"""

from .rows import Row, RowGroup, RowItem, RowKind, UnexpectedRowError
from .table_store import ItemsSource, SortDir, TableStore
from .result_table_store import ResultTableStore, ResultsSource

__all__ = [
    "ItemsSource",
    "ResultTableStore",
    "ResultsSource",
    "Row",
    "RowGroup",
    "RowItem",
    "RowKind",
    "SortDir",
    "TableStore",
    "UnexpectedRowError",
]
