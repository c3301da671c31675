"""
Table rows - the closed set of row variants a table store emits.

``Row`` is a tagged union: every row carries a ``kind`` discriminant and
consumers dispatch on it, raising ``UnexpectedRowError`` for anything else.
Rows compare by identity; the table store keeps one row object per group
key and per record so a selection survives recomputation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar, Union

T = TypeVar("T")
G = TypeVar("G")


class RowKind(Enum):
    """Discriminant of the ``Row`` union"""
    GROUP = "group"
    ITEM = "item"


@dataclass(eq=False)
class RowItem(Generic[T]):
    """A single record."""

    item: T
    group: Optional["RowGroup[T, Any]"] = field(default=None, repr=False)
    kind: RowKind = field(default=RowKind.ITEM, init=False)

    @property
    def key(self) -> int:
        return id(self.item)


@dataclass(eq=False)
class RowGroup(Generic[T, G]):
    """A group header and the records that share its key.

    ``items`` holds every record of the group; ``items_filtered`` the ones
    passing the current filter, in display order.  Both are kept while the
    group is collapsed.
    """

    key: G
    expanded: bool = True
    items: List[RowItem[T]] = field(default_factory=list, repr=False)
    items_filtered: List[RowItem[T]] = field(default_factory=list, repr=False)
    kind: RowKind = field(default=RowKind.GROUP, init=False)

    @property
    def title(self) -> G:
        return self.key

    @property
    def headerless(self) -> bool:
        """The implicit partition of records without a group key."""
        return self.key is None


Row = Union[RowGroup[Any, Any], RowItem[Any]]


class UnexpectedRowError(TypeError):
    """Raised when a value outside the ``Row`` union reaches a row consumer"""

    def __init__(self, row: Any):
        super().__init__(f"Unexpected row type: {type(row).__name__}")
