"""
Column registry - fixed and dynamically discovered table columns.

A ``Column`` pairs a display name with an extractor that renders a record
as text and, optionally, an extractor that yields a sortable primitive.
Widths are shared observable values so every view of the same column
resizes together.

``DynamicColumnSet`` records the result property keys seen across all
ingested logs.  It only ever grows; each new key is registered once and
seeds a hidden entry in the column visibility map.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, List, Optional, Sequence, TypeVar, Union

from .filters import FilterState
from .reactive import Observable, ObservableValue
from .schemas.sarif import Result

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_COLUMN_WIDTH = 50
DYNAMIC_COLUMN_WIDTH = 150
PLACEHOLDER = "—"


@dataclass(eq=False)
class Column(Generic[T]):
    """A named extractor over records of type ``T``."""

    name: str
    width: Union[int, ObservableValue] = field(default=100)
    to_text: Callable[[T], str] = field(default=lambda item: "", repr=False)
    to_sortable: Optional[Callable[[T], Any]] = field(default=None, repr=False)
    min_width: int = MIN_COLUMN_WIDTH

    def __post_init__(self):
        if not isinstance(self.width, ObservableValue):
            self.width = ObservableValue(max(int(self.width), self.min_width))

    def text(self, item: T) -> str:
        return self.to_text(item)

    def sort_value(self, item: T) -> Any:
        """Sortable primitive; falls back to the display text."""
        if self.to_sortable is None:
            return self.to_text(item)
        return self.to_sortable(item)

    def resize(self, width: int) -> None:
        self.width.set(max(int(width), self.min_width))


def render_property(value: Any) -> str:
    """Display text for an arbitrary property value."""
    if value is None:
        return PLACEHOLDER
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value)
    if isinstance(value, bool):
        # Match the JSON spelling used by the log itself.
        return "true" if value else "false"
    return str(value)


def property_column(key: str, width: int = DYNAMIC_COLUMN_WIDTH) -> Column[Result]:
    """Column backed by ``result.properties[key]``."""
    return Column(
        key,
        width,
        lambda result: render_property(result.properties.get(key)),
    )


class DynamicColumnSet(Observable):
    """Append-only ordered set of property keys promoted to columns."""

    def __init__(self, filter_state: FilterState, reserved: Sequence[str] = ("tags",)) -> None:
        super().__init__()
        self._filter_state = filter_state
        self._reserved = frozenset(reserved)
        self._names: List[str] = []

    @property
    def names(self) -> List[str]:
        return list(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def register(self, keys: Iterable[str]) -> List[str]:
        """Register unseen, non-reserved *keys*; returns the ones added."""
        added = []
        for key in keys:
            if key in self._reserved or key in self._names or key in added:
                continue
            added.append(key)
        if not added:
            return added

        self._names.extend(added)
        for key in added:
            self._filter_state.seed_column(key, False)
        logger.info("Discovered %d dynamic column(s): %s", len(added), ", ".join(added))
        self.notify()
        return added


def property_keys(results: Iterable[Result]) -> List[str]:
    """Distinct property keys across *results*, in first-seen order."""
    seen: dict = {}
    for result in results:
        for key in result.properties:
            seen.setdefault(key, None)
    return list(seen)
