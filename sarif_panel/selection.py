"""
Selection coordination between the panel and the host.

One ``SelectionCoordinator`` owns the selection slot shared by the table
stores of a panel.  Whenever the selection becomes a result with a
location, the host is asked to reveal that location, but only while the
panel is the active view.  A selection the host itself requested (the
caret moved in the editor) arrives while the editor is active, so it is
applied here without being echoed back.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Sequence

from .channel import HostClient
from .reactive import ObservableValue
from .table.rows import Row, RowKind, UnexpectedRowError

logger = logging.getLogger(__name__)

KEY_UP = "ArrowUp"
KEY_DOWN = "ArrowDown"
KEY_ESCAPE = "Escape"


class SelectionCoordinator:
    """Shared selection slot plus keyboard movement and host sync.

    Parameters
    ----------
    host : HostClient
        Receives ``select`` notifications.
    is_active : callable
        Returns whether the panel currently has focus.
    """

    def __init__(self, host: HostClient, is_active: Callable[[], bool] = lambda: True):
        self._host = host
        self._is_active = is_active
        self.selection: ObservableValue[Optional[Row]] = ObservableValue(None)
        self.selection.subscribe(self._on_selection_changed)

    def get(self) -> Optional[Row]:
        return self.selection.get()

    def set(self, row: Optional[Row]) -> None:
        self.selection.set(row)

    def clear(self) -> None:
        self.selection.set(None)

    # -- Keyboard --

    def _index_of_selection(self, rows: Sequence[Row]) -> int:
        selected = self.selection.get()
        for index, row in enumerate(rows):
            if row is selected:
                return index
        return -1

    def move_up(self, rows: Sequence[Row]) -> None:
        """Select the previous rendered row; with nothing selected, the first."""
        if not rows:
            self.clear()
            return
        index = self._index_of_selection(rows)
        self.set(rows[index - 1] if index > 0 else rows[max(index, 0)])

    def move_down(self, rows: Sequence[Row]) -> None:
        """Select the next rendered row; stays on the last one."""
        if not rows:
            self.clear()
            return
        index = self._index_of_selection(rows)
        self.set(rows[index + 1] if index + 1 < len(rows) else rows[index])

    def handle_key(self, key: str, rows: Sequence[Row]) -> bool:
        """Apply a navigation key against the rendered *rows*.

        Returns whether the key was handled.
        """
        handlers: Dict[str, Callable[[], None]] = {
            KEY_UP: lambda: self.move_up(rows),
            KEY_DOWN: lambda: self.move_down(rows),
            KEY_ESCAPE: self.clear,
        }
        handler = handlers.get(key)
        if handler is None:
            return False
        handler()
        return True

    # -- Host sync --

    def _on_selection_changed(self) -> None:
        row = self.selection.get()
        if row is None:
            return
        kind = getattr(row, "kind", None)
        if kind is RowKind.GROUP:
            return
        if kind is not RowKind.ITEM:
            raise UnexpectedRowError(row)

        result = row.item
        if not result.uri or result.physical_location is None:
            return  # Location-less result.
        if not self._is_active():
            return
        self._host.select(result)
