"""
Persistence bridge - echoes filter and column preferences to the host.

Every change to the row filters, the column visibility map or the column
order is serialized with ``PersistedState.to_text`` and sent as a
``setState`` message.  Keyword edits change the filter state too but are
not persisted, so a change that leaves the serialized text identical is
not sent again.
"""

from __future__ import annotations

import logging
from typing import Optional

from .channel import HostClient
from .filters import FilterState

logger = logging.getLogger(__name__)


class PersistenceBridge:
    """Watches a ``FilterState`` and saves it through the host."""

    def __init__(self, filter_state: FilterState, host: HostClient, indent: Optional[int] = 4):
        self._filter_state = filter_state
        self._host = host
        self._indent = indent
        self._last_state = self.serialize()
        self._unsubscribe = filter_state.subscribe(self._on_change)

    def serialize(self) -> str:
        return self._filter_state.to_persisted().to_text(indent=self._indent)

    def _on_change(self) -> None:
        state = self.serialize()
        if state == self._last_state:
            return
        self._last_state = state
        logger.debug("Saving panel state (%d bytes)", len(state))
        self._host.set_state(state)

    def close(self) -> None:
        """Stop observing; later changes are no longer saved."""
        self._unsubscribe()
