"""
Index Store - the top-level state of a result panel.

Composes the log store, the two result tables (by location and by rule),
filter state and its persistence, triage statuses, the fixed-result set,
the selection coordinator and the banner, and applies inbound host
messages to them.

Inbound messages are handled one at a time in arrival order; a message
that awaits a fetch still completes before the next one starts.  The
inbound lock belongs to the loop that delivers the messages and is
rebuilt when a later batch arrives on a different loop.

Example
-------
::

    channel = InMemoryChannel()
    store = IndexStore(channel, state=persisted_blob, workspace_uri="file:///repo")
    await store.on_message({"command": "spliceLogs", "added": [...], "removed": []})
    rows = store.selected_tab.get().store.rows
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from .augment import Augmenter, augment_log
from .channel import HostClient, MessageChannel
from .config_loader import deep_merge, get_default_config
from .exceptions import FetchError, LogParseError, ProtocolError
from .filters import FilterState
from .loader import Fetcher, make_fetcher, parse_log
from .log_store import LogStore
from .persistence import PersistenceBridge
from .reactive import ObservableList, ObservableValue
from .schemas.messages import (
    AddedLog,
    InboundMessage,
    LoadResultStatusesMessage,
    SelectMessage,
    SetBannerMessage,
    SpliceLogsMessage,
    SpliceResultsFixedMessage,
    is_foreign,
    parse_inbound,
)
from .schemas.sarif import Log, Result, ResultId
from .schemas.state import PersistedState, ResultStatus
from .selection import SelectionCoordinator
from .status import StatusTracker
from .table.result_table_store import ResultTableStore
from .table.rows import RowKind

logger = logging.getLogger(__name__)


@dataclass
class Tab:
    """A panel tab; ``store`` is ``None`` for tabs without a result table."""

    name: str
    store: Optional[ResultTableStore] = None

    def __str__(self) -> str:
        return self.name


class IndexStore:
    """Top-level panel state.

    Parameters
    ----------
    channel : MessageChannel
        Outbound transport to the host.
    state : str | dict | None
        Previously persisted preferences (the ``setState`` blob).
    workspace_uri : str | None
        Root for workspace-relative result paths.
    is_active : callable
        Returns whether the panel has focus; gates outbound ``select``.
    augment : Augmenter
        Log normalization applied on ingestion.
    fetch : Fetcher | None
        Loads log text for ``spliceLogs`` entries sent without text.
    config : dict | None
        Overrides for ``config_loader.get_default_config()``.
    """

    def __init__(
        self,
        channel: MessageChannel,
        state: Union[str, Dict[str, Any], None] = None,
        workspace_uri: Optional[str] = None,
        is_active: Callable[[], bool] = lambda: True,
        augment: Augmenter = augment_log,
        fetch: Optional[Fetcher] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        self.config = deep_merge(get_default_config(), config or {})
        self.host = HostClient(channel)

        self.filter_state = FilterState(_load_persisted(state))
        self.persistence = PersistenceBridge(self.filter_state, self.host, self.config["state_indent"])

        self.coordinator = SelectionCoordinator(self.host, is_active)
        self.selection = self.coordinator.selection

        self.log_store = LogStore(
            self.filter_state,
            self.selection,
            augment=augment,
            workspace_uri=workspace_uri,
            reserved_property_keys=self.config["reserved_property_keys"],
        )
        self.status_tracker = StatusTracker(self.host)
        self.results_fixed: ObservableList[str] = ObservableList()
        self.banner: ObservableValue[str] = ObservableValue("")

        self.result_table_store_by_location = self._table("File", lambda result: result.relative_uri)
        self.result_table_store_by_rule = self._table("Rule", lambda result: result.rule_id)

        self.tabs: List[Tab] = [
            Tab("Locations", self.result_table_store_by_location),
            Tab("Rules", self.result_table_store_by_rule),
            Tab("Logs"),
        ]
        self.selected_tab: ObservableValue[Tab] = ObservableValue(self.tabs[0])

        self._fetch = fetch or make_fetcher(self.config["fetch_timeout"])
        self._inbox: Optional[asyncio.Lock] = None
        self._inbox_loop: Optional[asyncio.AbstractEventLoop] = None
        self._banner_revert: Optional[asyncio.TimerHandle] = None
        self._banner_before_notice = ""
        self._handlers = {
            "select": self._on_select,
            "spliceLogs": self._on_splice_logs,
            "spliceResultsFixed": self._on_splice_results_fixed,
            "setBanner": self._on_set_banner,
            "basePathSet": self._on_base_path_set,
            "loadResultStatuses": self._on_load_result_statuses,
        }

        if self.config["default_selection"]:
            self._select_first_item_once()

    def _table(self, group_name: str, group_by: Callable[[Result], Any]) -> ResultTableStore:
        return ResultTableStore(
            group_name,
            group_by,
            self.log_store,
            self.filter_state,
            self.status_tracker,
            self.results_fixed,
            self.selection,
            fallback_sort_column=self.config["fallback_sort_column"],
            default_expanded=self.config["default_group_expanded"],
            dynamic_column_width=self.config["dynamic_column_width"],
        )

    def _select_first_item_once(self) -> None:
        # Rows first appear either when a log arrives or when filters stop hiding them.
        store = self.result_table_store_by_location
        unsubscribers: List[Callable[[], None]] = []

        def check() -> None:
            rows = store.rows
            if not rows:
                return
            for unsubscribe in unsubscribers:
                unsubscribe()
            item = next((row for row in rows if row.kind is RowKind.ITEM), None)
            self.selection.set(item)

        unsubscribers.append(self.log_store.subscribe(check))
        unsubscribers.append(self.filter_state.subscribe(check))

    # -- Results --

    @property
    def logs(self) -> List[Log]:
        return self.log_store.logs.snapshot()

    @property
    def results(self) -> List[Result]:
        return self.log_store.results

    @property
    def dynamic_columns(self) -> List[str]:
        return self.log_store.dynamic_columns.names

    def add_log(self, log: Log) -> None:
        self.log_store.add_document(log)

    def remove_log(self, uri: str) -> bool:
        return self.log_store.remove_document(uri)

    # -- Filters --

    @property
    def keywords(self) -> str:
        return self.filter_state.keywords

    def set_keywords(self, keywords: str) -> None:
        self.filter_state.set_keywords(keywords)

    def clear_filters(self) -> None:
        self.filter_state.clear_filters()

    def set_column_order(self, order: List[str]) -> None:
        self.filter_state.set_column_order(order)

    # -- Triage --

    def set_result_status(self, result_key: str, status: Union[ResultStatus, str]) -> None:
        self.status_tracker.set_status(result_key, status)

    def get_result_status(self, result_key: str) -> ResultStatus:
        return self.status_tracker.get_status(result_key)

    def remove_result_fixed(self, result: Result) -> None:
        """Ask the host to drop the resolved marker of *result*."""
        self.host.remove_result_fixed(result)

    # -- Selection --

    def select_by_id(self, result_id: ResultId) -> None:
        """Select a result through the selected tab's table.

        Raises
        ------
        ProtocolError
            If no loaded log contains *result_id*.
        """
        result = self.log_store.find_result(tuple(result_id))
        if result is None:
            raise ProtocolError(f"Unknown result {list(result_id)}")
        store = self.selected_tab.get().store
        if store is not None:
            store.select(result)

    def post_load(self) -> None:
        """Tell the host the panel is ready for its logs."""
        self.host.load()

    # -- Messages --

    async def on_message(self, data: Any) -> None:
        """Apply one inbound host message.

        Empty messages and development-tool noise are ignored silently.
        Protocol errors are logged and the message is dropped.
        """
        if is_foreign(data):
            return

        async with self._inbox_lock():
            try:
                message = parse_inbound(data)
                if message is None:
                    logger.debug("Ignoring unknown command %r", data.get("command"))
                    return
                await self._handlers[message.command](message)
            except ProtocolError as exc:
                logger.warning("Dropped '%s' message: %s", data.get("command"), exc)

    def _inbox_lock(self) -> asyncio.Lock:
        """The inbound lock of the running loop, rebound when the loop changes."""
        loop = asyncio.get_running_loop()
        if self._inbox is None or self._inbox_loop is not loop:
            self._inbox = asyncio.Lock()
            self._inbox_loop = loop
            # A revert scheduled on an earlier loop never fires.
            if self._banner_revert is not None:
                self._revert_banner()
        return self._inbox

    async def _on_select(self, message: SelectMessage) -> None:
        if message.id is None:
            self.selection.set(None)
            return
        self.select_by_id(message.id)

    async def _on_splice_logs(self, message: SpliceLogsMessage) -> None:
        for uri in message.removed:
            self.log_store.remove_document(uri)
        for added in message.added:
            try:
                log = await self._load(added)
                self.log_store.add_document(log)
            except (LogParseError, FetchError) as exc:
                logger.warning("Failed to load log %s: %s", added.uri, exc)
                self.banner.set(f"Failed to load {added.uri}.")

    async def _load(self, added: AddedLog) -> Log:
        if added.text:
            text = added.text
        elif added.webview_uri:
            text = await self._fetch(added.webview_uri)
        else:
            raise LogParseError(added.uri, "neither text nor webviewUri supplied")
        return parse_log(text, added.uri, added.uri_upgraded)

    async def _on_splice_results_fixed(self, message: SpliceResultsFixedMessage) -> None:
        for key in message.removed:
            self.results_fixed.remove(key)
        for key in message.added:
            if key not in self.results_fixed:
                self.results_fixed.append(key)

    async def _on_set_banner(self, message: SetBannerMessage) -> None:
        self._cancel_banner_revert()
        self.banner.set(message.text or "")

    async def _on_base_path_set(self, message: InboundMessage) -> None:
        # A repeated notice extends the first one; the banner it replaced is kept.
        if self._banner_revert is not None:
            self._banner_revert.cancel()
        else:
            self._banner_before_notice = self.banner.get()
        self.banner.set(self.config["base_path_banner"])
        loop = asyncio.get_running_loop()
        self._banner_revert = loop.call_later(self.config["banner_revert_seconds"], self._revert_banner)

    def _revert_banner(self) -> None:
        self._banner_revert = None
        self.banner.set(self._banner_before_notice)

    def _cancel_banner_revert(self) -> None:
        if self._banner_revert is not None:
            self._banner_revert.cancel()
            self._banner_revert = None

    async def _on_load_result_statuses(self, message: LoadResultStatusesMessage) -> None:
        self.status_tracker.load_all(message.result_statuses or {})


def _load_persisted(state: Union[str, Dict[str, Any], None]) -> PersistedState:
    try:
        return PersistedState.from_blob(state)
    except ValidationError as exc:
        logger.warning("Ignoring unreadable persisted state: %d error(s)", exc.error_count())
        return PersistedState()
