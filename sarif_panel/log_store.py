"""
Log Store - the loaded SARIF documents and the flattened result list.

Documents are augmented and scanned for dynamic columns *before* they are
appended, so no observer of the document list ever sees a log without its
derived fields.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .augment import Augmenter, augment_log, find_result
from .columns import DynamicColumnSet, property_keys
from .exceptions import LogParseError
from .filters import FilterState
from .reactive import ObservableList, ObservableValue, derived
from .schemas.sarif import Log, ReportingDescriptor, Result, ResultId, Run

logger = logging.getLogger(__name__)


class LogStore:
    """Owns the document list and everything derived from it.

    Parameters
    ----------
    filter_state : FilterState
        Receives hidden visibility entries for newly discovered columns.
    selection : ObservableValue
        The shared selection slot; cleared whenever the last document goes.
    augment : Augmenter
        Normalization applied to each document on ingestion.
    workspace_uri : str | None
        Root for workspace-relative paths.
    reserved_property_keys : sequence of str
        Property keys never promoted to dynamic columns.
    """

    def __init__(
        self,
        filter_state: FilterState,
        selection: ObservableValue,
        augment: Augmenter = augment_log,
        workspace_uri: Optional[str] = None,
        reserved_property_keys: Sequence[str] = ("tags",),
    ):
        self.logs: ObservableList[Log] = ObservableList()
        self.dynamic_columns = DynamicColumnSet(filter_state, reserved_property_keys)
        self._selection = selection
        self._augment = augment
        self._workspace_uri = workspace_uri
        self._driverless_rules: Dict[str, ReportingDescriptor] = {}

        self.logs.subscribe(self._on_logs_changed)

    @property
    def revision(self) -> int:
        return self.logs.revision

    def subscribe(self, observer):
        return self.logs.subscribe(observer)

    # -- Mutations --

    def add_document(self, log: Log) -> None:
        """Augment *log*, register its property keys, then append it.

        Raises
        ------
        LogParseError
            If augmentation fails; the document is not added.
        """
        try:
            self._augment(log, self._driverless_rules, self._workspace_uri)
        except Exception as exc:
            raise LogParseError(log.uri, f"augmentation failed: {exc}") from exc
        results = [result for run in log.runs for result in (run.results or [])]
        self.dynamic_columns.register(property_keys(results))
        self.logs.append(log)
        logger.info("Loaded log %s (%d results)", log.uri, len(results))

    def remove_document(self, uri: str) -> bool:
        """Remove the first document with *uri*.  Returns whether one was found."""
        for index, log in enumerate(self.logs):
            if log.uri == uri:
                self.logs.pop(index)
                logger.info("Removed log %s", uri)
                return True
        return False

    def _on_logs_changed(self) -> None:
        if not len(self.logs):
            self._selection.set(None)

    # -- Derived --

    @derived(lambda self: self.logs.revision)
    def runs(self) -> List[Run]:
        return [run for log in self.logs for run in log.runs]

    @derived(lambda self: self.logs.revision)
    def results(self) -> List[Result]:
        """All results, ordered by document, then run, then result index."""
        return [result for run in self.runs for result in (run.results or [])]

    # -- Lookups --

    def find_log(self, uri: str) -> Optional[Log]:
        for log in self.logs:
            if log.uri == uri:
                return log
        return None

    def find_result(self, result_id: ResultId) -> Optional[Result]:
        return find_result(self.logs, result_id)
