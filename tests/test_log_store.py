"""
Tests for the LogStore: ingestion order, derived results, dynamic column
discovery and selection clearing.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sarif_panel.exceptions import LogParseError
from sarif_panel.filters import FilterState
from sarif_panel.log_store import LogStore
from sarif_panel.reactive import ObservableValue
from sarif_panel.table.rows import RowItem

from sample_logs import LOG_A_DATA, LOG_B_DATA, URI_A, URI_B, WORKSPACE_URI, make_log


class TestLogStore:
    def setup_method(self):
        self.filter_state = FilterState()
        self.selection = ObservableValue(None)
        self.store = LogStore(self.filter_state, self.selection, workspace_uri=WORKSPACE_URI)

    def test_documents_keep_ingestion_order(self):
        self.store.add_document(make_log(LOG_B_DATA, URI_B))
        self.store.add_document(make_log(LOG_A_DATA, URI_A))
        assert [log.uri for log in self.store.logs] == [URI_B, URI_A]
        assert [r.result_id for r in self.store.results][:2] == [(URI_B, 0, 0), (URI_A, 0, 0)]

    def test_results_are_augmented_before_observers_run(self):
        seen = []
        self.store.subscribe(lambda: seen.extend(r.message_text for r in self.store.results))
        self.store.add_document(make_log(LOG_A_DATA, URI_A))
        assert seen[0] == "Avoid eval"

    def test_results_are_recomputed_after_change(self):
        self.store.add_document(make_log(LOG_A_DATA, URI_A))
        assert len(self.store.results) == 4
        self.store.add_document(make_log(LOG_B_DATA, URI_B))
        assert len(self.store.results) == 5
        assert len(self.store.runs) == 2

    def test_dynamic_columns_registered(self):
        self.store.add_document(make_log(LOG_A_DATA, URI_A))
        assert self.store.dynamic_columns.names == ["github/alertNumber", "confidence"]
        assert self.filter_state.is_column_visible("confidence") is False

    def test_remove_document(self):
        self.store.add_document(make_log(LOG_A_DATA, URI_A))
        self.store.add_document(make_log(LOG_B_DATA, URI_B))
        assert self.store.remove_document(URI_A) is True
        assert [log.uri for log in self.store.logs] == [URI_B]
        assert self.store.remove_document(URI_A) is False

    def test_dynamic_columns_survive_removal(self):
        self.store.add_document(make_log(LOG_A_DATA, URI_A))
        self.store.remove_document(URI_A)
        assert "confidence" in self.store.dynamic_columns

    def test_removing_last_document_clears_selection(self):
        self.store.add_document(make_log(LOG_A_DATA, URI_A))
        self.store.add_document(make_log(LOG_B_DATA, URI_B))
        self.selection.set(RowItem(self.store.results[0]))

        self.store.remove_document(URI_A)
        assert self.selection.get() is not None

        self.store.remove_document(URI_B)
        assert self.selection.get() is None

    def test_lookups(self):
        self.store.add_document(make_log(LOG_A_DATA, URI_A))
        assert self.store.find_log(URI_A).uri == URI_A
        assert self.store.find_log(URI_B) is None
        assert self.store.find_result((URI_A, 0, 1)).rule_id == "R2"
        assert self.store.find_result((URI_B, 0, 0)) is None

    def test_augmentation_failure_rejects_document(self):
        def broken(log, driverless_rules, workspace_uri):
            raise ValueError("unexpected artifact shape")

        store = LogStore(self.filter_state, self.selection, augment=broken)
        notified = []
        store.subscribe(lambda: notified.append(True))

        with pytest.raises(LogParseError) as excinfo:
            store.add_document(make_log(LOG_A_DATA, URI_A))
        assert excinfo.value.uri == URI_A
        assert "unexpected artifact shape" in str(excinfo.value)
        assert list(store.logs) == []
        assert store.dynamic_columns.names == []
        assert notified == []
