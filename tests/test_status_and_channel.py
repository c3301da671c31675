"""
Tests for the triage StatusTracker and the outbound HostClient commands.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sarif_panel.augment import augment_log
from sarif_panel.channel import HostClient, InMemoryChannel, MessageChannel
from sarif_panel.schemas.state import ResultStatus
from sarif_panel.status import StatusTracker

from sample_logs import KEY_A0, LOG_A_DATA, URI_A, WORKSPACE_URI, make_log


# ============================================================================
# StatusTracker
# ============================================================================


class TestStatusTracker:
    def setup_method(self):
        self.channel = InMemoryChannel()
        self.tracker = StatusTracker(HostClient(self.channel))

    def test_absent_key_is_unchecked(self):
        assert self.tracker.get_status("missing") is ResultStatus.UNCHECKED

    def test_set_status_sends_exactly_one_message(self):
        self.tracker.set_status(KEY_A0, ResultStatus.TRUE_POSITIVE)
        assert self.channel.messages == [
            {"command": "setResultStatus", "resultId": KEY_A0, "status": "true-positive"},
        ]
        assert self.tracker.get_status(KEY_A0) is ResultStatus.TRUE_POSITIVE

    def test_set_status_accepts_wire_value(self):
        self.tracker.set_status(KEY_A0, "false-positive")
        assert self.tracker.get_status(KEY_A0) is ResultStatus.FALSE_POSITIVE

    def test_same_status_resends_without_notifying(self):
        self.tracker.set_status(KEY_A0, ResultStatus.TRUE_POSITIVE)
        revision = self.tracker.revision
        self.tracker.set_status(KEY_A0, ResultStatus.TRUE_POSITIVE)
        assert self.tracker.revision == revision
        assert len(self.channel.sent("setResultStatus")) == 2

    def test_unknown_status_is_rejected(self):
        with pytest.raises(ValueError):
            self.tracker.set_status(KEY_A0, "maybe")
        assert self.channel.messages == []

    def test_load_all_replaces_map(self):
        self.tracker.set_status("old", ResultStatus.TRUE_POSITIVE)
        self.channel.clear()

        self.tracker.load_all({KEY_A0: "false-positive"})

        assert self.tracker.statuses == {KEY_A0: ResultStatus.FALSE_POSITIVE}
        assert self.tracker.get_status("old") is ResultStatus.UNCHECKED
        assert self.channel.messages == []


# ============================================================================
# HostClient
# ============================================================================


class TestHostClient:
    def setup_method(self):
        self.channel = InMemoryChannel()
        self.host = HostClient(self.channel)
        log = make_log(LOG_A_DATA, URI_A)
        augment_log(log, {}, WORKSPACE_URI)
        self.result = log.runs[0].results[0]

    def test_in_memory_channel_satisfies_protocol(self):
        assert isinstance(self.channel, MessageChannel)

    def test_select(self):
        self.host.select(self.result)
        assert self.channel.messages == [{
            "command": "select",
            "logUri": URI_A,
            "uri": "file:///repo/src/app.py",
            "uriBase": None,
            "region": {"startLine": 10},
            "id": [URI_A, 0, 0],
        }]

    def test_result_commands_carry_identity(self):
        self.host.select_log(self.result)
        self.host.remove_result_fixed(self.result)
        assert self.channel.sent("selectLog")[0]["id"] == [URI_A, 0, 0]
        assert self.channel.sent("removeResultFixed")[0]["id"] == [URI_A, 0, 0]

    def test_simple_commands(self):
        self.host.load()
        self.host.refresh()
        self.host.save_state_file()
        self.host.load_state_file()
        self.host.set_base_path(URI_A, "file:///elsewhere/")
        self.host.set_state("{}")
        assert self.channel.commands() == [
            "load", "refresh", "saveStateFile", "loadStateFile", "setBasePath", "setState",
        ]
        assert self.channel.sent("setBasePath")[0] == {
            "command": "setBasePath", "logUri": URI_A, "uri": "file:///elsewhere/",
        }
