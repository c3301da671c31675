"""
Tests for log loading: parsing and fetching by resource locator.
"""

import asyncio
import json
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sarif_panel.exceptions import FetchError, LogParseError
from sarif_panel.loader import make_fetcher, parse_log

from sample_logs import LOG_B_DATA, URI_B, sarif_text


class TestParseLog:
    def test_parses_and_stamps_identity(self):
        log = parse_log(sarif_text(LOG_B_DATA), URI_B, "file:///tmp/b-v2.sarif")
        assert log.uri == URI_B
        assert log.uri_upgraded == "file:///tmp/b-v2.sarif"
        assert log.runs[0].results[0].rule_id == "R9"

    @pytest.mark.parametrize("text", [
        "{not json",
        "[1, 2]",
        json.dumps({"runs": "nope"}),
        json.dumps({"runs": [{"artifacts": ["not-an-object"]}]}),
    ])
    def test_invalid_text(self, text):
        with pytest.raises(LogParseError) as excinfo:
            parse_log(text, URI_B)
        assert excinfo.value.uri == URI_B


class TestFetcher:
    def test_http(self):
        response = MagicMock()
        response.text = sarif_text(LOG_B_DATA)
        with patch("sarif_panel.loader.requests.get", return_value=response) as mock_get:
            text = asyncio.run(make_fetcher(timeout=5)("https://host/b.sarif"))
        assert json.loads(text) == LOG_B_DATA
        mock_get.assert_called_once_with("https://host/b.sarif", timeout=5)
        response.raise_for_status.assert_called_once()

    def test_http_error_becomes_fetch_error(self):
        with patch("sarif_panel.loader.requests.get", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(FetchError) as excinfo:
                asyncio.run(make_fetcher()("https://host/b.sarif"))
        assert excinfo.value.locator == "https://host/b.sarif"

    def test_file_uri_and_plain_path(self, tmp_path):
        path = tmp_path / "b.sarif"
        path.write_text(sarif_text(LOG_B_DATA), encoding="utf-8")
        fetch = make_fetcher()
        assert json.loads(asyncio.run(fetch(path.as_uri()))) == LOG_B_DATA
        assert json.loads(asyncio.run(fetch(str(path)))) == LOG_B_DATA

    def test_missing_file(self, tmp_path):
        with pytest.raises(FetchError):
            asyncio.run(make_fetcher()(str(tmp_path / "missing.sarif")))
