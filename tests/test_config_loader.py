"""
Tests for config_loader.py: defaults, YAML file, env var overrides and
the full merge chain.
"""

import logging
import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sarif_panel import setup_logging
from sarif_panel.config_loader import (
    ENV_PREFIX,
    deep_merge,
    get_default_config,
    load_config,
    load_config_file,
    load_env_overrides,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name)


# ============================================================================
# Test get_default_config
# ============================================================================


class TestGetDefaultConfig:
    def test_sensible_defaults(self):
        config = get_default_config()
        assert config["banner_revert_seconds"] == 3.0
        assert config["reserved_property_keys"] == ["tags"]
        assert config["fallback_sort_column"] == "Line"
        assert config["default_group_expanded"] is True
        assert config["default_selection"] is False
        assert config["state_indent"] == 4

    def test_returns_fresh_copy(self):
        get_default_config()["reserved_property_keys"].append("x")
        assert get_default_config()["reserved_property_keys"] == ["tags"]


# ============================================================================
# Test load_config_file
# ============================================================================


class TestLoadConfigFile:
    def test_explicit_path(self, tmp_path):
        path = tmp_path / "panel.yml"
        path.write_text("default_selection: true\nfetch_timeout: 10\n")
        assert load_config_file(path) == {"default_selection": True, "fetch_timeout": 10}

    def test_missing_default_file_is_empty(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_config_file() == {}

    def test_default_file_in_working_directory(self, tmp_path, monkeypatch):
        (tmp_path / ".sarif-panel.yml").write_text("state_indent: 2\n")
        monkeypatch.chdir(tmp_path)
        assert load_config_file() == {"state_indent": 2}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert load_config_file(path) == {}

    def test_missing_explicit_path_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config_file(tmp_path / "nope.yml")

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_config_file(path)


# ============================================================================
# Test env overrides
# ============================================================================


class TestEnvOverrides:
    def test_only_present_vars(self):
        assert load_env_overrides() == {}

    def test_types_are_coerced(self, monkeypatch):
        monkeypatch.setenv("SARIF_PANEL_DEFAULT_SELECTION", "True")
        monkeypatch.setenv("SARIF_PANEL_FETCH_TIMEOUT", "2.5")
        monkeypatch.setenv("SARIF_PANEL_STATE_INDENT", "2")
        monkeypatch.setenv("SARIF_PANEL_RESERVED_PROPERTY_KEYS", "tags, internal ,")
        assert load_env_overrides() == {
            "default_selection": True,
            "fetch_timeout": 2.5,
            "state_indent": 2,
            "reserved_property_keys": ["tags", "internal"],
        }

    def test_bad_value_is_skipped(self, monkeypatch):
        monkeypatch.setenv("SARIF_PANEL_STATE_INDENT", "wide")
        assert load_env_overrides() == {}


# ============================================================================
# Test merge chain
# ============================================================================


class TestLoadConfig:
    def test_deep_merge_ignores_none(self):
        assert deep_merge({"a": 1, "b": 2}, {"a": None, "b": 3}) == {"a": 1, "b": 3}

    def test_layers(self, tmp_path, monkeypatch):
        path = tmp_path / "panel.yml"
        path.write_text("fetch_timeout: 10\nstate_indent: 2\ndefault_selection: true\n")
        monkeypatch.setenv("SARIF_PANEL_FETCH_TIMEOUT", "20")

        config = load_config(path, overrides={"default_selection": False})

        assert config["state_indent"] == 2          # file
        assert config["fetch_timeout"] == 20.0      # env beats file
        assert config["default_selection"] is False  # overrides beat everything
        assert config["banner_revert_seconds"] == 3.0


# ============================================================================
# Test setup_logging
# ============================================================================


class TestSetupLogging:
    def teardown_method(self):
        logging.getLogger("sarif_panel").setLevel(logging.NOTSET)

    def test_level_from_config(self, monkeypatch):
        monkeypatch.setenv("SARIF_PANEL_LOG_LEVEL", "debug")
        logger = setup_logging(load_config(overrides={})["log_level"])
        assert logger.name == "sarif_panel"
        assert logger.level == logging.DEBUG

    def test_numeric_level(self):
        assert setup_logging(logging.WARNING).level == logging.WARNING
