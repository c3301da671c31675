"""
Configuration Loader for the SARIF result panel.

Implements a layered configuration system:
    hardcoded defaults < .sarif-panel.yml < env vars < explicit overrides

Usage:
    from sarif_panel.config_loader import load_config
    config = load_config(overrides={"default_selection": True})
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".sarif-panel.yml"
ENV_PREFIX = "SARIF_PANEL_"

# ---------------------------------------------------------------------------
# Default configuration
# ---------------------------------------------------------------------------

def get_default_config() -> Dict[str, Any]:
    """Return all configuration parameters with their defaults.

    This is the lowest-priority layer.  Every configurable key must appear
    here so that downstream code never needs to guard against missing keys.
    """
    return {
        # -- Banner --
        "banner_revert_seconds": 3.0,
        "base_path_banner": "Base path updated. Paths should now resolve.",

        # -- Columns --
        "reserved_property_keys": ["tags"],
        "fallback_sort_column": "Line",
        "dynamic_column_width": 150,

        # -- Table --
        "default_group_expanded": True,
        "default_selection": False,

        # -- Persistence --
        "state_indent": 4,

        # -- Loading --
        "fetch_timeout": 30,

        # -- Logging --
        "log_level": "INFO",
    }

# ---------------------------------------------------------------------------
# YAML file
# ---------------------------------------------------------------------------

def load_config_file(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Load the YAML config file.

    With no *path*, ``.sarif-panel.yml`` in the working directory is used
    when it exists; a missing default file is not an error.

    Raises
    ------
    FileNotFoundError
        If an explicit *path* does not exist.
    ValueError
        If the file does not contain a mapping.
    """
    if path is None:
        candidate = Path(CONFIG_FILE_NAME)
        if not candidate.is_file():
            return {}
        path = candidate

    path = Path(path)
    logger.info("Loading panel config from %s", path)
    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a mapping, got {type(raw).__name__}")

    known = get_default_config()
    for key in raw:
        if key not in known:
            logger.debug("Unknown config key %r in %s (kept)", key, path)
    return raw

# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

# Mapping: env var suffix -> (config_key, type)
# Types: "str", "bool", "int", "float", "list"
_ENV_MAPPINGS: List[tuple] = [
    ("BANNER_REVERT_SECONDS",   "banner_revert_seconds",  "float"),
    ("BASE_PATH_BANNER",        "base_path_banner",       "str"),
    ("RESERVED_PROPERTY_KEYS",  "reserved_property_keys", "list"),
    ("FALLBACK_SORT_COLUMN",    "fallback_sort_column",   "str"),
    ("DYNAMIC_COLUMN_WIDTH",    "dynamic_column_width",   "int"),
    ("DEFAULT_GROUP_EXPANDED",  "default_group_expanded", "bool"),
    ("DEFAULT_SELECTION",       "default_selection",      "bool"),
    ("STATE_INDENT",            "state_indent",           "int"),
    ("FETCH_TIMEOUT",           "fetch_timeout",          "float"),
    ("LOG_LEVEL",               "log_level",              "str"),
]


def _coerce(raw: str, type_tag: str) -> Any:
    """Convert a raw env-var string to the appropriate Python type."""
    if type_tag == "bool":
        return raw.lower() == "true"
    if type_tag == "int":
        return int(raw)
    if type_tag == "float":
        return float(raw)
    if type_tag == "list":
        return [part.strip() for part in raw.split(",") if part.strip()]
    return raw


def load_env_overrides() -> Dict[str, Any]:
    """Load configuration values from explicitly-set environment variables.

    Only variables that are **present** in ``os.environ`` are returned, so
    defaults and file values are not accidentally overwritten.
    """
    overrides: Dict[str, Any] = {}

    for suffix, config_key, type_tag in _ENV_MAPPINGS:
        env_name = ENV_PREFIX + suffix
        if env_name not in os.environ:
            continue
        try:
            overrides[config_key] = _coerce(os.environ[env_name], type_tag)
        except (ValueError, TypeError) as exc:
            logger.warning(
                "Ignoring env var %s: could not convert %r to %s (%s)",
                env_name, os.environ[env_name], type_tag, exc,
            )

    return overrides

# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------

def deep_merge(base: dict, override: dict) -> dict:
    """Merge *override* into *base*.  Only non-None override values win."""
    merged = dict(base)
    for key, value in override.items():
        if value is not None:
            merged[key] = value
    return merged


def load_config(
    path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build the effective configuration from all layers."""
    config = get_default_config()
    config = deep_merge(config, load_config_file(path))
    config = deep_merge(config, load_env_overrides())
    config = deep_merge(config, overrides or {})
    return config
