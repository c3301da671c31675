"""
sarif_panel - reactive presentation engine for SARIF result logs.

Loads SARIF documents into a log store, groups, filters and sorts their
results into table rows, keeps filter preferences and triage statuses in
sync with a host over a message channel, and coordinates the selection
between the table and the host editor.

Usage:
    from sarif_panel import IndexStore, InMemoryChannel, setup_logging

    setup_logging("DEBUG")
    store = IndexStore(InMemoryChannel())
"""

import logging
import sys
from typing import Optional, Union

from .channel import HostClient, InMemoryChannel, MessageChannel
from .config_loader import load_config
from .exceptions import FetchError, LogParseError, PanelError, ProtocolError
from .index_store import IndexStore, Tab

__version__ = "0.1.0"

__all__ = [
    "FetchError",
    "HostClient",
    "InMemoryChannel",
    "IndexStore",
    "LogParseError",
    "MessageChannel",
    "PanelError",
    "ProtocolError",
    "Tab",
    "load_config",
    "setup_logging",
]


def setup_logging(
    level: Union[int, str] = logging.INFO,
    format_str: Optional[str] = None,
) -> logging.Logger:
    """Configure a stream handler for the ``sarif_panel`` loggers.

    Args:
        level: Logging level, as a number or a name such as ``"DEBUG"``
        format_str: Custom format string

    Returns:
        The package logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    if format_str is None:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(level=level, format=format_str, handlers=[logging.StreamHandler(sys.stderr)])

    logger = logging.getLogger("sarif_panel")
    logger.setLevel(level)
    return logger
