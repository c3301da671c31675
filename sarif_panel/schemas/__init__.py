"""
Pydantic schemas for the SARIF result panel

This package contains the models for SARIF documents as the panel reads
them, the persisted preference blob, and the inbound host messages.
Schemas catch format errors at the host boundary.
"""

from .sarif import (
    Artifact,
    ArtifactContent,
    ArtifactLocation,
    Location,
    Log,
    Message,
    PhysicalLocation,
    Region,
    ReportingDescriptor,
    Result,
    ResultId,
    Run,
    Suppression,
    Tool,
    ToolComponent,
    result_key,
)
from .state import (
    COLUMNS_KEY,
    DEFAULT_COLUMN_FILTERS,
    DEFAULT_ROW_FILTERS,
    FilterMap,
    PersistedState,
    ResultStatus,
    VisibilityMap,
    merge_filters,
)
from .messages import (
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

__all__ = [
    # SARIF object model
    "Artifact",
    "ArtifactContent",
    "ArtifactLocation",
    "Location",
    "Log",
    "Message",
    "PhysicalLocation",
    "Region",
    "ReportingDescriptor",
    "Result",
    "ResultId",
    "Run",
    "Suppression",
    "Tool",
    "ToolComponent",
    "result_key",
    # Persisted state
    "COLUMNS_KEY",
    "DEFAULT_COLUMN_FILTERS",
    "DEFAULT_ROW_FILTERS",
    "FilterMap",
    "PersistedState",
    "ResultStatus",
    "VisibilityMap",
    "merge_filters",
    # Host messages
    "AddedLog",
    "InboundMessage",
    "LoadResultStatusesMessage",
    "SelectMessage",
    "SetBannerMessage",
    "SpliceLogsMessage",
    "SpliceResultsFixedMessage",
    "is_foreign",
    "parse_inbound",
]
