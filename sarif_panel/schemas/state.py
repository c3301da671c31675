"""
Persisted panel state and filter defaults.

The host stores the panel preferences as an opaque text blob.  The blob is
produced by ``PersistedState.to_text`` so the key order is fixed by the
order the filter maps were built in, not by whatever the transport does
to nested objects.
"""

from __future__ import annotations

import copy
import json
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

VisibilityMap = Dict[str, bool]
FilterMap = Dict[str, VisibilityMap]

COLUMNS_KEY = "Columns"

DEFAULT_ROW_FILTERS: FilterMap = {
    "Level": {
        "Error": True,
        "Warning": True,
        "Note": True,
        "None": True,
    },
    "Baseline": {
        "New": True,
        "Unchanged": True,
        "Updated": True,
        "Absent": False,
    },
    "Suppression": {
        "Not Suppressed": True,
        "Suppressed": False,
    },
}

DEFAULT_COLUMN_FILTERS: FilterMap = {
    COLUMNS_KEY: {
        "Line": True,
        "File": True,
        "Status": True,
        "Message": True,
        "Baseline": False,
        "Suppression": False,
        "Rule": False,
    },
}


class ResultStatus(str, Enum):
    """Triage verdict a user assigns to a result"""
    UNCHECKED = "unchecked"
    TRUE_POSITIVE = "true-positive"
    FALSE_POSITIVE = "false-positive"


def default_row_filters() -> FilterMap:
    return copy.deepcopy(DEFAULT_ROW_FILTERS)


def default_column_filters() -> FilterMap:
    return copy.deepcopy(DEFAULT_COLUMN_FILTERS)


def _coerce_visibility(value: Any) -> bool:
    # Older builds stored 'visible' / false instead of booleans.
    if isinstance(value, str):
        return value.lower() == "visible"
    return bool(value)


class PersistedState(BaseModel):
    """Shape of the blob exchanged with the host via ``setState``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    filters_row: FilterMap = Field(default_factory=dict)
    filters_column: FilterMap = Field(default_factory=dict)
    column_order: List[str] = Field(default_factory=list)

    @field_validator("filters_row", "filters_column", mode="before")
    @classmethod
    def coerce_visibility(cls, v: Any) -> Any:
        """Accept legacy string visibility values."""
        if not isinstance(v, dict):
            return v
        return {
            category: (
                {name: _coerce_visibility(flag) for name, flag in values.items()}
                if isinstance(values, dict) else values
            )
            for category, values in v.items()
        }

    @classmethod
    def from_blob(cls, blob: Union[str, Dict[str, Any], None]) -> "PersistedState":
        """Parse a previously persisted blob; ``None`` or empty yields defaults."""
        if not blob:
            return cls()
        if isinstance(blob, str):
            return cls.model_validate_json(blob)
        return cls.model_validate(blob)

    def to_text(self, indent: Optional[int] = 4) -> str:
        return json.dumps(self.model_dump(by_alias=True), indent=indent)


def merge_filters(defaults: FilterMap, persisted: FilterMap) -> FilterMap:
    """Overlay persisted visibility flags on the defaults.

    Every category and value present in *defaults* is kept, so entries
    introduced after the state was saved are not dropped.  Persisted values
    the defaults do not know are kept as well.
    """
    merged = copy.deepcopy(defaults)
    for category, values in persisted.items():
        merged.setdefault(category, {}).update(values)
    return merged
