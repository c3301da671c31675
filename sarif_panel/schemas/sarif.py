"""
SARIF document models.

Only the parts of the SARIF 2.1.0 object model the panel reads are declared;
``extra = "allow"`` keeps everything else so documents survive a round-trip
without schema changes.

Fields marked ``exclude=True`` are not part of SARIF.  They are filled in by
augmentation right after a log is ingested and are never serialized.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# (log uri, run index, result index)
ResultId = Tuple[str, int, int]


def result_key(result_id: ResultId) -> str:
    """Map-key form of a result identity, e.g. ``["file:///a.sarif",0,3]``."""
    return json.dumps(list(result_id), separators=(",", ":"))


class SarifModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Message(SarifModel):
    text: Optional[str] = None
    markdown: Optional[str] = None
    id: Optional[str] = None
    arguments: List[str] = Field(default_factory=list)


class MultiformatMessageString(SarifModel):
    text: Optional[str] = None
    markdown: Optional[str] = None


class ReportingConfiguration(SarifModel):
    level: Optional[str] = None
    enabled: bool = True


class ReportingDescriptor(SarifModel):
    """A rule definition."""

    id: str = ""
    name: Optional[str] = None
    short_description: Optional[MultiformatMessageString] = None
    full_description: Optional[MultiformatMessageString] = None
    default_configuration: Optional[ReportingConfiguration] = None
    message_strings: Dict[str, MultiformatMessageString] = Field(default_factory=dict)
    help_uri: Optional[str] = None


class ToolComponent(SarifModel):
    name: str = ""
    rules: List[ReportingDescriptor] = Field(default_factory=list)


class Tool(SarifModel):
    driver: ToolComponent = Field(default_factory=ToolComponent)


class ArtifactLocation(SarifModel):
    uri: Optional[str] = None
    uri_base_id: Optional[str] = None
    index: Optional[int] = None


class ArtifactContent(SarifModel):
    text: Optional[str] = None
    binary: Optional[str] = None


class Artifact(SarifModel):
    """An entry of ``run.artifacts``; ``contents`` is set when the file is embedded."""

    location: Optional[ArtifactLocation] = None
    contents: Optional[ArtifactContent] = None


class Region(SarifModel):
    start_line: Optional[int] = None
    start_column: Optional[int] = None
    end_line: Optional[int] = None
    end_column: Optional[int] = None
    char_offset: Optional[int] = None
    char_length: Optional[int] = None


class PhysicalLocation(SarifModel):
    artifact_location: Optional[ArtifactLocation] = None
    region: Optional[Region] = None


class Location(SarifModel):
    physical_location: Optional[PhysicalLocation] = None


class Suppression(SarifModel):
    kind: str = "external"
    status: Optional[str] = None  # accepted / underReview / rejected


class Result(SarifModel):
    """One reported finding."""

    rule_id: Optional[str] = None
    rule_index: Optional[int] = None
    level: Optional[str] = None
    message: Message = Field(default_factory=Message)
    locations: List[Location] = Field(default_factory=list)
    baseline_state: Optional[str] = None  # new / unchanged / updated / absent
    suppressions: Optional[List[Suppression]] = None
    properties: Dict[str, Any] = Field(default_factory=dict)

    # -- Augmentation (not SARIF) --
    result_id: Optional[ResultId] = Field(default=None, exclude=True)
    log_uri: str = Field(default="", exclude=True)
    rule: Optional[ReportingDescriptor] = Field(default=None, exclude=True, repr=False)
    message_text: str = Field(default="", exclude=True)
    uri: Optional[str] = Field(default=None, exclude=True)
    uri_base: Optional[str] = Field(default=None, exclude=True)
    uri_content: Optional[str] = Field(default=None, exclude=True)
    relative_uri: Optional[str] = Field(default=None, exclude=True)
    region: Optional[Region] = Field(default=None, exclude=True)
    suppression: str = Field(default="", exclude=True)

    @property
    def key(self) -> str:
        if self.result_id is None:
            raise ValueError("Result has not been augmented")
        return result_key(self.result_id)

    @property
    def physical_location(self) -> Optional[PhysicalLocation]:
        if not self.locations:
            return None
        return self.locations[0].physical_location


class Run(SarifModel):
    tool: Tool = Field(default_factory=Tool)
    results: Optional[List[Result]] = None
    original_uri_base_ids: Dict[str, ArtifactLocation] = Field(default_factory=dict)
    artifacts: List[Artifact] = Field(default_factory=list)


class Log(SarifModel):
    """A loaded SARIF document.

    ``uri`` is the identity assigned by the host; ``uri_upgraded`` is set
    when the host had to upgrade an older SARIF version to read the file.
    """

    version: str = "2.1.0"
    runs: List[Run] = Field(default_factory=list)

    uri: str = Field(default="", exclude=True)
    uri_upgraded: Optional[str] = Field(default=None, exclude=True)

    @property
    def needs_upgrade(self) -> bool:
        return self.uri_upgraded is not None
