"""
Inbound host message payloads.

Each command the host may send has a model; ``parse_inbound`` validates a
raw message against the model for its command.  Commands without a model
are not part of the protocol and are ignored by the caller.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import ProtocolError
from .sarif import ResultId
from .state import ResultStatus


class InboundMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    command: str


class SelectMessage(InboundMessage):
    id: Optional[ResultId] = None  # None means deselect


class AddedLog(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    uri: str
    text: Optional[str] = None
    uri_upgraded: Optional[str] = Field(default=None, alias="uriUpgraded")
    webview_uri: Optional[str] = Field(default=None, alias="webviewUri")


class SpliceLogsMessage(InboundMessage):
    added: List[AddedLog] = Field(default_factory=list)
    removed: List[str] = Field(default_factory=list)


class SpliceResultsFixedMessage(InboundMessage):
    added: List[str] = Field(default_factory=list)
    removed: List[str] = Field(default_factory=list)


class SetBannerMessage(InboundMessage):
    text: Optional[str] = None


class BasePathSetMessage(InboundMessage):
    pass


class LoadResultStatusesMessage(InboundMessage):
    result_statuses: Optional[Dict[str, ResultStatus]] = Field(
        default=None, alias="resultStatuses"
    )


INBOUND_MODELS: Dict[str, Type[InboundMessage]] = {
    "select": SelectMessage,
    "spliceLogs": SpliceLogsMessage,
    "spliceResultsFixed": SpliceResultsFixedMessage,
    "setBanner": SetBannerMessage,
    "basePathSet": BasePathSetMessage,
    "loadResultStatuses": LoadResultStatusesMessage,
}


def is_foreign(data: Any) -> bool:
    """True for empty or command-less messages and those injected by
    development tooling."""
    if not data or not isinstance(data, dict) or not data.get("command"):
        return True
    # 'react-devtools-*' carry a source, bundler notifications a type.
    return bool(data.get("source") or data.get("type"))


def parse_inbound(data: Dict[str, Any]) -> Optional[InboundMessage]:
    """Validate *data* against its command model.

    Returns ``None`` for messages without a known command.

    Raises
    ------
    ProtocolError
        If the payload does not match the shape its command requires.
    """
    model = INBOUND_MODELS.get(data.get("command") or "")
    if model is None:
        return None
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ProtocolError(
            f"Malformed '{data.get('command')}' message: {exc.error_count()} error(s)"
        ) from exc
