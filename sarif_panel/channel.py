"""
Host channel - the outbound half of the panel <-> host message protocol.

The stores never talk to a transport directly.  They receive a
``MessageChannel`` at construction and send through ``HostClient``, which
knows every outbound command.  Sends are fire-and-forget; a reply, if any,
arrives later as an ordinary inbound message.

Outbound commands:
    load, setState, setResultStatus, select, selectLog, refresh,
    removeResultFixed, setBasePath, saveStateFile, loadStateFile
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Protocol, runtime_checkable

from .schemas.sarif import Result
from .schemas.state import ResultStatus

logger = logging.getLogger(__name__)


@runtime_checkable
class MessageChannel(Protocol):
    """Transport to the host.

    Any object with a ``post_message(dict)`` method satisfies the protocol.
    Implementations must not call back into the stores synchronously.
    """

    def post_message(self, message: Dict[str, Any]) -> None:
        ...


class InMemoryChannel:
    """Channel that records every message; used by tests and local tooling."""

    def __init__(self) -> None:
        self.messages: List[Dict[str, Any]] = []

    def post_message(self, message: Dict[str, Any]) -> None:
        self.messages.append(message)

    def commands(self) -> List[str]:
        return [message["command"] for message in self.messages]

    def sent(self, command: str) -> List[Dict[str, Any]]:
        return [message for message in self.messages if message["command"] == command]

    def clear(self) -> None:
        self.messages.clear()


class HostClient:
    """Typed wrapper over a ``MessageChannel`` for the outbound command set."""

    def __init__(self, channel: MessageChannel):
        self.channel = channel

    def _post(self, command: str, **payload: Any) -> None:
        message = {"command": command, **payload}
        logger.debug("-> host: %s", command)
        self.channel.post_message(message)

    def load(self) -> None:
        self._post("load")

    def set_state(self, state: str) -> None:
        self._post("setState", state=state)

    def set_result_status(self, result_id: str, status: ResultStatus) -> None:
        self._post("setResultStatus", resultId=result_id, status=status.value)

    def select(self, result: Result) -> None:
        """Ask the host to reveal *result*'s primary location."""
        region = result.region.model_dump(by_alias=True, exclude_none=True) if result.region else None
        self._post(
            "select",
            logUri=result.log_uri,
            uri=result.uri_content or result.uri,
            uriBase=result.uri_base,
            region=region,
            id=list(result.result_id) if result.result_id else None,
        )

    def select_log(self, result: Result) -> None:
        self._post("selectLog", id=list(result.result_id) if result.result_id else None)

    def refresh(self) -> None:
        self._post("refresh")

    def remove_result_fixed(self, result: Result) -> None:
        self._post("removeResultFixed", id=list(result.result_id) if result.result_id else None)

    def set_base_path(self, log_uri: str, uri: str) -> None:
        self._post("setBasePath", logUri=log_uri, uri=uri)

    def save_state_file(self) -> None:
        self._post("saveStateFile")

    def load_state_file(self) -> None:
        self._post("loadStateFile")
