"""
Triage status tracking for results (unchecked / true-positive / false-positive).

The panel only keeps the working copy.  Every user verdict is echoed to the
host, which owns durable storage and hands the full map back through a
``loadResultStatuses`` message when it has one.
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Union

from .channel import HostClient
from .reactive import Observable
from .schemas.state import ResultStatus

logger = logging.getLogger(__name__)


class StatusTracker(Observable):
    """Result key -> ``ResultStatus``; absent keys read as unchecked."""

    def __init__(self, host: HostClient):
        super().__init__()
        self._host = host
        self._statuses: Dict[str, ResultStatus] = {}

    @property
    def statuses(self) -> Dict[str, ResultStatus]:
        return dict(self._statuses)

    def get_status(self, result_key: str) -> ResultStatus:
        return self._statuses.get(result_key, ResultStatus.UNCHECKED)

    def set_status(self, result_key: str, status: Union[ResultStatus, str]) -> None:
        """Record a user verdict and send it to the host.

        Raises
        ------
        ValueError
            If *status* is not a known status value.
        """
        status = ResultStatus(status)
        if self._statuses.get(result_key) is not status:
            self._statuses[result_key] = status
            self.notify()
        logger.info("Result %s marked %s", result_key, status.value)
        self._host.set_result_status(result_key, status)

    def load_all(self, statuses: Mapping[str, Union[ResultStatus, str]]) -> None:
        """Replace the whole map with statuses delivered by the host."""
        self._statuses = {key: ResultStatus(value) for key, value in statuses.items()}
        logger.debug("Loaded %d result status(es)", len(self._statuses))
        self.notify()
