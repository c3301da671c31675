"""
Log loading - parse log text, or fetch it first when the host only sent a
resource locator.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional
from urllib.parse import unquote, urlparse

import requests
from pydantic import ValidationError

from .exceptions import FetchError, LogParseError
from .schemas.sarif import Log

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[str]]

DEFAULT_FETCH_TIMEOUT = 30


def _read_locator(locator: str, timeout: float) -> str:
    parsed = urlparse(locator)
    if parsed.scheme in ("http", "https"):
        response = requests.get(locator, timeout=timeout)
        response.raise_for_status()
        return response.text
    path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(locator)
    return path.read_text(encoding="utf-8")


def make_fetcher(timeout: float = DEFAULT_FETCH_TIMEOUT) -> Fetcher:
    """Fetcher for http(s) URLs, ``file:`` URIs and plain paths.

    The blocking read runs in a worker thread so the inbound message loop
    is not stalled.
    """

    async def fetch(locator: str) -> str:
        try:
            return await asyncio.to_thread(_read_locator, locator, timeout)
        except (requests.RequestException, OSError) as exc:
            raise FetchError(locator, str(exc)) from exc

    return fetch


def parse_log(text: str, uri: str, uri_upgraded: Optional[str] = None) -> Log:
    """Parse SARIF *text* and stamp the host-assigned identity on it.

    Raises
    ------
    LogParseError
        If *text* is not JSON or not shaped like a SARIF log.
    """
    try:
        log = Log.model_validate_json(text)
    except ValidationError as exc:
        raise LogParseError(uri, f"{exc.error_count()} validation error(s)") from exc
    log.uri = uri
    log.uri_upgraded = uri_upgraded
    return log
