"""
SARIF Panel Exceptions Module

Custom exception classes for the result panel engine.
Centralized exception definitions for consistent error handling.
"""

__all__ = [
    "PanelError",
    "ProtocolError",
    "LogParseError",
    "FetchError",
]


class PanelError(Exception):
    """Base exception for all panel-related errors"""
    pass


class ProtocolError(PanelError):
    """Raised when an inbound host message cannot be honored

    Either the payload does not have the shape the command mandates, or it
    references a result identity that no loaded log contains.
    """
    pass


class LogParseError(PanelError):
    """Raised when log text is not a valid SARIF document"""

    def __init__(self, uri: str, reason: str):
        super().__init__(f"Unable to parse log {uri}: {reason}")
        self.uri = uri
        self.reason = reason


class FetchError(PanelError):
    """Raised when a log cannot be fetched from its resource locator"""

    def __init__(self, locator: str, reason: str):
        super().__init__(f"Unable to fetch log from {locator}: {reason}")
        self.locator = locator
        self.reason = reason
