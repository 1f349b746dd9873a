"""
Exception hierarchy for navodom.
"""


class NavodomError(Exception):
    """Base exception for all navodom errors."""


class ConfigError(NavodomError):
    """Invalid or missing configuration."""


class SourceUnavailableError(NavodomError):
    """The positioning device or its recording cannot be opened."""

    def __init__(self, message: str, source: str = ""):
        self.source = source
        super().__init__(message)


class RecordError(NavodomError, ValueError):
    """A navigation record could not be decoded."""
