"""
Error hierarchy for the chart synchronization core.

ConfigurationError and its RoutingError subclass signal a malformed
column-replacement map; DecodeError covers a single column's cell values;
SourceError covers a backing table that failed to open or dropped its
connection.
"""

from typing import Any, Optional


class ChartSyncError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(ChartSyncError):
    """The column-replacement map or a destination path is malformed."""


class RoutingError(ConfigurationError):
    """A destination path did not resolve inside the chart structure.

    Attributes:
        destination: The destination path as written in the replacement map.
        segment: The path segment that failed to resolve, if known.
    """

    def __init__(self, message: str, destination: str = "", segment: Optional[str] = None):
        super().__init__(message)
        self.destination = destination
        self.segment = segment


class DecodeError(ChartSyncError):
    """A raw cell value could not be turned into a plain Python value."""

    def __init__(self, message: str, column: Optional[str] = None):
        super().__init__(message)
        self.column = column


class SourceError(ChartSyncError):
    """A backing table subscription failed or was disconnected."""

    def __init__(self, message: str, table: Any = None):
        super().__init__(message)
        self.table = table
