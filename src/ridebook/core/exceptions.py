"""
Ridebook exception hierarchy.

All ridebook exceptions inherit from RidebookError, making it easy for consumers
to catch library-level errors while still distinguishing specific failure modes.
"""


class RidebookError(Exception):
    """Base exception class for all ridebook errors."""


class ConfigurationError(RidebookError):
    """Raised for configuration errors (missing keys, invalid values)."""


class ZoneConfigError(ConfigurationError):
    """Raised when a zone range definition is malformed."""


class DataProcessingError(RidebookError):
    """Raised for data processing errors."""


class RideLoadError(DataProcessingError):
    """Raised when a ride recording cannot be read or parsed.

    ``kind`` is ``"io"`` for storage failures and ``"format"`` for
    content the loader could not make sense of.
    """

    def __init__(self, message: str, *, path: str | None = None, kind: str = "format"):
        super().__init__(message)
        self.path = path
        self.kind = kind


class MetricError(DataProcessingError):
    """Raised when a metric cannot be computed or its dependencies resolved."""


class ZoneIndexError(RidebookError, IndexError):
    """Raised when a zone index is outside the currently effective range."""
