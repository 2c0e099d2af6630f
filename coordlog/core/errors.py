"""Error taxonomy - Pure definitions.

Every failure the coordinate engine can report has a type here so that
callers can tell bad input apart from an unavailable system.
"""


class CoordLogError(Exception):
    """Base class for all coordinate engine errors."""


class ExtractionError(CoordLogError):
    """No ordered X/Y/Z triple could be found in the text."""


class PayloadError(CoordLogError):
    """The ingestion payload has no usable embed object."""


class InvalidParameterError(CoordLogError, ValueError):
    """A query or command parameter is outside its allowed range."""


class StoreError(CoordLogError):
    """The persistence medium failed on a read or write."""


class NotificationError(CoordLogError):
    """Best-effort delivery to the chat channel failed."""
