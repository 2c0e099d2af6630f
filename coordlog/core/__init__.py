"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Coordinate extraction from free text
- Planar distance and search-box calculations
- Query policy (clamping, export truncation)
- Message formatting

All functions here are deterministic and have no I/O.
"""

from coordlog.core.coordinate import Coordinate
from coordlog.core.errors import (
    CoordLogError,
    ExtractionError,
    InvalidParameterError,
    NotificationError,
    PayloadError,
    StoreError,
)
from coordlog.core.extractor import Ping, extract_coordinates, parse_webhook_payload
from coordlog.core.geo import RankedCoordinate, SearchBox, calculate_distance, rank_by_distance
from coordlog.core.query import (
    DeleteResult,
    ExportResult,
    SearchResult,
    StatsResult,
    serialize_export,
)
from coordlog.core.formatter import format_slack_message

__all__ = [
    # Coordinate
    "Coordinate",
    # Errors
    "CoordLogError",
    "ExtractionError",
    "InvalidParameterError",
    "NotificationError",
    "PayloadError",
    "StoreError",
    # Extractor
    "Ping",
    "extract_coordinates",
    "parse_webhook_payload",
    # Geo
    "RankedCoordinate",
    "SearchBox",
    "calculate_distance",
    "rank_by_distance",
    # Query
    "DeleteResult",
    "ExportResult",
    "SearchResult",
    "StatsResult",
    "serialize_export",
    # Formatter
    "format_slack_message",
]
