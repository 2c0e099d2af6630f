"""Coordinate data model - Pure functions.

This module defines the immutable Coordinate record and its conversion
to and from plain dicts used by the persistence layer.
All functions are pure with no side effects.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Coordinate:
    """Immutable stored coordinate.

    Attributes:
        id: Store-assigned identifier, unique and never reused
        x: East/west position
        y: Vertical position
        z: North/south position
        raw: Original text the triple was extracted from
        origin_timestamp: Time reported by the ingesting source (UTC)
        created_at: Time the store accepted the record (UTC)
    """
    id: int
    x: int
    y: int
    z: int
    raw: str
    origin_timestamp: datetime
    created_at: datetime

    @property
    def triple(self) -> tuple[int, int, int]:
        """Return (x, y, z) tuple."""
        return (self.x, self.y, self.z)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Pure function. Naive values are assumed to be UTC.

    Args:
        value: ISO-8601 string, datetime, or None

    Returns:
        Aware datetime, or None if missing or unparseable
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.warning("Ignoring unparseable timestamp: %r", value)
            return None
    else:
        logger.warning("Ignoring non-string timestamp: %r", value)
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def coordinate_to_dict(coordinate: Coordinate) -> dict[str, Any]:
    """Convert a Coordinate to a JSON-serializable dict."""
    return {
        "id": coordinate.id,
        "x": coordinate.x,
        "y": coordinate.y,
        "z": coordinate.z,
        "raw": coordinate.raw,
        "origin_timestamp": coordinate.origin_timestamp.isoformat(),
        "created_at": coordinate.created_at.isoformat(),
    }


def coordinate_from_dict(data: dict[str, Any]) -> Coordinate:
    """Build a Coordinate from a stored dict.

    Pure function. Accepts the legacy record shape, which carries a single
    ``timestamp`` field and no ``created_at``.

    Args:
        data: Stored record

    Returns:
        Coordinate

    Raises:
        KeyError: If id or any axis is missing
        ValueError: If an axis is not an integer
    """
    origin = parse_timestamp(data.get("origin_timestamp", data.get("timestamp")))
    created = parse_timestamp(data.get("created_at")) or origin

    if origin is None:
        origin = created or datetime.fromtimestamp(0, tz=timezone.utc)
    if created is None:
        created = origin

    return Coordinate(
        id=int(data["id"]),
        x=int(data["x"]),
        y=int(data["y"]),
        z=int(data["z"]),
        raw=str(data.get("raw", "")),
        origin_timestamp=origin,
        created_at=created,
    )
