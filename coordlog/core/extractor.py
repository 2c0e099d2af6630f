"""Coordinate extraction - Pure functions.

This module turns the free-form description of an incoming ping into an
(x, y, z) integer triple, e.g. "Coords: X: -187677, Y: -47, Z: 159415".
All functions are pure with no side effects.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from coordlog.core.coordinate import parse_timestamp
from coordlog.core.errors import ExtractionError, PayloadError


# Whitespace after a label may not cross a line break, and "." never does.
COORDINATE_PATTERN = re.compile(
    r"X:[^\S\n]*(-?\d+).*Y:[^\S\n]*(-?\d+).*Z:[^\S\n]*(-?\d+)",
    re.IGNORECASE | re.ASCII,
)


@dataclass(frozen=True)
class Ping:
    """A single location reading taken from an ingestion payload.

    Attributes:
        description: Free text holding the coordinates
        timestamp: Time reported by the source, None if absent
    """
    description: str
    timestamp: datetime | None = None


def extract_coordinates(text: str) -> tuple[int, int, int]:
    """Extract an ordered X/Y/Z triple from text.

    Pure function. Labels are case-insensitive and the whole triple must
    sit on one line.

    Args:
        text: Raw description text

    Returns:
        (x, y, z) tuple

    Raises:
        ExtractionError: If no ordered triple is present
    """
    match = COORDINATE_PATTERN.search(text or "")
    if match is None:
        raise ExtractionError(f"Could not parse coordinates from: {text!r}")

    try:
        x, y, z = (int(group) for group in match.groups())
    except ValueError as e:
        # int() refuses digit strings beyond sys.get_int_max_str_digits()
        raise ExtractionError(f"Coordinate value too long: {e}") from e
    return (x, y, z)


def parse_webhook_payload(payload: Any) -> Ping:
    """Take the first embed of a webhook payload as a Ping.

    Pure function.

    Args:
        payload: Decoded JSON body, expected to hold an "embeds" list

    Returns:
        Ping built from the first embed

    Raises:
        PayloadError: If there is no usable embed object
    """
    if not isinstance(payload, dict):
        raise PayloadError("No embeds found")

    embeds = payload.get("embeds")
    if not isinstance(embeds, list) or not embeds:
        raise PayloadError("No embeds found")

    embed = embeds[0]
    if not isinstance(embed, dict):
        raise PayloadError("No embeds found")

    description = embed.get("description") or ""
    if not isinstance(description, str):
        description = str(description)

    return Ping(
        description=description,
        timestamp=parse_timestamp(embed.get("timestamp")),
    )
