"""Query policy - Pure functions.

This module holds the result types of the query engine and the pure
rules behind them: count clamping, radius validation, export
serialization and size truncation.
"""

from dataclasses import dataclass

from coordlog.core.coordinate import Coordinate
from coordlog.core.errors import InvalidParameterError
from coordlog.core.geo import RankedCoordinate


@dataclass(frozen=True)
class SearchResult:
    """Every coordinate inside a search box, nearest first.

    Attributes:
        x: Center X
        z: Center Z
        radius: Search radius
        matches: Full ranked match list (never truncated)
    """
    x: int
    z: int
    radius: int
    matches: list[RankedCoordinate]

    @property
    def total(self) -> int:
        """Number of box-matched coordinates."""
        return len(self.matches)

    def nearest(self, limit: int) -> list[RankedCoordinate]:
        """Return at most `limit` closest matches for display."""
        return self.matches[:max(limit, 0)]


@dataclass(frozen=True)
class StatsResult:
    """Store statistics.

    Attributes:
        total: Number of stored coordinates
        latest: Most recently created coordinate, None if empty
    """
    total: int
    latest: Coordinate | None


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of deleting one coordinate.

    Attributes:
        coordinate_id: Requested id
        deleted: False when no coordinate had that id
    """
    coordinate_id: int
    deleted: bool


@dataclass(frozen=True)
class ExportResult:
    """Serialized export text.

    Attributes:
        text: One "x, y, z" line per coordinate, newest first
        exported: Number of lines in text
        total: Number of coordinates in the store
        truncated: True if lines were dropped to fit the size limit
    """
    text: str
    exported: int
    total: int
    truncated: bool

    @property
    def is_partial(self) -> bool:
        """True when the export holds fewer coordinates than the store."""
        return self.truncated or self.exported < self.total


def clamp_count(
    count: int | None,
    default: int,
    minimum: int,
    maximum: int,
) -> int:
    """Clamp a requested listing size into its allowed range.

    Pure function.

    Args:
        count: Requested size, None for the default
        default: Size used when nothing was requested
        minimum: Smallest allowed size
        maximum: Largest allowed size

    Returns:
        Size within [minimum, maximum]
    """
    if count is None:
        count = default
    return max(minimum, min(int(count), maximum))


def validate_radius(radius: int | None, default: int) -> int:
    """Resolve a search radius, rejecting non-positive values.

    Pure function.

    Raises:
        InvalidParameterError: If radius is zero or negative
    """
    if radius is None:
        return default
    if radius <= 0:
        raise InvalidParameterError(f"Radius must be positive, got {radius}")
    return int(radius)


def format_export_line(coordinate: Coordinate) -> str:
    """Format one export line as "x, y, z"."""
    return f"{coordinate.x}, {coordinate.y}, {coordinate.z}"


def serialize_export(
    coordinates: list[Coordinate],
    total: int,
    max_chars: int,
) -> ExportResult:
    """Serialize coordinates for export, fitting a size limit.

    Pure function. Whole lines are dropped from the end (the oldest
    coordinates) until the text fits. A single line longer than the limit
    is cut to the limit.

    Args:
        coordinates: Coordinates to export, newest first
        total: Store-wide coordinate count
        max_chars: Maximum length of the serialized text

    Returns:
        ExportResult with the text and truncation flag
    """
    lines: list[str] = []
    length = 0
    truncated = False

    for coordinate in coordinates:
        line = format_export_line(coordinate)
        added = len(line) + (1 if lines else 0)
        if length + added > max_chars:
            truncated = True
            if not lines and max_chars > 0:
                lines.append(line[:max_chars])
            break
        lines.append(line)
        length += added

    return ExportResult(
        text="\n".join(lines),
        exported=len(lines),
        total=total,
        truncated=truncated,
    )
