"""Planar distance calculations - Pure functions.

Proximity is measured on the horizontal X/Z plane only; the vertical
Y axis is ignored on purpose, since horizontal distance is what matters
when looking for nearby locations.
All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass

from coordlog.core.coordinate import Coordinate


@dataclass(frozen=True)
class SearchBox:
    """Axis-aligned square around a search center.

    Attributes:
        x: Center X
        z: Center Z
        radius: Half the side length (inclusive)
    """
    x: int
    z: int
    radius: int

    def contains(self, x: int, z: int) -> bool:
        """Check if a point lies in the box, edges included."""
        return abs(x - self.x) <= self.radius and abs(z - self.z) <= self.radius


@dataclass(frozen=True)
class RankedCoordinate:
    """A coordinate with its distance from a search center.

    Attributes:
        coordinate: The stored coordinate
        distance: Euclidean distance on the X/Z plane
    """
    coordinate: Coordinate
    distance: float


def calculate_distance(x1: int, z1: int, x2: int, z2: int) -> float:
    """Calculate Euclidean distance between two points on the X/Z plane.

    Pure function.

    Args:
        x1: X of first point
        z1: Z of first point
        x2: X of second point
        z2: Z of second point

    Returns:
        Distance in blocks
    """
    return math.hypot(x1 - x2, z1 - z2)


def filter_by_box(
    coordinates: list[Coordinate],
    box: SearchBox,
) -> list[Coordinate]:
    """Filter coordinates to those inside a search box.

    Pure function.
    """
    return [c for c in coordinates if box.contains(c.x, c.z)]


def rank_by_distance(
    coordinates: list[Coordinate],
    x: int,
    z: int,
) -> list[RankedCoordinate]:
    """Attach distances to coordinates and sort nearest first.

    Pure function. The sort is stable, so equal distances keep their
    input order.

    Args:
        coordinates: Coordinates to rank
        x: Center X
        z: Center Z

    Returns:
        Ranked coordinates, ascending by distance
    """
    ranked = [
        RankedCoordinate(coordinate=c, distance=calculate_distance(c.x, c.z, x, z))
        for c in coordinates
    ]
    return sorted(ranked, key=lambda r: r.distance)
