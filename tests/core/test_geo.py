"""Unit tests for planar distance calculations.

Pure function tests - no mocks needed, fast execution.
"""

import pytest
from datetime import datetime, timezone

from coordlog.core.coordinate import Coordinate
from coordlog.core.geo import (
    SearchBox,
    calculate_distance,
    filter_by_box,
    rank_by_distance,
)


NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_coordinate(coordinate_id: int, x: int, y: int, z: int) -> Coordinate:
    """Create a coordinate for testing."""
    return Coordinate(
        id=coordinate_id,
        x=x,
        y=y,
        z=z,
        raw=f"X: {x}, Y: {y}, Z: {z}",
        origin_timestamp=NOW,
        created_at=NOW,
    )


class TestCalculateDistance:
    """Tests for calculate_distance()."""

    def test_same_point_returns_zero(self):
        """Distance from point to itself should be zero."""
        assert calculate_distance(10, -20, 10, -20) == 0.0

    def test_pythagorean_triple(self):
        """3-4-5 triangle."""
        assert calculate_distance(0, 0, 3, 4) == pytest.approx(5.0)

    def test_symmetric(self):
        """Distance should be the same in both directions."""
        assert calculate_distance(1, 2, -7, 9) == pytest.approx(calculate_distance(-7, 9, 1, 2))


class TestSearchBox:
    """Tests for SearchBox.contains()."""

    def test_contains_center(self):
        """Center is inside."""
        assert SearchBox(x=0, z=0, radius=10).contains(0, 0) is True

    def test_contains_edge(self):
        """Points exactly at the radius on an axis are inside."""
        box = SearchBox(x=0, z=0, radius=10)
        assert box.contains(10, -10) is True

    def test_corner_outside_circle_is_inside_box(self):
        """The box is square, so corners beyond the circle still match."""
        box = SearchBox(x=0, z=0, radius=10)
        assert box.contains(10, 10) is True
        assert calculate_distance(10, 10, 0, 0) > 10

    def test_outside_on_one_axis(self):
        """Exceeding the radius on either axis excludes the point."""
        box = SearchBox(x=0, z=0, radius=10)
        assert box.contains(11, 0) is False
        assert box.contains(0, -11) is False


class TestFilterByBox:
    """Tests for filter_by_box()."""

    def test_filters_out_far_coordinates(self):
        """Only coordinates inside the box remain."""
        near = make_coordinate(1, 5, 0, 5)
        far = make_coordinate(2, 500, 0, 5)
        assert filter_by_box([near, far], SearchBox(x=0, z=0, radius=100)) == [near]

    def test_ignores_y(self):
        """Height never affects box membership."""
        high = make_coordinate(1, 0, 100000, 0)
        assert filter_by_box([high], SearchBox(x=0, z=0, radius=1)) == [high]


class TestRankByDistance:
    """Tests for rank_by_distance()."""

    def test_sorted_nearest_first(self):
        """Results are ascending by XZ distance."""
        a = make_coordinate(1, 1010, 64, -20)
        b = make_coordinate(2, 10, 64, -20)
        c = make_coordinate(3, 0, 0, 500)

        ranked = rank_by_distance([a, b, c], 0, 0)

        assert [r.coordinate.id for r in ranked] == [2, 3, 1]
        distances = [r.distance for r in ranked]
        assert distances == sorted(distances)

    def test_distance_ignores_y(self):
        """Vertical offset is not part of the distance."""
        ranked = rank_by_distance([make_coordinate(1, 3, 999, 4)], 0, 0)
        assert ranked[0].distance == pytest.approx(5.0)

    def test_ties_keep_input_order(self):
        """Equal distances keep their original order."""
        a = make_coordinate(1, 5, 0, 0)
        b = make_coordinate(2, -5, 0, 0)
        ranked = rank_by_distance([a, b], 0, 0)
        assert [r.coordinate.id for r in ranked] == [1, 2]

    def test_empty_list(self):
        """No coordinates, no ranking."""
        assert rank_by_distance([], 0, 0) == []
