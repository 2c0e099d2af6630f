"""Query Engine - Reads and management operations over the store.

Thin layer that applies the pure query policy from the core to data
fetched from a CoordinateStore.
"""

import logging

from coordlog.core.config import Config
from coordlog.core.geo import SearchBox, filter_by_box, rank_by_distance
from coordlog.core.query import (
    DeleteResult,
    ExportResult,
    SearchResult,
    StatsResult,
    clamp_count,
    serialize_export,
    validate_radius,
)
from coordlog.core.coordinate import Coordinate
from coordlog.shell.coordinate_store import CoordinateStore


logger = logging.getLogger(__name__)


class QueryEngine:
    """Recency listing, radius search, statistics, deletion and export.

    Store failures propagate as StoreError; not-found outcomes are
    returned as values.
    """

    def __init__(self, store: CoordinateStore, config: Config | None = None) -> None:
        """Initialize the engine.

        Args:
            store: Coordinate store to query
            config: Limits and defaults (defaults if not provided)
        """
        self.store = store
        self.config = config or Config()

    def list_recent(self, count: int | None = None) -> list[Coordinate]:
        """List the newest coordinates, clamping count into range."""
        limit = clamp_count(
            count,
            default=self.config.recent_default_count,
            minimum=self.config.recent_min_count,
            maximum=self.config.recent_max_count,
        )
        return self.store.list_recent(limit)

    def search(self, x: int, z: int, radius: int | None = None) -> SearchResult:
        """Find every coordinate within a square of the target, nearest first.

        A coordinate matches when both |x - target x| and |z - target z|
        are at most the radius. Matches are ranked by Euclidean distance
        on the X/Z plane; Y never counts.

        Args:
            x: Target X
            z: Target Z
            radius: Half-width of the search square (default from config)

        Returns:
            SearchResult with the full ranked match list

        Raises:
            InvalidParameterError: If radius is not positive
        """
        radius = validate_radius(radius, self.config.search_default_radius)
        box = SearchBox(x=x, z=z, radius=radius)

        total = self.store.count()
        candidates = self.store.list_all(total) if total else []
        matches = rank_by_distance(filter_by_box(candidates, box), x, z)

        logger.debug(
            "Search at (%d, %d) r=%d matched %d of %d coordinates",
            x, z, radius, len(matches), len(candidates),
        )

        return SearchResult(x=x, z=z, radius=radius, matches=matches)

    def stats(self) -> StatsResult:
        """Total coordinate count and the most recent coordinate."""
        latest = self.store.list_recent(1)
        return StatsResult(
            total=self.store.count(),
            latest=latest[0] if latest else None,
        )

    def delete(self, coordinate_id: int) -> DeleteResult:
        """Delete one coordinate; a missing id is a normal outcome."""
        deleted = self.store.delete_by_id(coordinate_id)
        if deleted:
            logger.info("Deleted coordinate #%d", coordinate_id)
        else:
            logger.info("Coordinate #%d not found for deletion", coordinate_id)
        return DeleteResult(coordinate_id=coordinate_id, deleted=deleted)

    def clear_all(self) -> int:
        """Delete every coordinate and return how many were removed."""
        removed = self.store.clear_all()
        logger.warning("Cleared all coordinates (%d removed)", removed)
        return removed

    def export(self) -> ExportResult:
        """Serialize the newest coordinates, one "x, y, z" line each."""
        coordinates = self.store.list_all(self.config.export_cap)
        return serialize_export(
            coordinates,
            total=self.store.count(),
            max_chars=self.config.export_max_chars,
        )

    def count(self) -> int:
        """Total coordinate count, for health probes."""
        return self.store.count()
