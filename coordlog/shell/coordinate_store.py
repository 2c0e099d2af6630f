"""Coordinate Store - Imperative Shell.

This module holds the store contract and the in-process persistence
media: a lock-guarded in-memory map and a JSON file dump built on it.
Every operation runs under a single lock so concurrent ingestion and
command paths can never collide on identifier assignment.
"""

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from coordlog.core.coordinate import Coordinate, coordinate_from_dict, coordinate_to_dict
from coordlog.core.errors import StoreError


logger = logging.getLogger(__name__)


# Default result caps for ordered retrieval
DEFAULT_RECENT_LIMIT = 10
DEFAULT_LIST_ALL_LIMIT = 50


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class CoordinateStore(ABC):
    """Durable collection of coordinates with monotonic id assignment.

    Identifiers are assigned by the store, strictly increase over the
    store's lifetime and are never reused, even after deletion or a
    clear-all. Ordered retrieval is newest `created_at` first.
    """

    @abstractmethod
    def insert(
        self,
        x: int,
        y: int,
        z: int,
        raw: str,
        origin_timestamp: datetime | None = None,
    ) -> Coordinate:
        """Store a new coordinate and return it with its assigned id.

        Raises:
            StoreError: If the persistence medium fails
        """

    @abstractmethod
    def get_by_id(self, coordinate_id: int) -> Coordinate | None:
        """Fetch one coordinate, None if no such id."""

    @abstractmethod
    def delete_by_id(self, coordinate_id: int) -> bool:
        """Delete one coordinate. Returns False if no such id."""

    @abstractmethod
    def clear_all(self) -> int:
        """Delete every coordinate and return how many were removed."""

    @abstractmethod
    def count(self) -> int:
        """Number of stored coordinates."""

    @abstractmethod
    def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[Coordinate]:
        """Newest coordinates first, at most `limit`."""

    def list_all(self, limit: int = DEFAULT_LIST_ALL_LIMIT) -> list[Coordinate]:
        """Newest coordinates first with the larger export cap."""
        return self.list_recent(limit)


def sort_newest_first(coordinates: list[Coordinate]) -> list[Coordinate]:
    """Order by created_at descending, newest id first on ties."""
    return sorted(coordinates, key=lambda c: (c.created_at, c.id), reverse=True)


class InMemoryCoordinateStore(CoordinateStore):
    """Coordinate store held in process memory.

    Nothing survives a restart; used in tests and for the "memory"
    backend.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        """Initialize an empty store.

        Args:
            clock: Returns the current time for created_at
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._coordinates: dict[int, Coordinate] = {}
        self._next_id = 1

    def insert(
        self,
        x: int,
        y: int,
        z: int,
        raw: str,
        origin_timestamp: datetime | None = None,
    ) -> Coordinate:
        with self._lock:
            created_at = self._clock()
            coordinate = Coordinate(
                id=self._next_id,
                x=int(x),
                y=int(y),
                z=int(z),
                raw=raw,
                origin_timestamp=origin_timestamp or created_at,
                created_at=created_at,
            )
            self._coordinates[coordinate.id] = coordinate
            self._next_id += 1

            try:
                self._persist()
            except StoreError:
                del self._coordinates[coordinate.id]
                self._next_id -= 1
                raise

            return coordinate

    def get_by_id(self, coordinate_id: int) -> Coordinate | None:
        with self._lock:
            return self._coordinates.get(coordinate_id)

    def delete_by_id(self, coordinate_id: int) -> bool:
        with self._lock:
            removed = self._coordinates.pop(coordinate_id, None)
            if removed is None:
                return False

            try:
                self._persist()
            except StoreError:
                self._coordinates[coordinate_id] = removed
                raise

            return True

    def clear_all(self) -> int:
        with self._lock:
            previous = self._coordinates
            self._coordinates = {}

            try:
                self._persist()
            except StoreError:
                self._coordinates = previous
                raise

            return len(previous)

    def count(self) -> int:
        with self._lock:
            return len(self._coordinates)

    def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[Coordinate]:
        if limit < 1:
            return []
        with self._lock:
            snapshot = list(self._coordinates.values())
        return sort_newest_first(snapshot)[:limit]

    def _persist(self) -> None:
        """Write the current state to durable storage, if any."""


class JsonFileCoordinateStore(InMemoryCoordinateStore):
    """Coordinate store dumped to a JSON file after every mutation.

    File structure:
    {
        "next_id": 4,
        "coordinates": [{"id": 1, "x": ..., "created_at": ...}, ...]
    }

    A bare JSON list of records (the legacy dump format) is also read.
    """

    def __init__(
        self,
        path: str | Path,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize and load existing coordinates from disk.

        Args:
            path: JSON file location (created on first write)
            clock: Returns the current time for created_at

        Raises:
            StoreError: If an existing file cannot be read or parsed
        """
        super().__init__(clock=clock)
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.info("No coordinates file at %s, starting empty", self.path)
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Failed to load coordinates from %s: %s", self.path, e)
            raise StoreError(f"Failed to load coordinates: {e}") from e

        if isinstance(data, list):
            records, stored_next_id = data, None
        elif isinstance(data, dict):
            records, stored_next_id = data.get("coordinates", []), data.get("next_id")
        else:
            raise StoreError(f"Unexpected coordinates file layout in {self.path}")

        try:
            coordinates = [coordinate_from_dict(r) for r in records]
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Malformed coordinate record in {self.path}: {e}") from e

        self._coordinates = {c.id: c for c in coordinates}
        highest = max(self._coordinates, default=0)
        self._next_id = max(int(stored_next_id or 0), highest + 1)

        logger.info(
            "Loaded %d coordinates from %s (next id %d)",
            len(self._coordinates),
            self.path,
            self._next_id,
        )

    def _persist(self) -> None:
        document: dict[str, Any] = {
            "next_id": self._next_id,
            "coordinates": [
                coordinate_to_dict(c)
                for c in sorted(self._coordinates.values(), key=lambda c: c.id)
            ],
        }

        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=directory, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("Failed to save coordinates to %s: %s", self.path, e)
            raise StoreError(f"Failed to save coordinates: {e}") from e
