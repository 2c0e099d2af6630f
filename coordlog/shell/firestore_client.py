"""Firestore Client - Imperative Shell.

This module persists coordinates to Google Cloud Firestore. Identifiers
come from a counter document that is read and bumped in the same
transaction that writes the new coordinate, so concurrent inserts from
several instances never collide and ids survive restarts.

All I/O is contained here; record conversion is in the core module.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from google.cloud import firestore

from coordlog.core.coordinate import Coordinate, coordinate_from_dict
from coordlog.core.errors import StoreError
from coordlog.shell.coordinate_store import (
    DEFAULT_RECENT_LIMIT,
    CoordinateStore,
    utc_now,
)


logger = logging.getLogger(__name__)


# Default collection name for storing coordinates
DEFAULT_COLLECTION = "coordinates"

# Document (in "<collection>_meta") holding the next id
COUNTER_DOCUMENT = "counter"

# Firestore caps a write batch at 500 operations
MAX_BATCH_SIZE = 500

# Firestore integer fields are signed 64-bit
INT64_MIN = -2**63
INT64_MAX = 2**63 - 1


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
        collection: Firestore collection name for coordinates
    """
    project_id: str | None = None
    database: str | None = None
    collection: str = DEFAULT_COLLECTION


class FirestoreCoordinateStore(CoordinateStore):
    """Coordinate store backed by Firestore.

    This is part of the imperative shell - it handles database I/O.

    Document structure (one per coordinate, id = str(coordinate id)):
    {
        "id": 12, "x": -187677, "y": -47, "z": 159415,
        "raw": "Coords: X: -187677, Y: -47, Z: 159415",
        "origin_timestamp": <timestamp>,
        "created_at": <timestamp>
    }

    Counter document (<collection>_meta/counter):
    {
        "next_id": 13
    }

    Firestore integers are signed 64-bit, so axes outside
    [-2**63, 2**63 - 1] cannot be stored here and insert() raises
    StoreError for them. The memory and JSON stores have no such limit.
    """

    def __init__(
        self,
        config: FirestoreConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize Firestore store.

        Args:
            config: Firestore configuration
            clock: Returns the current time for created_at
        """
        self.config = config or FirestoreConfig()
        self._clock = clock
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs = {}
            if self.config.project_id:
                kwargs['project'] = self.config.project_id
            if self.config.database:
                kwargs['database'] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _collection(self) -> Any:
        """Get reference to the coordinates collection."""
        return self.client.collection(self.config.collection)

    def _counter_ref(self) -> Any:
        """Get reference to the id counter document."""
        return (
            self.client
            .collection(f"{self.config.collection}_meta")
            .document(COUNTER_DOCUMENT)
        )

    def insert(
        self,
        x: int,
        y: int,
        z: int,
        raw: str,
        origin_timestamp: datetime | None = None,
    ) -> Coordinate:
        """Store a coordinate under the next counter value.

        This method performs database I/O inside one transaction.

        Raises:
            StoreError: If an axis does not fit Firestore's int64 or the write fails
        """
        for axis, value in (("x", x), ("y", y), ("z", z)):
            if not INT64_MIN <= value <= INT64_MAX:
                raise StoreError(
                    f"{axis}={value} is outside the 64-bit range Firestore can store"
                )

        created_at = self._clock()
        counter_ref = self._counter_ref()
        collection = self._collection()

        def write(transaction: Any) -> int:
            snapshot = counter_ref.get(transaction=transaction)
            next_id = 1
            if snapshot.exists:
                next_id = int(snapshot.to_dict().get("next_id", 1))

            transaction.set(counter_ref, {"next_id": next_id + 1})
            transaction.set(collection.document(str(next_id)), {
                "id": next_id,
                "x": int(x),
                "y": int(y),
                "z": int(z),
                "raw": raw,
                "origin_timestamp": origin_timestamp or created_at,
                "created_at": created_at,
            })
            return next_id

        try:
            coordinate_id = firestore.transactional(write)(self.client.transaction())
        except Exception as e:
            logger.error("Failed to insert coordinate: %s", str(e))
            raise StoreError(f"Failed to insert coordinate: {e}") from e

        logger.info("Stored coordinate #%d in Firestore", coordinate_id)

        return Coordinate(
            id=coordinate_id,
            x=int(x),
            y=int(y),
            z=int(z),
            raw=raw,
            origin_timestamp=origin_timestamp or created_at,
            created_at=created_at,
        )

    def get_by_id(self, coordinate_id: int) -> Coordinate | None:
        """Fetch one coordinate document.

        This method performs database I/O.
        """
        try:
            doc = self._collection().document(str(coordinate_id)).get()
        except Exception as e:
            logger.error("Failed to fetch coordinate #%d: %s", coordinate_id, str(e))
            raise StoreError(f"Failed to fetch coordinate: {e}") from e

        if not doc.exists:
            return None
        return coordinate_from_dict(doc.to_dict())

    def delete_by_id(self, coordinate_id: int) -> bool:
        """Delete one coordinate document if it exists.

        This method performs database I/O inside one transaction.
        """
        doc_ref = self._collection().document(str(coordinate_id))

        def remove(transaction: Any) -> bool:
            snapshot = doc_ref.get(transaction=transaction)
            if not snapshot.exists:
                return False
            transaction.delete(doc_ref)
            return True

        try:
            deleted = firestore.transactional(remove)(self.client.transaction())
        except Exception as e:
            logger.error("Failed to delete coordinate #%d: %s", coordinate_id, str(e))
            raise StoreError(f"Failed to delete coordinate: {e}") from e

        if deleted:
            logger.info("Deleted coordinate #%d from Firestore", coordinate_id)
        return deleted

    def clear_all(self) -> int:
        """Delete every coordinate document in batches.

        The counter document is left untouched so ids keep increasing.
        This method performs database I/O.
        """
        removed = 0

        try:
            batch = self.client.batch()
            pending = 0
            for doc in self._collection().stream():
                batch.delete(doc.reference)
                pending += 1
                if pending == MAX_BATCH_SIZE:
                    batch.commit()
                    removed += pending
                    batch = self.client.batch()
                    pending = 0
            if pending:
                batch.commit()
                removed += pending
        except Exception as e:
            logger.error("Failed to clear coordinates after %d deletions: %s", removed, str(e))
            raise StoreError(f"Failed to clear coordinates: {e}") from e

        logger.info("Cleared %d coordinates from Firestore", removed)
        return removed

    def count(self) -> int:
        """Count coordinate documents with an aggregation query.

        This method performs database I/O.
        """
        try:
            results = self._collection().count().get()
            return int(results[0][0].value)
        except Exception as e:
            logger.error("Failed to count coordinates: %s", str(e))
            raise StoreError(f"Failed to count coordinates: {e}") from e

    def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[Coordinate]:
        """Fetch the newest coordinates.

        This method performs database I/O.
        """
        if limit < 1:
            return []

        try:
            docs = (
                self._collection()
                .order_by("created_at", direction=firestore.Query.DESCENDING)
                .limit(limit)
                .stream()
            )
            return [coordinate_from_dict(doc.to_dict()) for doc in docs]
        except Exception as e:
            logger.error("Failed to list coordinates: %s", str(e))
            raise StoreError(f"Failed to list coordinates: {e}") from e
