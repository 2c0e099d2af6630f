"""Ingestion Pipeline - Wires extraction, storage and notification.

This module coordinates the flow of an incoming ping through the pure
extractor, the coordinate store and the best-effort Slack notification.
"""

import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from coordlog.core.coordinate import Coordinate
from coordlog.core.errors import ExtractionError, NotificationError, PayloadError, StoreError
from coordlog.core.extractor import extract_coordinates, parse_webhook_payload
from coordlog.shell.coordinate_store import CoordinateStore
from coordlog.shell.slack_client import SlackClient


logger = logging.getLogger(__name__)


class IngestStatus(Enum):
    """Terminal outcome of ingesting one payload."""
    STORED = "stored"
    REJECTED = "rejected"
    STORAGE_FAILED = "storage_failed"


@dataclass
class IngestResult:
    """Result of ingesting one payload.

    Attributes:
        status: Terminal outcome
        coordinate: Stored coordinate (only when STORED)
        error: Reason for REJECTED or STORAGE_FAILED
    """
    status: IngestStatus
    coordinate: Coordinate | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        """Returns True if the coordinate was stored."""
        return self.status is IngestStatus.STORED


class IngestionPipeline:
    """Extracts, stores and relays incoming coordinate pings.

    The notification is fire-and-forget: it runs on the executor when one
    is given (inline otherwise) and its failures are only logged.
    """

    def __init__(
        self,
        store: CoordinateStore,
        notifier: SlackClient | None = None,
        notification_executor: Executor | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            store: Coordinate store to insert into
            notifier: Slack notifier; None disables notifications
            notification_executor: Runs notifications in the background
                                   (inline when None)
        """
        self.store = store
        self.notifier = notifier
        self.notification_executor = notification_executor

    def ingest_payload(self, payload: Any) -> IngestResult:
        """Ingest a webhook body holding an "embeds" list.

        Only the first embed is consulted.

        Args:
            payload: Decoded JSON body

        Returns:
            IngestResult
        """
        try:
            ping = parse_webhook_payload(payload)
        except PayloadError as e:
            logger.warning("Rejected payload: %s", e)
            return IngestResult(status=IngestStatus.REJECTED, error=str(e))

        return self.ingest(ping.description, ping.timestamp)

    def ingest(
        self,
        description: str,
        origin_timestamp: datetime | None = None,
    ) -> IngestResult:
        """Extract a coordinate from text and store it.

        Args:
            description: Raw text holding the coordinates
            origin_timestamp: Time reported by the source, if any

        Returns:
            IngestResult; the store is untouched unless STORED
        """
        try:
            x, y, z = extract_coordinates(description)
        except ExtractionError:
            logger.warning("Could not parse coordinates from: %.200r", description)
            return IngestResult(
                status=IngestStatus.REJECTED,
                error="Could not parse coordinates",
            )

        try:
            coordinate = self.store.insert(x, y, z, description, origin_timestamp)
        except StoreError as e:
            logger.error("Failed to store coordinate %d, %d, %d: %s", x, y, z, e)
            return IngestResult(
                status=IngestStatus.STORAGE_FAILED,
                error=str(e),
            )

        logger.info(
            "Saved coord #%d: %d, %d, %d",
            coordinate.id, coordinate.x, coordinate.y, coordinate.z,
        )

        self._dispatch_notification(coordinate)

        return IngestResult(status=IngestStatus.STORED, coordinate=coordinate)

    def _dispatch_notification(self, coordinate: Coordinate) -> None:
        """Hand the coordinate to the notifier without waiting."""
        if self.notifier is None:
            logger.debug("No Slack webhook configured, skipping notification")
            return

        if self.notification_executor is None:
            self._notify_safely(coordinate)
            return

        try:
            self.notification_executor.submit(self._notify_safely, coordinate)
        except RuntimeError as e:
            logger.error("Could not schedule notification for #%d: %s", coordinate.id, e)

    def _notify_safely(self, coordinate: Coordinate) -> None:
        """Send the notification, logging instead of raising."""
        try:
            self.notifier.notify_coordinate(coordinate)
        except NotificationError as e:
            logger.error("Failed to notify coordinate #%d: %s", coordinate.id, e)
        except Exception:
            logger.exception("Unexpected error notifying coordinate #%d", coordinate.id)
