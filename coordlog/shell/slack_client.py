"""Slack Notifier - Imperative Shell.

This module announces newly logged coordinates in a chat channel
through one Slack incoming webhook. The Block Kit layout is built in
core/formatter.py; only the HTTP call lives here.
"""

import logging
from typing import Any

import requests

from coordlog.core.coordinate import Coordinate
from coordlog.core.errors import NotificationError
from coordlog.core.formatter import format_slack_message


logger = logging.getLogger(__name__)


# Default timeout for webhook requests (seconds)
DEFAULT_TIMEOUT = 10

# Shown in the message footer as the sender of the ping
DEFAULT_SOURCE_NAME = "Glazed"


class SlackClient:
    """Posts coordinate notifications to a single Slack webhook.

    Every delivery problem surfaces as NotificationError; deciding
    whether a lost notification matters is up to the caller.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: int = DEFAULT_TIMEOUT,
        source_name: str = DEFAULT_SOURCE_NAME,
    ) -> None:
        """Initialize the notifier.

        Args:
            webhook_url: Slack incoming webhook URL
            timeout: Request timeout in seconds
            source_name: Sender named in the message footer

        Raises:
            ValueError: If webhook_url is empty
        """
        if not webhook_url:
            raise ValueError("A Slack webhook URL is required")
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.source_name = source_name

    def notify_coordinate(self, coordinate: Coordinate) -> None:
        """Announce a stored coordinate in the channel.

        Args:
            coordinate: Coordinate as stored (id assigned)

        Raises:
            NotificationError: If Slack is unreachable or rejects the message
        """
        payload = format_slack_message(coordinate, source_name=self.source_name)
        self._post(payload)
        logger.info("Relayed coordinate #%d to Slack", coordinate.id)

    def _post(self, payload: dict[str, Any]) -> None:
        try:
            response = requests.post(
                self.webhook_url,
                json=payload,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise NotificationError(
                f"Slack webhook timed out after {self.timeout}s"
            ) from e
        except requests.RequestException as e:
            raise NotificationError(f"Slack webhook unreachable: {e}") from e

        if response.status_code != 200:
            raise NotificationError(
                f"Slack returned {response.status_code}: {response.text}"
            )
