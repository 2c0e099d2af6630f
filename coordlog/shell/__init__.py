"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- Coordinate stores (memory, JSON file, Firestore)
- Slack notifier (HTTP)
- Secret Manager client
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from coordlog.shell.coordinate_store import (
    CoordinateStore,
    InMemoryCoordinateStore,
    JsonFileCoordinateStore,
)
from coordlog.shell.firestore_client import FirestoreCoordinateStore, FirestoreConfig
from coordlog.shell.slack_client import SlackClient
from coordlog.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "CoordinateStore",
    "InMemoryCoordinateStore",
    "JsonFileCoordinateStore",
    "FirestoreCoordinateStore",
    "FirestoreConfig",
    "SlackClient",
    "load_config",
    "load_config_from_env",
]
