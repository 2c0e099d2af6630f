"""Service wiring - Builds the engine stack from configuration."""

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass

from coordlog.commands import CommandHandler
from coordlog.core.config import Config, validate_config
from coordlog.pipeline import IngestionPipeline
from coordlog.query_engine import QueryEngine
from coordlog.shell.coordinate_store import (
    CoordinateStore,
    InMemoryCoordinateStore,
    JsonFileCoordinateStore,
)
from coordlog.shell.firestore_client import FirestoreConfig, FirestoreCoordinateStore
from coordlog.shell.slack_client import SlackClient


logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the entry points need, sharing one store.

    Attributes:
        config: Application configuration
        store: Coordinate store
        engine: Query engine over the store
        pipeline: Ingestion pipeline over the store
        commands: Command handler over the engine
    """
    config: Config
    store: CoordinateStore
    engine: QueryEngine
    pipeline: IngestionPipeline
    commands: CommandHandler


def build_store(config: Config) -> CoordinateStore:
    """Create the coordinate store selected by config.store_backend.

    Raises:
        ValueError: If the backend is unknown
    """
    if config.store_backend == "memory":
        return InMemoryCoordinateStore()
    if config.store_backend == "json":
        return JsonFileCoordinateStore(config.coordinates_file)
    if config.store_backend == "firestore":
        return FirestoreCoordinateStore(
            FirestoreConfig(
                database=config.firestore_database,
                collection=config.firestore_collection,
            )
        )
    raise ValueError(f"Unknown store backend: {config.store_backend}")


def build_services(
    config: Config,
    store: CoordinateStore | None = None,
    notifier: SlackClient | None = None,
    notification_executor: Executor | None = None,
) -> Services:
    """Wire store, engine, pipeline and command handler.

    Args:
        config: Application configuration
        store: Coordinate store (built from config if not provided)
        notifier: Slack notifier (built from slack_webhook_url if not provided)
        notification_executor: Background executor for notifications
                               (a small thread pool if not provided;
                               ignored when config.notify_inline is set)

    Returns:
        Services sharing one store
    """
    validation = validate_config(config)
    for warning in validation.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)
    for error in validation.critical_errors:
        logger.error("Config %s: %s", error.field, error.message)

    store = store or build_store(config)
    engine = QueryEngine(store, config)

    if notifier is None and config.slack_webhook_url:
        notifier = SlackClient(
            config.slack_webhook_url,
            timeout=config.notification_timeout,
        )

    if config.notify_inline:
        notification_executor = None
    elif notification_executor is None and notifier is not None:
        notification_executor = ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="notify"
        )

    pipeline = IngestionPipeline(
        store,
        notifier=notifier,
        notification_executor=notification_executor,
    )

    return Services(
        config=config,
        store=store,
        engine=engine,
        pipeline=pipeline,
        commands=CommandHandler(engine, config),
    )
