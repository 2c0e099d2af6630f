"""Tests for service wiring."""

import os
import pytest
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

from coordlog import main as function_main
from coordlog.core.config import Config
from coordlog.services import build_services, build_store
from coordlog.shell.coordinate_store import InMemoryCoordinateStore, JsonFileCoordinateStore
from coordlog.shell.firestore_client import FirestoreCoordinateStore
from coordlog.shell.slack_client import SlackClient


WEBHOOK_URL = "https://hooks.slack.com/services/T00/B00/XXX"


class TestBuildStore:
    """Tests for build_store()."""

    def test_memory(self):
        """memory backend gives an in-memory store."""
        assert isinstance(build_store(Config(store_backend="memory")), InMemoryCoordinateStore)

    def test_json(self, tmp_path):
        """json backend uses the configured file."""
        store = build_store(Config(store_backend="json", coordinates_file=str(tmp_path / "c.json")))
        assert isinstance(store, JsonFileCoordinateStore)

    def test_firestore(self):
        """firestore backend is built lazily without touching the network."""
        store = build_store(Config(store_backend="firestore", firestore_collection="pings"))
        assert isinstance(store, FirestoreCoordinateStore)
        assert store.config.collection == "pings"

    def test_unknown_backend(self):
        """Unknown backends are refused."""
        with pytest.raises(ValueError):
            build_store(Config(store_backend="redis"))


class TestBuildServices:
    """Tests for build_services()."""

    def test_no_webhook_means_no_notifier(self):
        """Without a webhook URL nothing is relayed."""
        services = build_services(Config(store_backend="memory"))

        assert services.pipeline.notifier is None
        assert services.pipeline.notification_executor is None

    def test_webhook_builds_notifier_and_pool(self):
        """A webhook URL yields a Slack notifier on a background pool."""
        config = Config(store_backend="memory", slack_webhook_url=WEBHOOK_URL, notification_timeout=4)

        services = build_services(config)

        notifier = services.pipeline.notifier
        assert isinstance(notifier, SlackClient)
        assert notifier.webhook_url == WEBHOOK_URL
        assert notifier.timeout == 4
        assert isinstance(services.pipeline.notification_executor, ThreadPoolExecutor)
        services.pipeline.notification_executor.shutdown()

    def test_inline_notifications(self):
        """notify_inline sends on the request thread, ignoring any executor."""
        config = Config(store_backend="memory", slack_webhook_url=WEBHOOK_URL, notify_inline=True)

        services = build_services(config, notification_executor=ThreadPoolExecutor(1))

        assert isinstance(services.pipeline.notifier, SlackClient)
        assert services.pipeline.notification_executor is None

    def test_shared_store(self):
        """Engine and pipeline share one store."""
        store = InMemoryCoordinateStore()
        services = build_services(Config(store_backend="memory"), store=store)

        assert services.engine.store is store
        assert services.pipeline.store is store


class TestCloudFunctionWiring:
    """Tests for the Cloud Function's service setup."""

    def test_notify_inline_from_environment(self):
        """NOTIFY_INLINE=true makes the function notify before responding."""
        env = {
            "STORE_BACKEND": "memory",
            "SLACK_WEBHOOK_URL": WEBHOOK_URL,
            "NOTIFY_INLINE": "true",
        }

        with patch.dict(os.environ, env, clear=True), \
                patch.object(function_main, "_services", None):
            services = function_main._get_services()

        assert isinstance(services.pipeline.notifier, SlackClient)
        assert services.pipeline.notification_executor is None

    def test_background_by_default(self):
        """Without NOTIFY_INLINE notifications go to the background pool."""
        env = {"STORE_BACKEND": "memory", "SLACK_WEBHOOK_URL": WEBHOOK_URL}

        with patch.dict(os.environ, env, clear=True), \
                patch.object(function_main, "_services", None):
            services = function_main._get_services()

        assert isinstance(services.pipeline.notification_executor, ThreadPoolExecutor)
        services.pipeline.notification_executor.shutdown()
