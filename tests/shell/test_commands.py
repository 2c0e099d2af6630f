"""Tests for the command interface."""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

from coordlog.commands import CommandHandler, ERROR_REPLY
from coordlog.core.config import Config
from coordlog.core.errors import InvalidParameterError, StoreError
from coordlog.query_engine import QueryEngine
from coordlog.shell.coordinate_store import InMemoryCoordinateStore


NOW = datetime(2024, 1, 1, 12, tzinfo=timezone.utc)


@pytest.fixture
def store():
    """Create an in-memory store whose records are one minute old."""
    return InMemoryCoordinateStore(clock=lambda: NOW - timedelta(minutes=1))


@pytest.fixture
def handler(store):
    """Create a command handler with a fixed clock."""
    return CommandHandler(QueryEngine(store, Config()), clock=lambda: NOW)


@pytest.fixture
def failing_handler():
    """Create a command handler whose engine always fails."""
    engine = Mock()
    engine.config = Config()
    for name in ("list_recent", "search", "stats", "delete", "clear_all", "export", "count"):
        getattr(engine, name).side_effect = StoreError("down")
    return CommandHandler(engine)


class TestListRecent:
    """Tests for the list-recent command."""

    def test_empty_store(self, handler):
        """Empty store gets the friendly reply."""
        reply = handler.list_recent()
        assert reply.text == "📭 No coordinates logged yet!"
        assert reply.ephemeral is True
        assert reply.data == {"coordinates": []}

    def test_lists_coordinates(self, handler, store):
        """Coordinates are listed with their age."""
        store.insert(1, 2, 3, "")
        reply = handler.list_recent(5)
        assert "#1 `1, 2, 3` - 1m ago" in reply.text
        assert reply.ephemeral is False
        assert reply.data["coordinates"][0]["id"] == 1


class TestSearch:
    """Tests for the search command."""

    def test_display_limit_applied(self, handler, store):
        """Only 15 matches are shown; the total is reported."""
        for i in range(20):
            store.insert(i, 0, 0, "")

        reply = handler.search(0, 0)

        assert reply.text.count("blocks away") == 15
        assert "Found 20 coords within 1000 blocks" in reply.text
        assert reply.data["total"] == 20
        assert len(reply.data["matches"]) == 15
        assert reply.data["matches"][0]["distance"] == 0.0

    def test_no_matches(self, handler):
        """No matches reply names the search."""
        reply = handler.search(5, 6, 10)
        assert reply.text == "📭 No coordinates found within 10 blocks of (5, 6)"

    @pytest.mark.parametrize("radius", [0, -5])
    def test_non_positive_radius_is_error_reply(self, handler, radius):
        """Called directly, a bad radius still yields a reply, not an exception."""
        reply = handler.search(0, 0, radius)

        assert reply.success is False
        assert reply.text.startswith("❌ Radius must be positive")


class TestStatsDeleteExport:
    """Tests for stats, delete and export."""

    def test_stats(self, handler, store):
        """Stats report total and latest."""
        store.insert(1, 2, 3, "")
        reply = handler.stats()
        assert "Total Logged: 1 coordinates" in reply.text
        assert reply.data["latest"]["x"] == 1

    def test_delete_found_and_not_found(self, handler, store):
        """Found and not-found are distinguishable."""
        stored = store.insert(1, 2, 3, "")

        found = handler.delete(stored.id)
        missing = handler.delete(stored.id)

        assert found.data == {"id": stored.id, "deleted": True}
        assert missing.data == {"id": stored.id, "deleted": False}
        assert missing.success is True
        assert found.text != missing.text

    def test_export(self, handler, store):
        """Export reply contains a fenced block newest first."""
        store.insert(1, 2, 3, "")
        store.insert(4, 5, 6, "")
        reply = handler.export()
        assert "```\n4, 5, 6\n1, 2, 3\n```" in reply.text
        assert reply.data["partial"] is False


class TestClearAll:
    """Tests for the two-phase clear-all command."""

    def test_unconfirmed_does_not_clear(self, handler, store):
        """Without confirmation nothing is removed."""
        store.insert(1, 2, 3, "")

        reply = handler.clear_all()

        assert store.count() == 1
        assert reply.data == {"confirmed": False, "removed": 0, "total": 1}
        assert "confirm" in reply.text

    def test_confirmed_clears(self, handler, store):
        """Explicit confirmation clears the store."""
        store.insert(1, 2, 3, "")
        store.insert(4, 5, 6, "")

        reply = handler.clear_all(confirm=True)

        assert store.count() == 0
        assert reply.text == "🗑️ Deleted all 2 coordinates!"
        assert reply.data == {"confirmed": True, "removed": 2}


class TestDispatch:
    """Tests for CommandHandler.dispatch()."""

    def test_known_command_names(self, handler):
        """All six commands are exposed."""
        assert sorted(handler.command_names) == sorted([
            "list-recent", "search", "stats", "delete", "clear-all", "export",
        ])

    def test_unknown_command_raises(self, handler):
        """Unknown commands are a caller error."""
        with pytest.raises(InvalidParameterError):
            handler.dispatch("teleport")

    def test_list_recent_with_count(self, handler, store):
        """String integers are accepted."""
        for i in range(3):
            store.insert(i, i, i, "")
        reply = handler.dispatch("list-recent", {"count": "2"})
        assert len(reply.data["coordinates"]) == 2

    @pytest.mark.parametrize("count", [0, 26, "ten", True, 2.5])
    def test_list_recent_rejects_bad_count(self, handler, count):
        """Out-of-range or non-integer counts are rejected, not clamped."""
        reply = handler.dispatch("list-recent", {"count": count})
        assert reply.success is False
        assert reply.text.startswith("❌")

    def test_search_requires_x_and_z(self, handler):
        """x and z are required."""
        reply = handler.dispatch("search", {"x": 1})
        assert reply.success is False
        assert "'z'" in reply.text

    def test_search_rejects_non_positive_radius(self, handler):
        """radius must be positive."""
        reply = handler.dispatch("search", {"x": 1, "z": 1, "radius": 0})
        assert reply.success is False

    def test_delete_requires_id(self, handler):
        """id is required."""
        assert handler.dispatch("delete", {}).success is False

    def test_clear_all_requires_literal_true(self, handler, store):
        """Only confirm=True clears."""
        store.insert(1, 2, 3, "")
        handler.dispatch("clear-all", {"confirm": "yes"})
        assert store.count() == 1
        handler.dispatch("clear-all", {"confirm": True})
        assert store.count() == 0

    def test_stats_and_export_take_no_params(self, handler):
        """Parameterless commands dispatch."""
        assert handler.dispatch("stats").success is True
        assert handler.dispatch("export").success is True


class TestStoreFailures:
    """Store failures become a generic error reply."""

    @pytest.mark.parametrize("call", [
        lambda h: h.list_recent(),
        lambda h: h.search(0, 0),
        lambda h: h.stats(),
        lambda h: h.delete(1),
        lambda h: h.clear_all(),
        lambda h: h.clear_all(confirm=True),
        lambda h: h.export(),
    ])
    def test_error_reply(self, failing_handler, call):
        """Every command reports a failure instead of raising."""
        reply = call(failing_handler)
        assert reply.success is False
        assert reply.text == ERROR_REPLY
