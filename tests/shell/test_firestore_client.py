"""Tests for the Firestore coordinate store.

Uses unittest.mock in place of the Firestore client; transactions are
run inline.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import Mock, MagicMock, patch

from coordlog.core.errors import StoreError
from coordlog.shell.firestore_client import (
    FirestoreConfig,
    FirestoreCoordinateStore,
)


NOW = datetime(2024, 1, 1, 12, tzinfo=timezone.utc)


def make_snapshot(data=None):
    """Create a document snapshot mock."""
    snapshot = Mock()
    snapshot.exists = data is not None
    snapshot.to_dict.return_value = data
    return snapshot


@pytest.fixture
def mock_firestore():
    """Patch the firestore module, running transactional functions inline."""
    with patch("coordlog.shell.firestore_client.firestore") as module:
        module.transactional.side_effect = lambda fn: fn
        yield module


@pytest.fixture
def store(mock_firestore):
    """Create a store wired to a mock client."""
    store = FirestoreCoordinateStore(
        FirestoreConfig(collection="coordinates"),
        clock=lambda: NOW,
    )
    store._client = MagicMock()
    return store


class TestFirestoreClientInit:
    """Tests for lazy client creation."""

    def test_passes_project_and_database(self, mock_firestore):
        """Project and database are forwarded to the client."""
        store = FirestoreCoordinateStore(FirestoreConfig(project_id="p", database="db"))
        _ = store.client
        mock_firestore.Client.assert_called_once_with(project="p", database="db")

    def test_default_client(self, mock_firestore):
        """No kwargs for the default project and database."""
        _ = FirestoreCoordinateStore().client
        mock_firestore.Client.assert_called_once_with()


class TestFirestoreInsert:
    """Tests for FirestoreCoordinateStore.insert()."""

    def test_uses_and_bumps_counter(self, store):
        """The counter value becomes the id and is incremented."""
        counter_ref = store._counter_ref()
        counter_ref.get.return_value = make_snapshot({"next_id": 7})
        transaction = store.client.transaction.return_value

        coordinate = store.insert(1, 2, 3, "X: 1 Y: 2 Z: 3")

        assert coordinate.id == 7
        assert coordinate.triple == (1, 2, 3)
        assert coordinate.created_at == NOW
        transaction.set.assert_any_call(counter_ref, {"next_id": 8})
        store.client.collection.return_value.document.assert_any_call("7")

    def test_first_insert_starts_at_one(self, store):
        """A missing counter document starts ids at 1."""
        store._counter_ref().get.return_value = make_snapshot(None)
        assert store.insert(1, 2, 3, "").id == 1

    def test_failure_raises_store_error(self, store):
        """Client errors surface as StoreError."""
        store._counter_ref().get.side_effect = RuntimeError("unavailable")
        with pytest.raises(StoreError):
            store.insert(1, 2, 3, "")

    @pytest.mark.parametrize("x", [2**63, -2**63 - 1])
    def test_out_of_int64_range_raises_store_error(self, store, x):
        """Axes Firestore cannot hold fail before any write."""
        with pytest.raises(StoreError, match="64-bit"):
            store.insert(x, 0, 0, "")
        store.client.transaction.assert_not_called()

    def test_int64_bounds_accepted(self, store):
        """The extremes of the int64 range are stored."""
        store._counter_ref().get.return_value = make_snapshot({"next_id": 1})
        coordinate = store.insert(2**63 - 1, -2**63, 0, "")
        assert coordinate.triple == (2**63 - 1, -2**63, 0)


class TestFirestoreReads:
    """Tests for get_by_id(), count() and list_recent()."""

    def test_get_by_id_found(self, store):
        """Existing documents are converted to coordinates."""
        doc_ref = store.client.collection.return_value.document.return_value
        doc_ref.get.return_value = make_snapshot({
            "id": 5, "x": 1, "y": 2, "z": 3, "raw": "r",
            "origin_timestamp": NOW, "created_at": NOW,
        })

        coordinate = store.get_by_id(5)

        assert coordinate.id == 5
        assert coordinate.created_at == NOW

    def test_get_by_id_missing(self, store):
        """Missing documents return None."""
        doc_ref = store.client.collection.return_value.document.return_value
        doc_ref.get.return_value = make_snapshot(None)
        assert store.get_by_id(5) is None

    def test_count_uses_aggregation(self, store):
        """Count reads the aggregation result."""
        aggregate = Mock()
        aggregate.value = 12
        store.client.collection.return_value.count.return_value.get.return_value = [[aggregate]]
        assert store.count() == 12

    def test_list_recent_orders_by_created_at(self, store, mock_firestore):
        """Listing queries newest first with a limit."""
        doc = Mock()
        doc.to_dict.return_value = {
            "id": 1, "x": 1, "y": 2, "z": 3, "raw": "",
            "origin_timestamp": NOW, "created_at": NOW,
        }
        collection = store.client.collection.return_value
        query = collection.order_by.return_value
        query.limit.return_value.stream.return_value = [doc]

        result = store.list_recent(5)

        collection.order_by.assert_called_once_with(
            "created_at", direction=mock_firestore.Query.DESCENDING,
        )
        query.limit.assert_called_once_with(5)
        assert [c.id for c in result] == [1]

    def test_read_failure_raises_store_error(self, store):
        """Client errors on read surface as StoreError."""
        store.client.collection.return_value.count.side_effect = RuntimeError("boom")
        with pytest.raises(StoreError):
            store.count()


class TestFirestoreDeleteAndClear:
    """Tests for delete_by_id() and clear_all()."""

    def test_delete_existing(self, store):
        """Existing documents are deleted in the transaction."""
        doc_ref = store.client.collection.return_value.document.return_value
        doc_ref.get.return_value = make_snapshot({"id": 3})
        transaction = store.client.transaction.return_value

        assert store.delete_by_id(3) is True
        transaction.delete.assert_called_once_with(doc_ref)

    def test_delete_missing(self, store):
        """Missing documents are a negative result."""
        doc_ref = store.client.collection.return_value.document.return_value
        doc_ref.get.return_value = make_snapshot(None)
        transaction = store.client.transaction.return_value

        assert store.delete_by_id(3) is False
        transaction.delete.assert_not_called()

    def test_clear_all_batches_and_keeps_counter(self, store):
        """Documents are deleted in batches of 500; the counter is untouched."""
        docs = [Mock() for _ in range(501)]
        store.client.collection.return_value.stream.return_value = docs
        batch = store.client.batch.return_value

        assert store.clear_all() == 501
        assert batch.delete.call_count == 501
        assert batch.commit.call_count == 2
        store._counter_ref().set.assert_not_called()

    def test_clear_all_empty(self, store):
        """Nothing to clear commits nothing."""
        store.client.collection.return_value.stream.return_value = []
        assert store.clear_all() == 0
        store.client.batch.return_value.commit.assert_not_called()
