from unittest.mock import MagicMock, patch

import pytest
from bson.errors import InvalidDocument
from pymongo.errors import AutoReconnect, OperationFailure, ServerSelectionTimeoutError

from mongo_kv_tool.kvstore.core.client import MongoDBClient
from mongo_kv_tool.kvstore.exceptions import (
    KVStoreError,
    StoreConnectionError,
    StoreOperationError,
    ValueTypeError,
)

URI = "mongodb://localhost:27017"


@pytest.fixture
def driver():
    return MagicMock()


@pytest.fixture
def wrapped(driver):
    return MongoDBClient(URI, "kv-test", client=driver)


class TestLiveness:
    def test_connected_when_ping_answers(self, wrapped, driver):
        driver["kv-test"].command.return_value = {"ok": 1.0}

        assert wrapped.is_connected() is True
        driver["kv-test"].command.assert_called_with("ping")

    def test_not_connected_when_server_unreachable(self, wrapped, driver):
        driver["kv-test"].command.side_effect = ServerSelectionTimeoutError("no servers")

        assert wrapped.is_connected() is False

    def test_ping_raises_connection_error(self, wrapped, driver):
        driver["kv-test"].command.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(StoreConnectionError):
            wrapped.ping()


class TestErrorMapping:
    def test_operation_failure(self, wrapped, driver):
        driver["kv-test"]["records"].find_one.side_effect = OperationFailure("unauthorized")

        with pytest.raises(StoreOperationError):
            wrapped.find_one("records", {"key": "a"})

    def test_reconnect_while_iterating(self, wrapped, driver):
        driver["kv-test"]["records"].find.side_effect = AutoReconnect("connection reset")

        with pytest.raises(StoreConnectionError):
            list(wrapped.find("records", {"key": "a"}))

    def test_unencodable_value(self, wrapped, driver):
        driver["kv-test"]["records"].insert_one.side_effect = InvalidDocument("cannot encode object")

        with pytest.raises(ValueTypeError):
            wrapped.insert_one("records", {"key": "a", "value": object()})

    def test_store_errors_share_a_base(self, wrapped, driver):
        driver["kv-test"]["records"].delete_one.side_effect = OperationFailure("denied")

        with pytest.raises(KVStoreError):
            wrapped.delete_one("records", {"key": "a"})


class TestLifecycle:
    def test_get_database_shares_the_connection(self, wrapped, driver):
        other = wrapped.get_database("archive")

        assert other.client is driver
        assert other.database_name == "archive"
        assert other.uri == URI

    def test_shared_client_is_not_closed(self, driver):
        with MongoDBClient(URI, "kv-test", client=driver):
            pass

        driver.close.assert_not_called()

    def test_owned_client_is_closed(self):
        with patch("mongo_kv_tool.kvstore.core.client.MongoClient") as factory:
            with MongoDBClient(URI, "kv-test", serverSelectionTimeoutMS=500) as wrapped:
                assert wrapped.client is factory.return_value

        factory.assert_called_once_with(URI, serverSelectionTimeoutMS=500)
        factory.return_value.close.assert_called_once()

    def test_watch_collection_delegates(self, wrapped, driver):
        pipeline = [{"$match": {"operationType": "insert"}}]

        stream = wrapped.watch_collection("records", pipeline)

        assert stream is driver["kv-test"]["records"].watch.return_value
        driver["kv-test"]["records"].watch.assert_called_once_with(pipeline)

    def test_count(self, wrapped, driver):
        driver["kv-test"]["records"].count_documents.return_value = 3

        assert wrapped.count("records") == 3
