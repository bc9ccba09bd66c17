import mongomock
import pytest

from mongo_kv_tool.kvstore.core.client import MongoDBClient


@pytest.fixture
def mongo() -> mongomock.MongoClient:
    return mongomock.MongoClient()


@pytest.fixture
def client(mongo: mongomock.MongoClient) -> MongoDBClient:
    """Client wrapper over an in-memory MongoDB."""
    return MongoDBClient("mongodb://localhost:27017", "kv-test", client=mongo)


@pytest.fixture
def records(client: MongoDBClient):
    """Raw driver collection used by most tests."""
    return client.collection("records")
