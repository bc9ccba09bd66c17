"""
Info operations for kvstore - record metadata and connection status.
"""

from typing import Any

from ..constants import ATTR_ID, ATTR_VALUE
from ..exceptions import KeyNotFoundError
from .client import MongoDBClient
from .codec import classify_value
from .keys import storage_key
from .kv_operations import get_documents_list


def get_key_info(client: MongoDBClient, collection: str, key: Any) -> dict[str, Any]:
    """Get metadata about a specific key.

    Returns the record id, value kind, value size and how many records
    share the key.
    """
    documents = get_documents_list(client, collection, key)
    if not documents:
        raise KeyNotFoundError(f"Key '{key}' not found in collection '{collection}'")

    first = documents[0]
    value = first.get(ATTR_VALUE)
    return {
        "key": storage_key(key),
        "id": str(first.get(ATTR_ID)),
        "kind": classify_value(value).value,
        "value_type": type(value).__name__,
        "value_size": len(str(value)),
        "records": len(documents),
    }


def get_store_status(client: MongoDBClient, collection: str | None = None) -> dict[str, Any]:
    """Ping the server and optionally count a collection's records."""
    status: dict[str, Any] = {
        "database": client.database_name,
        "connected": client.is_connected(),
    }
    if collection and status["connected"]:
        status["collection"] = collection
        status["records"] = client.count(collection)
    return status
