"""
Key-value operations for kvstore.

Every record is a {key, value} document. A collection holds at most one
record per key as long as writes go through set_value/set_document; nothing
in MongoDB enforces it (there is no unique index).

Concurrency notes:
    set_value         replaces atomically; two concurrent first writes of the
                      same key can both insert.
    set_if_not_exists check-then-set, not atomic.
    rename_key        fetch, delete, insert; not atomic.
"""

import asyncio
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from ..constants import ATTR_ID, ATTR_KEY, ATTR_VALUE
from ..models import StoredRecord
from .client import MongoDBClient
from .codec import encode_value, record_to_document
from .keys import KeyDescriptor, storage_key


def exists_value(
    client: MongoDBClient, collection: str, key: Any, key_field: str = ATTR_KEY
) -> bool:
    """
    Check if a key exists.

    Args:
        client: MongoDB client
        collection: Collection name
        key: Exact key or CaseInsensitiveKey
        key_field: Field the key is matched against

    Returns:
        True if a matching record exists, False otherwise
    """
    return get_document(client, collection, key, key_field) is not None


def exists_matching(
    client: MongoDBClient, collection: str, query: Mapping[str, Any] | None
) -> bool:
    """
    Check if any record matches an arbitrary query.

    Args:
        client: MongoDB client
        collection: Collection name
        query: Filter document (None matches any record)

    Returns:
        True if at least one record matches, False otherwise
    """
    return client.find_one(collection, dict(query) if query else {}) is not None


def get_document(
    client: MongoDBClient, collection: str, key: Any, key_field: str = ATTR_KEY
) -> dict[str, Any] | None:
    """
    Get the record stored under a key.

    If several records share the key only one is returned, and which one is
    not defined.

    Returns:
        Document if found, None otherwise
    """
    return client.find_one(collection, KeyDescriptor(key, key_field).to_filter())


def get_documents(
    client: MongoDBClient, collection: str, key: Any, key_field: str = ATTR_KEY
) -> Iterator[dict[str, Any]]:
    """Lazily iterate over every record matching a key."""
    return client.find(collection, KeyDescriptor(key, key_field).to_filter())


def get_documents_list(
    client: MongoDBClient, collection: str, key: Any, key_field: str = ATTR_KEY
) -> list[dict[str, Any]]:
    """Every record matching a key, as a list."""
    return list(get_documents(client, collection, key, key_field))


def set_document(
    client: MongoDBClient, collection: str, key: Any, document: Mapping[str, Any]
) -> dict[str, Any]:
    """
    Store a whole document under a key, replacing any existing record.

    An existing record is replaced in place and keeps its _id and the stored
    spelling of its key, so a CaseInsensitiveKey write never renames it.
    Fields of the old record that are missing from document are dropped.

    Args:
        client: MongoDB client
        collection: Collection name
        key: Exact key or CaseInsensitiveKey used to find the existing record
        document: Document to store (an _id in it is ignored)

    Returns:
        Result with the stored key, value and whether an existing record was replaced
    """
    replacement = {k: v for k, v in document.items() if k != ATTR_ID}

    previous = client.find_one(collection, KeyDescriptor(key).to_filter())
    if previous is not None:
        replacement[ATTR_KEY] = previous.get(ATTR_KEY, replacement.get(ATTR_KEY))
        previous = client.find_one_and_replace(
            collection, {ATTR_ID: previous[ATTR_ID]}, replacement
        )
    if previous is None:
        client.insert_one(collection, replacement)

    return {
        "key": replacement.get(ATTR_KEY, storage_key(key)),
        "value": replacement.get(ATTR_VALUE),
        "replaced": previous is not None,
    }


def set_value(client: MongoDBClient, collection: str, key: Any, value: Any) -> dict[str, Any]:
    """
    Set a key-value pair.

    Args:
        client: MongoDB client
        collection: Collection name
        key: Exact key or CaseInsensitiveKey
        value: Scalar, collection or StoredObject

    Returns:
        Result with key, stored value and whether a record was replaced
    """
    document = record_to_document(StoredRecord(key, value))
    return set_document(client, collection, key, document)


async def set_value_async(
    client: MongoDBClient, collection: str, key: Any, value: Any
) -> dict[str, Any]:
    """
    Set a key-value pair without blocking the event loop.

    Await it for completion, or wrap it in asyncio.create_task to fire and
    forget.
    """
    return await asyncio.to_thread(set_value, client, collection, key, value)


def set_many(
    client: MongoDBClient,
    collection: str,
    records: Iterable[StoredRecord | Mapping[str, Any]],
) -> dict[str, Any]:
    """
    Insert records in bulk.

    No existence check is made; the caller must make sure keys do not collide
    with each other or with stored records.

    Args:
        client: MongoDB client
        collection: Collection name
        records: StoredRecord instances or ready-made documents, in order

    Returns:
        Number of inserted records and their _ids
    """
    documents = [record_to_document(record) for record in records]
    if not documents:
        return {"inserted": 0, "ids": []}

    ids = client.insert_many(collection, documents)
    return {"inserted": len(ids), "ids": ids}


def set_if_not_exists(client: MongoDBClient, collection: str, key: Any, value: Any) -> bool:
    """
    Set a key-value pair only if the key is absent.

    Not atomic: another writer can store the key between the check and the
    write.

    Returns:
        True if the value was written, False if the key already existed
    """
    if exists_value(client, collection, key):
        return False
    set_value(client, collection, key, value)
    return True


def update_value(client: MongoDBClient, collection: str, key: Any, new_value: Any) -> bool:
    """
    Change the value of an existing record, leaving other fields alone.

    Returns:
        True if a record matched, False if the key does not exist
    """
    update = {"$set": {ATTR_VALUE: encode_value(new_value)}}
    return client.update_one(collection, KeyDescriptor(key).to_filter(), update) > 0


def remove_value(
    client: MongoDBClient, collection: str, key: Any, key_field: str = ATTR_KEY
) -> dict[str, Any] | None:
    """
    Atomically remove the record stored under a key.

    Returns:
        Removed document, None if nothing matched
    """
    return client.find_one_and_delete(collection, KeyDescriptor(key, key_field).to_filter())


def rename_key(
    client: MongoDBClient,
    collection: str,
    old_key: Any,
    new_key: Any,
    key_field: str = ATTR_KEY,
) -> bool:
    """
    Move a record to a new key.

    The record keeps its _id and value. A record already stored under new_key
    is overwritten. Not atomic: the record is fetched, deleted and inserted
    again in three separate operations.

    Returns:
        True if a record was renamed, False if old_key does not exist
    """
    document = get_document(client, collection, old_key, key_field)
    if document is None:
        return False

    client.delete_one(collection, {ATTR_ID: document[ATTR_ID]})
    client.find_one_and_delete(collection, KeyDescriptor(new_key, key_field).to_filter())

    document[key_field] = storage_key(new_key)
    client.insert_one(collection, document)
    return True


def list_keys(client: MongoDBClient, collection: str) -> list[str]:
    """
    List every key in a collection.

    Returns:
        Keys rendered as strings, in natural order
    """
    return [
        str(document[ATTR_KEY])
        for document in client.find(collection, projection={ATTR_KEY: 1})
        if ATTR_KEY in document
    ]


def get_all(
    client: MongoDBClient, collection: str, filters: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """
    Read a collection into a key -> value mapping.

    Args:
        client: MongoDB client
        collection: Collection name
        filters: Optional field -> value equality conditions, all of which must hold

    Returns:
        Mapping of stringified keys to stored values
    """
    query = dict(filters) if filters else None
    return {
        str(document[ATTR_KEY]): document.get(ATTR_VALUE)
        for document in client.find(collection, query)
        if ATTR_KEY in document
    }
