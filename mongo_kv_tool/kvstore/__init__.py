"""
MongoDB-backed key-value store.

Typical use::

    from mongo_kv_tool.kvstore import MongoDBClient, get_int, set_value

    with MongoDBClient("mongodb://localhost:27017", "game") as client:
        set_value(client, "moneys", "p1", 5000)
        get_int(client, "moneys", "p1")
"""

from .core.client import MongoDBClient
from .core.codec import decode_value, document_to_json, encode_value, json_to_document
from .core.kv_operations import (
    exists_matching,
    exists_value,
    get_all,
    get_document,
    get_documents,
    get_documents_list,
    list_keys,
    remove_value,
    rename_key,
    set_document,
    set_if_not_exists,
    set_many,
    set_value,
    set_value_async,
    update_value,
)
from .core.typed_operations import (
    get_bool,
    get_float,
    get_int,
    get_list,
    get_object,
    get_object_json,
    get_objects,
    get_string,
    get_value,
)
from .exceptions import (
    KeyNotFoundError,
    KVStoreError,
    StoreConnectionError,
    StoreOperationError,
    ValueTypeError,
)
from .models import CaseInsensitiveKey, StoredObject, StoredRecord, ValueKind

__all__ = [
    "CaseInsensitiveKey",
    "KVStoreError",
    "KeyNotFoundError",
    "MongoDBClient",
    "StoreConnectionError",
    "StoreOperationError",
    "StoredObject",
    "StoredRecord",
    "ValueKind",
    "ValueTypeError",
    "decode_value",
    "document_to_json",
    "encode_value",
    "exists_matching",
    "exists_value",
    "get_all",
    "get_bool",
    "get_document",
    "get_documents",
    "get_documents_list",
    "get_float",
    "get_int",
    "get_list",
    "get_object",
    "get_object_json",
    "get_objects",
    "get_string",
    "get_value",
    "json_to_document",
    "list_keys",
    "remove_value",
    "rename_key",
    "set_document",
    "set_if_not_exists",
    "set_many",
    "set_value",
    "set_value_async",
    "update_value",
]
