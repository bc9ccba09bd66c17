"""
Typed read helpers for kvstore.

get_int/get_float/get_string/get_bool never raise for a missing key or a
value of the wrong type; they return the default instead. get_value and
get_object raise KeyNotFoundError when there is nothing to return.
"""

from typing import Any, TypeVar

from ..constants import ATTR_KEY, ATTR_VALUE
from ..exceptions import KeyNotFoundError, ValueTypeError
from ..models import StoredObject
from .client import MongoDBClient
from .codec import decode_list, decode_value, document_to_json
from .kv_operations import get_document, get_documents

T = TypeVar("T")
M = TypeVar("M", bound=StoredObject)

_MISSING = object()


def _not_found(collection: str, key: Any) -> KeyNotFoundError:
    return KeyNotFoundError(f"Key '{key}' not found in collection '{collection}'")


def get_value(
    client: MongoDBClient,
    collection: str,
    key: Any,
    target: Any = None,
    default: Any = _MISSING,
    *,
    key_field: str = ATTR_KEY,
    value_field: str = ATTR_VALUE,
) -> Any:
    """
    Get a value by key, decoded into target.

    Args:
        client: MongoDB client
        collection: Collection name
        key: Exact key or CaseInsensitiveKey
        target: Requested type (None returns the stored value as is)
        default: Returned when the key is missing or the value does not decode
            (None is a valid default)
        key_field: Field the key is matched against
        value_field: Field holding the value

    Returns:
        Decoded value, or default

    Raises:
        KeyNotFoundError: If key not found and no default
        ValueTypeError: If the value does not decode and no default
    """
    document = get_document(client, collection, key, key_field)
    if document is None:
        if default is not _MISSING:
            return default
        raise _not_found(collection, key)

    try:
        return decode_value(document.get(value_field), target)
    except ValueTypeError:
        if default is not _MISSING:
            return default
        raise


def _get_typed(
    client: MongoDBClient,
    collection: str,
    key: Any,
    target: type[T],
    default: T,
    key_field: str,
    value_field: str,
) -> T:
    document = get_document(client, collection, key, key_field)
    if document is None:
        return default
    try:
        return decode_value(document.get(value_field), target)
    except ValueTypeError:
        return default


def get_int(
    client: MongoDBClient,
    collection: str,
    key: Any,
    default: int = 0,
    *,
    key_field: str = ATTR_KEY,
    value_field: str = ATTR_VALUE,
) -> int:
    """Get an integer; floats and booleans are not accepted."""
    return _get_typed(client, collection, key, int, default, key_field, value_field)


def get_float(
    client: MongoDBClient,
    collection: str,
    key: Any,
    default: float = 0.0,
    *,
    key_field: str = ATTR_KEY,
    value_field: str = ATTR_VALUE,
) -> float:
    """Get a float; stored integers are widened."""
    return _get_typed(client, collection, key, float, default, key_field, value_field)


def get_string(
    client: MongoDBClient,
    collection: str,
    key: Any,
    default: str = "",
    *,
    key_field: str = ATTR_KEY,
    value_field: str = ATTR_VALUE,
) -> str:
    return _get_typed(client, collection, key, str, default, key_field, value_field)


def get_bool(
    client: MongoDBClient,
    collection: str,
    key: Any,
    default: bool = False,
    *,
    key_field: str = ATTR_KEY,
    value_field: str = ATTR_VALUE,
) -> bool:
    return _get_typed(client, collection, key, bool, default, key_field, value_field)


def get_object(
    client: MongoDBClient,
    collection: str,
    key: Any,
    cls: type[M],
    *,
    key_field: str = ATTR_KEY,
    value_field: str = ATTR_VALUE,
) -> M:
    """
    Get a domain object by key.

    Raises:
        KeyNotFoundError: If key not found
        ValueTypeError: If the stored value is not a valid cls
    """
    document = get_document(client, collection, key, key_field)
    if document is None:
        raise _not_found(collection, key)
    return decode_value(document.get(value_field), cls)


def get_objects(
    client: MongoDBClient,
    collection: str,
    key: Any,
    cls: type[M],
    *,
    key_field: str = ATTR_KEY,
    value_field: str = ATTR_VALUE,
) -> list[M]:
    """Decode the value of every record matching a key."""
    return [
        decode_value(document.get(value_field), cls)
        for document in get_documents(client, collection, key, key_field)
    ]


def get_object_json(
    client: MongoDBClient, collection: str, key: Any, *, key_field: str = ATTR_KEY
) -> str | None:
    """
    Get the whole record as extended JSON.

    Returns:
        JSON text, None if key not found
    """
    document = get_document(client, collection, key, key_field)
    if document is None:
        return None
    return document_to_json(document)


def get_list(
    client: MongoDBClient,
    collection: str,
    key: Any,
    item_type: Any = None,
    *,
    key_field: str = ATTR_KEY,
    value_field: str = ATTR_VALUE,
) -> list[Any] | None:
    """
    Get a stored sequence with each element decoded into item_type.

    Returns:
        Decoded list ([] for an empty stored sequence), None if key not found

    Raises:
        ValueTypeError: If the value is not a sequence or an element does not decode
    """
    document = get_document(client, collection, key, key_field)
    if document is None:
        return None
    return decode_list(document.get(value_field), item_type)
