"""
Value encoding and decoding for kvstore records.

Domain objects (StoredObject subclasses) are written as embedded documents.
Reads also accept the older JSON-text representation of an object. Scalars
are decoded with strict pydantic validation: no float to int narrowing and no
bool/int mixing.
"""

from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from bson import json_util
from pydantic import TypeAdapter, ValidationError

from ..constants import ATTR_KEY, ATTR_VALUE
from ..exceptions import ValueTypeError
from ..models import StoredObject, StoredRecord, ValueKind
from .keys import storage_key


def classify_value(raw: Any) -> ValueKind:
    """
    Tag a raw stored value with its shape.

    Args:
        raw: Value as read from MongoDB

    Returns:
        ValueKind for the value
    """
    if isinstance(raw, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(raw, Mapping):
        return ValueKind.EMBEDDED_DOCUMENT
    if isinstance(raw, str):
        stripped = raw.strip()
        if stripped.startswith("{") and stripped.endswith("}"):
            return ValueKind.ENCODED_OBJECT
    return ValueKind.SCALAR


def encode_value(value: Any) -> Any:
    """
    Convert an application value into its stored form.

    Args:
        value: StoredObject, collection or scalar

    Returns:
        BSON-friendly value
    """
    if isinstance(value, StoredObject):
        return value.to_document()
    if isinstance(value, Mapping):
        return {k: encode_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [encode_value(v) for v in value]
    return value


def record_to_document(record: StoredRecord | Mapping[str, Any]) -> dict[str, Any]:
    """Build the document inserted for a record."""
    if isinstance(record, StoredRecord):
        return {ATTR_KEY: storage_key(record.key), ATTR_VALUE: encode_value(record.value)}
    return dict(record)


def is_stored_object_type(target: Any) -> bool:
    return isinstance(target, type) and issubclass(target, StoredObject)


@lru_cache(maxsize=128)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def _type_name(target: Any) -> str:
    return getattr(target, "__name__", repr(target))


def decode_value(raw: Any, target: Any = None) -> Any:
    """
    Convert a stored value into the requested type.

    Args:
        raw: Value as read from MongoDB
        target: Requested type (None or Any returns the raw value)

    Returns:
        Decoded value

    Raises:
        ValueTypeError: If the value cannot be represented as target
    """
    if target is None or target is Any:
        return raw
    if is_stored_object_type(target):
        return _decode_object(raw, target)
    try:
        return _adapter(target).validate_python(raw, strict=True)
    except ValidationError as e:
        raise ValueTypeError(
            f"Cannot decode {type(raw).__name__} value as {_type_name(target)}"
        ) from e


def _decode_object(raw: Any, target: type[StoredObject]) -> StoredObject:
    if isinstance(raw, target):
        return raw

    kind = classify_value(raw)
    try:
        if kind is ValueKind.EMBEDDED_DOCUMENT:
            return target.model_validate(dict(raw))
        if kind is ValueKind.ENCODED_OBJECT:
            return target.model_validate_json(raw)
    except ValidationError as e:
        raise ValueTypeError(f"Stored value is not a valid {target.__name__}: {e}") from e

    raise ValueTypeError(f"Cannot decode {kind.value} value as {target.__name__}")


def decode_list(raw: Any, item_type: Any = None) -> list[Any]:
    """
    Decode a stored sequence element by element.

    Raises:
        ValueTypeError: If raw is not a sequence or an element does not decode
    """
    if classify_value(raw) is not ValueKind.SEQUENCE:
        raise ValueTypeError(f"Stored value is a {type(raw).__name__}, not a sequence")
    return [decode_value(item, item_type) for item in raw]


def document_to_json(document: Mapping[str, Any]) -> str:
    """Serialize a document to MongoDB extended JSON."""
    return json_util.dumps(document)


def json_to_document(text: str) -> dict[str, Any]:
    """
    Parse MongoDB extended JSON into a document.

    Raises:
        ValueTypeError: If text is not a JSON object
    """
    try:
        document = json_util.loads(text)
    except ValueError as e:
        raise ValueTypeError(f"Invalid JSON document: {e}") from e
    if not isinstance(document, dict):
        raise ValueTypeError(f"JSON value is a {type(document).__name__}, not an object")
    return document
