"""
Key handling for kvstore lookups.

Keys are either exact values (strings, numbers, anything BSON can compare) or
CaseInsensitiveKey wrappers, which become anchored case-insensitive patterns.
"""

from dataclasses import dataclass
from typing import Any

from ..constants import ATTR_KEY
from ..models import CaseInsensitiveKey


def normalize_key(key: Any) -> Any:
    """
    Convert a caller key into the token used in a query filter.

    Args:
        key: Exact key value or CaseInsensitiveKey

    Returns:
        Compiled pattern for case-insensitive keys, the key itself otherwise
    """
    if isinstance(key, CaseInsensitiveKey):
        return key.compile()
    return key


def storage_key(key: Any) -> Any:
    """
    Value written into the key field of a new record.

    Args:
        key: Exact key value or CaseInsensitiveKey

    Returns:
        Plain key value (never a pattern)
    """
    if isinstance(key, CaseInsensitiveKey):
        return key.text
    return key


@dataclass(frozen=True)
class KeyDescriptor:
    """Field name and key value used to build a lookup filter."""

    key: Any
    field: str = ATTR_KEY

    def to_filter(self) -> dict[str, Any]:
        return {self.field: normalize_key(self.key)}
