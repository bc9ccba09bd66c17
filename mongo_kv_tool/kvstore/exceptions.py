"""
Custom exceptions for kvstore operations.
"""


class KVStoreError(Exception):
    """Base exception for kvstore operations."""

    pass


class KeyNotFoundError(KVStoreError):
    """Key does not exist."""

    pass


class ValueTypeError(KVStoreError):
    """Stored value cannot be decoded into the requested type."""

    pass


class StoreConnectionError(KVStoreError):
    """MongoDB server is unreachable."""

    pass


class StoreOperationError(KVStoreError):
    """MongoDB rejected a command or write."""

    pass
