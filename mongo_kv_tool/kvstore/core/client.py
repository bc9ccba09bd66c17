"""
MongoDB client wrapper with error handling.
"""

from collections.abc import Iterator, Sequence
from typing import Any, NoReturn

from bson.errors import BSONError
from pymongo import MongoClient
from pymongo.change_stream import CollectionChangeStream
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, OperationFailure, PyMongoError

from ..constants import DEFAULT_DATABASE, DEFAULT_URI, PING_COMMAND
from ..exceptions import (
    KVStoreError,
    StoreConnectionError,
    StoreOperationError,
    ValueTypeError,
)
from ..logging_config import get_logger

logger = get_logger(__name__)

_DRIVER_ERRORS = (PyMongoError, BSONError)


class MongoDBClient:
    """MongoDB client wrapper with error handling."""

    def __init__(
        self,
        uri: str = DEFAULT_URI,
        database_name: str = DEFAULT_DATABASE,
        client: MongoClient | None = None,
        **client_kwargs: Any,
    ):
        """
        Initialize MongoDB client.

        The driver connects lazily; constructing the wrapper does not touch
        the network.

        Args:
            uri: MongoDB connection URI
            database_name: Database holding the collections
            client: Existing driver client to share (its pool is not closed by us)
            **client_kwargs: Extra MongoClient options (timeouts, TLS, ...)
        """
        self.uri = uri
        self.database_name = database_name
        self._owns_client = client is None
        try:
            self.client = client if client is not None else MongoClient(uri, **client_kwargs)
            self.database: Database = self.client[database_name]
        except _DRIVER_ERRORS as e:
            self._handle_error(e)

    def collection(self, name: str) -> Collection:
        """Return the driver collection (created by MongoDB on first write)."""
        return self.database[name]

    def get_database(self, database_name: str) -> "MongoDBClient":
        """
        Wrap another database on the same connection.

        Args:
            database_name: Name of the sibling database

        Returns:
            MongoDBClient sharing this client's connection pool
        """
        return MongoDBClient(self.uri, database_name, client=self.client)

    def find(
        self,
        collection: str,
        query: dict[str, Any] | None = None,
        projection: dict[str, Any] | None = None,
    ) -> Iterator[dict[str, Any]]:
        """
        Iterate over documents matching a query.

        The cursor is consumed lazily; call again to restart.

        Args:
            collection: Collection name
            query: Filter document (None matches everything)
            projection: Optional projection

        Yields:
            Matching documents

        Raises:
            KVStoreError: For MongoDB errors
        """
        logger.debug(f"find {collection} {query}")
        try:
            yield from self.collection(collection).find(query or {}, projection)
        except _DRIVER_ERRORS as e:
            self._handle_error(e)

    def find_one(self, collection: str, query: dict[str, Any]) -> dict[str, Any] | None:
        """
        Get the first document matching a query.

        Returns:
            Document if found, None otherwise

        Raises:
            KVStoreError: For MongoDB errors
        """
        logger.debug(f"find_one {collection} {query}")
        try:
            return self.collection(collection).find_one(query)
        except _DRIVER_ERRORS as e:
            self._handle_error(e)

    def find_one_and_delete(
        self, collection: str, query: dict[str, Any]
    ) -> dict[str, Any] | None:
        """
        Atomically remove the first document matching a query.

        Returns:
            Removed document if one matched, None otherwise

        Raises:
            KVStoreError: For MongoDB errors
        """
        logger.debug(f"find_one_and_delete {collection} {query}")
        try:
            return self.collection(collection).find_one_and_delete(query)
        except _DRIVER_ERRORS as e:
            self._handle_error(e)

    def find_one_and_replace(
        self, collection: str, query: dict[str, Any], replacement: dict[str, Any]
    ) -> dict[str, Any] | None:
        """
        Atomically replace the first document matching a query.

        The replaced document keeps its _id.

        Returns:
            Document as it was before the replacement, None if nothing matched

        Raises:
            KVStoreError: For MongoDB errors
        """
        logger.debug(f"find_one_and_replace {collection} {query}")
        try:
            return self.collection(collection).find_one_and_replace(query, replacement)
        except _DRIVER_ERRORS as e:
            self._handle_error(e)

    def insert_one(self, collection: str, document: dict[str, Any]) -> Any:
        """
        Insert a document.

        Returns:
            Inserted _id

        Raises:
            KVStoreError: For MongoDB errors
        """
        logger.debug(f"insert_one {collection}")
        try:
            return self.collection(collection).insert_one(document).inserted_id
        except _DRIVER_ERRORS as e:
            self._handle_error(e)

    def insert_many(self, collection: str, documents: Sequence[dict[str, Any]]) -> list[Any]:
        """
        Insert documents in order.

        Returns:
            Inserted _ids

        Raises:
            KVStoreError: For MongoDB errors
        """
        logger.debug(f"insert_many {collection} ({len(documents)} documents)")
        try:
            return list(self.collection(collection).insert_many(documents).inserted_ids)
        except _DRIVER_ERRORS as e:
            self._handle_error(e)

    def update_one(
        self, collection: str, query: dict[str, Any], update: dict[str, Any]
    ) -> int:
        """
        Apply an update to the first document matching a query.

        Returns:
            Number of matched documents (0 or 1)

        Raises:
            KVStoreError: For MongoDB errors
        """
        logger.debug(f"update_one {collection} {query}")
        try:
            return self.collection(collection).update_one(query, update).matched_count
        except _DRIVER_ERRORS as e:
            self._handle_error(e)

    def delete_one(self, collection: str, query: dict[str, Any]) -> int:
        """
        Delete the first document matching a query.

        Returns:
            Number of deleted documents (0 or 1)

        Raises:
            KVStoreError: For MongoDB errors
        """
        logger.debug(f"delete_one {collection} {query}")
        try:
            return self.collection(collection).delete_one(query).deleted_count
        except _DRIVER_ERRORS as e:
            self._handle_error(e)

    def count(self, collection: str) -> int:
        """Count documents in a collection."""
        try:
            return self.collection(collection).count_documents({})
        except _DRIVER_ERRORS as e:
            self._handle_error(e)

    def watch_collection(
        self, collection: str, pipeline: list[dict[str, Any]] | None = None
    ) -> CollectionChangeStream:
        """
        Open a change stream on a collection.

        Requires a replica set or sharded cluster.

        Raises:
            KVStoreError: For MongoDB errors
        """
        try:
            return self.collection(collection).watch(pipeline)
        except _DRIVER_ERRORS as e:
            self._handle_error(e)

    def ping(self) -> dict[str, Any]:
        """
        Run the ping command against the database.

        Raises:
            StoreConnectionError: If the server cannot be reached
            KVStoreError: For other MongoDB errors
        """
        try:
            return self.database.command(PING_COMMAND)
        except _DRIVER_ERRORS as e:
            self._handle_error(e)

    def is_connected(self) -> bool:
        """
        Check that the server answers a ping.

        Returns:
            True if the ping succeeded, False on any store error
        """
        try:
            self.ping()
            return True
        except KVStoreError as e:
            logger.warning(f"MongoDB liveness probe failed: {e}")
            return False

    def close(self) -> None:
        """Close the driver client if this wrapper created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "MongoDBClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _handle_error(self, error: Exception) -> NoReturn:
        """
        Convert driver errors to kvstore exceptions.

        Args:
            error: Error raised by pymongo or bson

        Raises:
            StoreConnectionError: If the server is unreachable
            StoreOperationError: If the server rejected the command
            ValueTypeError: If a value cannot be encoded as BSON
            KVStoreError: For other errors
        """
        if isinstance(error, ConnectionFailure):
            raise StoreConnectionError(
                f"Cannot reach MongoDB at '{self.uri}': {error}"
            ) from error
        if isinstance(error, OperationFailure):
            raise StoreOperationError(
                f"MongoDB rejected the operation on '{self.database_name}': {error}"
            ) from error
        if isinstance(error, BSONError):
            raise ValueTypeError(f"Value cannot be stored as BSON: {error}") from error
        raise KVStoreError(f"MongoDB error: {error}") from error
