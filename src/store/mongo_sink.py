"""MongoDB document sink.

This module performs the bounded connect/ping handshake and writes one
document per call with a per-call timeout. Write failures surface as
``BulkCsvStoreError`` so the orchestrator can count them and move on.
"""

from __future__ import annotations

from typing import Any, Mapping

from core.constants import DEFAULT_CONNECT_TIMEOUT_SECONDS, DEFAULT_STORE_TIMEOUT_SECONDS
from core.errors import BulkCsvConnectionError, BulkCsvDependencyError, BulkCsvStoreError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class MongoDocumentSink:
    """Sink writing documents into one MongoDB collection."""

    def __init__(
        self,
        client: Any,
        database_name: str,
        collection_name: str,
        store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS,
    ) -> None:
        self._client = client
        self._database_name = database_name
        self._collection_name = collection_name
        self._collection = client[database_name][collection_name]
        self._store_timeout = store_timeout_seconds

    @property
    def namespace(self) -> str:
        return f"{self._database_name}.{self._collection_name}"

    def store(self, document: Mapping[str, str]) -> Any:
        """Insert one document.

        Args:
            document: Field-name to value mapping. Copied before insert so
                the driver's generated ``_id`` never leaks back to callers.

        Returns:
            Inserted document id.

        Raises:
            BulkCsvStoreError: If the insert fails or times out, or the
                document cannot be encoded as BSON.
        """
        pymongo = _import_pymongo()
        from bson.errors import BSONError

        try:
            with pymongo.timeout(self._store_timeout):
                result = self._collection.insert_one(dict(document))
        except (pymongo.errors.PyMongoError, BSONError) as error:
            raise BulkCsvStoreError(
                f"could not insert data into {self.namespace}: {error}"
            ) from error
        return result.inserted_id

    def ping(self, timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS) -> None:
        """Check that the server answers within the timeout.

        Raises:
            BulkCsvConnectionError: If the ping fails.
        """
        pymongo = _import_pymongo()
        try:
            with pymongo.timeout(timeout_seconds):
                self._client.admin.command("ping")
        except pymongo.errors.PyMongoError as error:
            raise BulkCsvConnectionError(f"could not ping MongoDB: {error}") from error

    def close(self) -> None:
        """Disconnect from the server."""
        pymongo = _import_pymongo()
        _LOGGER.info("mongo_disconnecting", namespace=self.namespace)
        try:
            self._client.close()
        except pymongo.errors.PyMongoError as error:
            _LOGGER.error("mongo_disconnect_failed", error=str(error))
            return
        _LOGGER.info("mongo_disconnected", namespace=self.namespace)


def connect_mongo_sink(
    mongo_uri: str,
    database_name: str,
    collection_name: str,
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
    store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS,
) -> MongoDocumentSink:
    """Connect to MongoDB and verify the server is reachable.

    Args:
        mongo_uri: MongoDB connection URI.
        database_name: Destination database.
        collection_name: Destination collection.
        connect_timeout_seconds: Bound on the connect and ping handshake.
        store_timeout_seconds: Bound on each insert.

    Returns:
        Connected sink.

    Raises:
        BulkCsvConnectionError: If the client cannot be created or pinged.
        BulkCsvDependencyError: If pymongo is missing.
    """
    _LOGGER.info("mongo_connecting", mongo_uri=_redact_uri(mongo_uri))
    client = _create_mongo_client(mongo_uri, connect_timeout_seconds)
    sink = MongoDocumentSink(client, database_name, collection_name, store_timeout_seconds)
    try:
        sink.ping(connect_timeout_seconds)
    except BulkCsvConnectionError:
        client.close()
        raise
    _LOGGER.info("mongo_connected", namespace=sink.namespace)
    return sink


def _create_mongo_client(mongo_uri: str, connect_timeout_seconds: float) -> Any:
    """Create a pymongo client bounded by the connect timeout.

    Raises:
        BulkCsvConnectionError: If the URI or client options are invalid.
    """
    pymongo = _import_pymongo()
    timeout_ms = int(connect_timeout_seconds * 1000)
    try:
        return pymongo.MongoClient(
            mongo_uri,
            connectTimeoutMS=timeout_ms,
            serverSelectionTimeoutMS=timeout_ms,
        )
    except pymongo.errors.PyMongoError as error:
        raise BulkCsvConnectionError(f"could not connect to MongoDB: {error}") from error


def _import_pymongo() -> Any:
    """Import pymongo lazily.

    Raises:
        BulkCsvDependencyError: If pymongo is not installed.
    """
    try:
        import pymongo
        import pymongo.errors
    except ImportError as error:
        raise BulkCsvDependencyError(
            "MongoDB support requires pymongo, but it is not installed. "
            "Install pymongo to ingest into MongoDB."
        ) from error
    return pymongo


def _redact_uri(mongo_uri: str) -> str:
    """Hide credentials embedded in a connection URI."""
    scheme, separator, remainder = mongo_uri.partition("://")
    if not separator or "@" not in remainder:
        return mongo_uri
    _credentials, _at, host_part = remainder.rpartition("@")
    return f"{scheme}://***@{host_part}"
