"""MongoDB sink: connection lifecycle and isolated per-document inserts."""

import logging
import threading
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from bson.errors import BSONError
from pymongo import MongoClient
from pymongo.errors import ConfigurationError as PyMongoConfigurationError
from pymongo.errors import OperationFailure, PyMongoError
from pymongo.write_concern import WriteConcern

from mongologpy.core.document import Document
from mongologpy.core.errors import (
    AuthenticationError,
    ConfigurationError,
    ErrorReporter,
    LoggingErrorReporter,
    MongoLogError,
    StoreConnectionError,
    WriteFailure,
)
from mongologpy.core.models import Credentials, Endpoint
from mongologpy.core.ports import ClientFactory, ClientPort, CollectionPort

logger = logging.getLogger(__name__)

_AUTHENTICATION_FAILED = 18

_NAMED_WRITE_CONCERNS: dict[str, dict[str, Any]] = {
    "ACKNOWLEDGED": {"w": 1},
    "SAFE": {"w": 1},
    "W1": {"w": 1},
    "UNACKNOWLEDGED": {"w": 0},
    "NORMAL": {"w": 0},
    "W2": {"w": 2},
    "W3": {"w": 3},
    "MAJORITY": {"w": "majority"},
    "JOURNALED": {"w": 1, "j": True},
    "JOURNAL_SAFE": {"w": 1, "j": True},
    "FSYNC_SAFE": {"w": 1, "j": True},
}


def parse_write_concern(name: str) -> WriteConcern:
    """Convert a durability setting such as ``"MAJORITY"`` or ``"2"``.

    Raises:
        ConfigurationError: If the name is not recognised.
    """
    key = name.strip().upper()
    if key in _NAMED_WRITE_CONCERNS:
        return WriteConcern(**_NAMED_WRITE_CONCERNS[key])
    if key.isdigit():
        return WriteConcern(w=int(key))
    known = ", ".join(sorted(_NAMED_WRITE_CONCERNS))
    raise ConfigurationError(
        f"Unknown write concern {name!r}; expected an integer or one of: {known}"
    )


def pymongo_client_factory(
    endpoints: Sequence[Endpoint],
    credentials: Credentials | None,
    options: Mapping[str, Any],
) -> MongoClient:
    """Create a ``MongoClient`` for the endpoints.

    Several endpoints are handed to the driver as a seed list, from which it
    discovers the replica set.
    """
    kwargs: dict[str, Any] = dict(options)
    if credentials is not None:
        kwargs.update(
            username=credentials.user_name,
            password=credentials.password,
            authSource=credentials.source,
        )
    return MongoClient(host=[str(e) for e in endpoints], **kwargs)


def _translate_connect_error(
    exc: Exception, endpoints: Sequence[Endpoint]
) -> MongoLogError:
    where = ", ".join(str(e) for e in endpoints)
    # Client option validators raise ValueError or TypeError
    if isinstance(exc, (PyMongoConfigurationError, ValueError, TypeError)):
        return ConfigurationError(
            f"Invalid client configuration for {where}: {exc}", cause=exc
        )
    if isinstance(exc, OperationFailure) and (
        exc.code == _AUTHENTICATION_FAILED
        or (exc.details or {}).get("codeName") == "AuthenticationFailed"
    ):
        return AuthenticationError(f"Authentication to {where} failed", cause=exc)
    return StoreConnectionError(f"Could not connect to MongoDB at {where}", cause=exc)


class SinkState(Enum):
    """Lifecycle state of a ``MongoSink``."""

    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    READY = "ready"
    CLOSED = "closed"


class MongoSink:
    """Owns the store connection and inserts one document at a time.

    ``connect`` is the only method that raises. ``publish`` reports insert
    failures through the error reporter and drops the document; there is no
    retry and no buffering. ``publish`` is safe to call from many threads;
    the lock only guards the state and handle swap, inserts run outside it.
    """

    def __init__(
        self,
        database_name: str,
        collection_name: str,
        write_concern: str | None = None,
        client_factory: ClientFactory | None = None,
        client_options: Mapping[str, Any] | None = None,
        error_reporter: ErrorReporter | None = None,
    ) -> None:
        self._database_name = database_name
        self._collection_name = collection_name
        self._write_concern = write_concern
        self._client_factory = client_factory or pymongo_client_factory
        self._client_options = dict(client_options or {})
        self._reporter = error_reporter or LoggingErrorReporter()
        self._lock = threading.RLock()
        self._state = SinkState.UNCONNECTED
        self._client: ClientPort | None = None
        self._collection: CollectionPort | None = None

    @property
    def state(self) -> SinkState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is SinkState.READY

    @property
    def collection(self) -> CollectionPort | None:
        """The bound collection handle, with any write concern applied."""
        return self._collection

    def connect(
        self,
        endpoints: Sequence[Endpoint],
        credentials: Credentials | None = None,
    ) -> None:
        """Connect, verify the connection and bind the collection.

        On failure the sink stays unconnected.

        Raises:
            ConfigurationError: No endpoints, bad write concern or client options.
            AuthenticationError: The credentials were rejected.
            StoreConnectionError: The endpoints could not be reached, or the
                client failed in any other way.
        """
        if not endpoints:
            raise ConfigurationError("Cannot connect without at least one endpoint")
        concern = (
            parse_write_concern(self._write_concern)
            if self._write_concern is not None
            else None
        )

        with self._lock:
            self._release()
            self._state = SinkState.CONNECTING
            client: ClientPort | None = None
            try:
                client = self._client_factory(
                    endpoints, credentials, self._client_options
                )
                database = client.get_database(self._database_name)
                # Drivers connect lazily; ping so failures surface here
                database.command("ping")
                collection = database.get_collection(self._collection_name)
                if concern is not None:
                    collection = collection.with_options(write_concern=concern)
            except Exception as exc:
                self._state = SinkState.UNCONNECTED
                if client is not None:
                    client.close()
                if isinstance(exc, MongoLogError):
                    raise
                raise _translate_connect_error(exc, endpoints) from exc

            self._client = client
            self._collection = collection
            self._state = SinkState.READY
        logger.debug(
            "Connected to %s, writing to %s.%s",
            ", ".join(str(e) for e in endpoints),
            self._database_name,
            self._collection_name,
        )

    def publish(self, document: Document | None) -> None:
        """Insert ``document``; a no-op unless the sink is ready."""
        if document is None:
            return
        with self._lock:
            if self._state is not SinkState.READY:
                return
            collection = self._collection
        assert collection is not None
        try:
            collection.insert_one(document)
        except (PyMongoError, BSONError) as exc:
            self._reporter.report(
                WriteFailure("Failed to insert document to MongoDB", cause=exc)
            )

    def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        with self._lock:
            self._release()
            self._state = SinkState.CLOSED

    def _release(self) -> None:
        client, self._client, self._collection = self._client, None, None
        if client is not None:
            client.close()
            logger.debug("Closed MongoDB connection")
