"""Fakes and builders shared by the test suites."""

from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from pymongo.errors import OperationFailure, PyMongoError, ServerSelectionTimeoutError

from mongologpy.adapters.storage.in_memory import (
    InMemoryClient,
    InMemoryClientFactory,
    InMemoryCollection,
    InMemoryDatabase,
)
from mongologpy.core.document import Document
from mongologpy.core.models import Credentials, Endpoint, Level, LogEvent

FIXED_TIME = datetime(2024, 5, 1, 12, 30, 45, tzinfo=timezone.utc)


def make_event(**overrides: Any) -> LogEvent:
    """Build a LogEvent with only timestamp and level set unless overridden."""
    values: dict[str, Any] = {"timestamp": FIXED_TIME, "level": Level.INFO}
    values.update(overrides)
    return LogEvent(**values)


def stored_documents(
    factory: InMemoryClientFactory,
    database: str = "mongologpy",
    collection: str = "logevents",
) -> list[Document]:
    """Documents inserted through the factory's most recent client."""
    return factory.last_client.get_database(database).get_collection(collection).find()


class FailingCollection(InMemoryCollection):
    """Collection whose inserts always fail with ``error``."""

    def __init__(self, error: Exception) -> None:
        super().__init__("failing")
        self.error = error
        self.attempts = 0

    def insert_one(self, document: Document) -> None:
        self.attempts += 1
        raise self.error

    def with_options(self, *, write_concern: Any = None) -> "FailingCollection":
        return self


class _ScriptedDatabase(InMemoryDatabase):
    def __init__(
        self,
        ping_error: PyMongoError | None,
        collection: InMemoryCollection | None,
    ) -> None:
        super().__init__("scripted")
        self._ping_error = ping_error
        self._collection = collection

    def command(self, command: str) -> Mapping[str, Any]:
        if self._ping_error is not None:
            raise self._ping_error
        return super().command(command)

    def get_collection(self, name: str) -> InMemoryCollection:
        if self._collection is not None:
            return self._collection
        return super().get_collection(name)


class _ScriptedClient(InMemoryClient):
    def __init__(self, database: InMemoryDatabase, *args: Any) -> None:
        super().__init__(*args)
        self._database = database

    def get_database(self, name: str) -> InMemoryDatabase:
        return self._database


class ScriptedClientFactory(InMemoryClientFactory):
    """Client factory whose clients fail to ping or hand out a fixed collection."""

    def __init__(
        self,
        ping_error: PyMongoError | None = None,
        collection: InMemoryCollection | None = None,
    ) -> None:
        super().__init__()
        self.ping_error = ping_error
        self.collection = collection

    def __call__(
        self,
        endpoints: Sequence[Endpoint],
        credentials: Credentials | None,
        options: Mapping[str, Any],
    ) -> InMemoryClient:
        database = _ScriptedDatabase(self.ping_error, self.collection)
        client = _ScriptedClient(database, endpoints, credentials, options)
        self.clients.append(client)
        return client


def unreachable() -> ServerSelectionTimeoutError:
    return ServerSelectionTimeoutError("localhost:1: [Errno 111] Connection refused")


def bad_credentials() -> OperationFailure:
    return OperationFailure(
        "Authentication failed.",
        code=18,
        details={"ok": 0, "code": 18, "codeName": "AuthenticationFailed"},
    )
