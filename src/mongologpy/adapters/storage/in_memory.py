"""In-memory store adapters implementing the client, database and collection ports."""

import copy
import threading
from collections.abc import Mapping, Sequence
from typing import Any

from mongologpy.core.document import Document
from mongologpy.core.models import Credentials, Endpoint


class InMemoryCollection:
    """In-memory implementation of CollectionPort.

    Stores deep copies of inserted documents in a list. Handles returned by
    ``with_options`` share the same list. Suitable for testing and for
    running without a database.
    """

    def __init__(
        self,
        name: str,
        documents: list[Document] | None = None,
        write_concern: Any = None,
    ) -> None:
        self.name = name
        self.write_concern = write_concern
        self._documents: list[Document] = [] if documents is None else documents
        self._lock = threading.Lock()

    def insert_one(self, document: Document) -> None:
        """Store a copy of the document."""
        with self._lock:
            self._documents.append(copy.deepcopy(document))

    def with_options(self, *, write_concern: Any = None) -> "InMemoryCollection":
        """Return a handle over the same documents with another write concern."""
        view = InMemoryCollection(self.name, self._documents, write_concern)
        view._lock = self._lock
        return view

    def find(self) -> list[Document]:
        """Return all stored documents in insertion order."""
        with self._lock:
            return list(self._documents)

    def count_documents(self) -> int:
        with self._lock:
            return len(self._documents)


class InMemoryDatabase:
    """In-memory implementation of DatabasePort."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._collections: dict[str, InMemoryCollection] = {}

    def get_collection(self, name: str) -> InMemoryCollection:
        if name not in self._collections:
            self._collections[name] = InMemoryCollection(name)
        return self._collections[name]

    def command(self, command: str) -> Mapping[str, Any]:
        return {"ok": 1.0}


class InMemoryClient:
    """In-memory implementation of ClientPort.

    Attributes:
        endpoints: Endpoints the client was created for.
        credentials: Credentials the client was created with.
        options: Client options the client was created with.
        closed: Whether ``close`` has been called.
    """

    def __init__(
        self,
        endpoints: Sequence[Endpoint] = (),
        credentials: Credentials | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> None:
        self.endpoints = tuple(endpoints)
        self.credentials = credentials
        self.options = dict(options or {})
        self.closed = False
        self._databases: dict[str, InMemoryDatabase] = {}

    def get_database(self, name: str) -> InMemoryDatabase:
        if name not in self._databases:
            self._databases[name] = InMemoryDatabase(name)
        return self._databases[name]

    def close(self) -> None:
        self.closed = True


class InMemoryClientFactory:
    """ClientFactory that hands out in-memory clients and remembers them.

    Example:
        ```python
        factory = InMemoryClientFactory()
        handler = MongoHandler(client_factory=factory)
        logging.getLogger().addHandler(handler)
        logging.getLogger().warning("hello")
        database = factory.last_client.get_database("mongologpy")
        database.get_collection("logevents").find()
        ```
    """

    def __init__(self) -> None:
        self.clients: list[InMemoryClient] = []

    def __call__(
        self,
        endpoints: Sequence[Endpoint],
        credentials: Credentials | None,
        options: Mapping[str, Any],
    ) -> InMemoryClient:
        client = InMemoryClient(endpoints, credentials, options)
        self.clients.append(client)
        return client

    @property
    def last_client(self) -> InMemoryClient:
        """The most recently created client.

        Raises:
            LookupError: If no client has been created yet.
        """
        if not self.clients:
            raise LookupError("No client has been created")
        return self.clients[-1]
