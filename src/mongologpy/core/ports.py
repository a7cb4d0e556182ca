"""Port interfaces for the document store.

The sink depends only on these protocols. ``pymongo.MongoClient`` and its
database/collection objects satisfy them, as do the in-memory adapters.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from mongologpy.core.document import Document
from mongologpy.core.models import Credentials, Endpoint


@runtime_checkable
class CollectionPort(Protocol):
    """Port for a bound collection handle."""

    def insert_one(self, document: Document) -> Any:
        """Insert a single document."""
        ...

    def with_options(self, *, write_concern: Any = None) -> "CollectionPort":
        """Return a handle to the same collection with different options."""
        ...


@runtime_checkable
class DatabasePort(Protocol):
    """Port for a database namespace."""

    def get_collection(self, name: str) -> CollectionPort:
        """Return a handle to the named collection."""
        ...

    def command(self, command: str) -> Mapping[str, Any]:
        """Run a database command such as ``ping``."""
        ...


@runtime_checkable
class ClientPort(Protocol):
    """Port for a live store connection."""

    def get_database(self, name: str) -> DatabasePort:
        """Return the named database."""
        ...

    def close(self) -> None:
        """Release the connection."""
        ...


# Builds a client for the given endpoints, credentials and client options.
ClientFactory = Callable[
    [Sequence[Endpoint], Credentials | None, Mapping[str, Any]], ClientPort
]
