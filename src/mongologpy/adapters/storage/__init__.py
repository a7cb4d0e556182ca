"""Storage adapters implementing core ports."""

from mongologpy.adapters.storage.in_memory import (
    InMemoryClient,
    InMemoryClientFactory,
    InMemoryCollection,
    InMemoryDatabase,
)
from mongologpy.adapters.storage.mongodb import (
    MongoSink,
    SinkState,
    parse_write_concern,
    pymongo_client_factory,
)

__all__ = [
    "InMemoryClient",
    "InMemoryClientFactory",
    "InMemoryCollection",
    "InMemoryDatabase",
    "MongoSink",
    "SinkState",
    "parse_write_concern",
    "pymongo_client_factory",
]
