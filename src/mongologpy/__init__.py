"""Store Python log records as structured MongoDB documents."""

from mongologpy.adapters.logging import (
    ContextProvider,
    ExtendedMongoHandler,
    HandlerState,
    MongoHandler,
    record_to_event,
)
from mongologpy.adapters.logging_context import (
    clear_log_context,
    get_log_context,
    log_context,
    set_log_context,
    update_log_context,
)
from mongologpy.adapters.pattern_layout import (
    JsonPatternFormatter,
    MongoPatternLayoutHandler,
)
from mongologpy.adapters.storage.in_memory import InMemoryClientFactory
from mongologpy.adapters.storage.mongodb import MongoSink, SinkState
from mongologpy.core.bsonify import (
    Bsonifier,
    BsonifierKind,
    EventBsonifier,
    create_bsonifier,
    register_bsonifier,
)
from mongologpy.core.config import MongoHandlerConfig
from mongologpy.core.errors import (
    AuthenticationError,
    CollectingErrorReporter,
    ConfigurationError,
    ErrorCategory,
    ErrorReporter,
    LoggingErrorReporter,
    MongoLogError,
    StoreConnectionError,
    WriteFailure,
)
from mongologpy.core.models import Level, LogEvent
from mongologpy.core.topology import resolve_topology

__all__ = [
    "AuthenticationError",
    "Bsonifier",
    "BsonifierKind",
    "CollectingErrorReporter",
    "ConfigurationError",
    "ContextProvider",
    "ErrorCategory",
    "ErrorReporter",
    "EventBsonifier",
    "ExtendedMongoHandler",
    "HandlerState",
    "InMemoryClientFactory",
    "JsonPatternFormatter",
    "Level",
    "LogEvent",
    "LoggingErrorReporter",
    "MongoHandler",
    "MongoHandlerConfig",
    "MongoLogError",
    "MongoPatternLayoutHandler",
    "MongoSink",
    "SinkState",
    "StoreConnectionError",
    "WriteFailure",
    "clear_log_context",
    "create_bsonifier",
    "get_log_context",
    "log_context",
    "record_to_event",
    "register_bsonifier",
    "resolve_topology",
    "set_log_context",
    "update_log_context",
]
