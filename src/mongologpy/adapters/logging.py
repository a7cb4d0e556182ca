"""Python logging handler adapter for mongologpy.

This adapter bridges Python's standard library logging module to MongoDB.
Each LogRecord is converted to a LogEvent, turned into a document by the
configured bsonifier and inserted by a MongoSink.
"""

import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from mongologpy.adapters.logging_context import get_log_context
from mongologpy.adapters.storage.mongodb import MongoSink
from mongologpy.core.bsonify import Bsonifier, create_bsonifier
from mongologpy.core.config import MongoHandlerConfig, parse_root_level_properties
from mongologpy.core.document import Document
from mongologpy.core.errors import (
    ErrorReporter,
    LoggingErrorReporter,
    MongoLogError,
)
from mongologpy.core.host import resolve_host_identity
from mongologpy.core.models import (
    HostIdentity,
    Level,
    LocationInfo,
    LogEvent,
    ThrowableInfo,
)
from mongologpy.core.ports import ClientFactory
from mongologpy.core.topology import resolve_topology

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

# Records from these loggers are never stored: our own diagnostics and the
# driver's command logging would otherwise feed back into the store.
_IGNORED_LOGGERS = ("mongologpy", "pymongo")

_UNKNOWN_FILE = "(unknown file)"
_UNKNOWN_FUNCTION = "(unknown function)"

ContextProvider = Callable[[], Mapping[str, Any]]


def _is_ignored(name: str) -> bool:
    return any(name == n or name.startswith(n + ".") for n in _IGNORED_LOGGERS)


def _record_message(record: logging.LogRecord) -> Any:
    # A mapping logged without args is kept as a sub-document
    if not record.args and isinstance(record.msg, Mapping):
        return dict(record.msg)
    return record.getMessage()


def _record_location(record: logging.LogRecord) -> LocationInfo | None:
    if not record.pathname or record.pathname == _UNKNOWN_FILE:
        return None
    return LocationInfo(
        file_name=record.filename,
        method=None if record.funcName == _UNKNOWN_FUNCTION else record.funcName,
        line_number=record.lineno,
        class_name=record.module,
    )


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_LOGRECORD_ATTRS and not key.startswith("_")
    }


def record_to_event(
    record: logging.LogRecord,
    properties: Mapping[str, Any] | None = None,
) -> LogEvent:
    """Convert a stdlib LogRecord into a LogEvent.

    Args:
        record: The record to convert.
        properties: Context properties to attach to the event.

    Returns:
        LogEvent with timestamp, level, thread, message, logger name, call
        location and, when the record carries one, the exception chain.
    """
    throwable = None
    if record.exc_info and record.exc_info[1] is not None:
        throwable = ThrowableInfo.from_exception(record.exc_info[1])
    return LogEvent(
        timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
        level=Level.from_levelno(record.levelno),
        thread_name=record.threadName,
        message=_record_message(record),
        logger_name=record.name,
        location=_record_location(record),
        throwable=throwable,
        properties=dict(properties) if properties else None,
    )


class HandlerState(Enum):
    """Lifecycle state of a ``MongoHandler``."""

    IDLE = "idle"
    READY = "ready"
    FAILED = "failed"
    CLOSED = "closed"


class MongoHandler(logging.Handler):
    """Logging handler that stores log records as MongoDB documents.

    Records are stored as structured documents, not formatted text, so the
    handler needs no Formatter. Insert failures are reported through the
    error reporter and the record is dropped; logging calls never raise.

    Example:
        ```python
        from mongologpy import MongoHandler

        handler = MongoHandler(hostname="db1 db2", write_concern="MAJORITY")
        logging.getLogger().addHandler(handler)
        ```

    With ``logging.config.dictConfig``::

        "handlers": {
            "mongo": {
                "class": "mongologpy.MongoHandler",
                "hostname": "localhost",
                "database_name": "app",
            }
        }
    """

    def __init__(
        self,
        config: MongoHandlerConfig | None = None,
        *,
        bsonifier: Bsonifier | None = None,
        context_provider: ContextProvider | None = get_log_context,
        include_extra: bool = True,
        error_reporter: ErrorReporter | None = None,
        client_factory: ClientFactory | None = None,
        host_identity: HostIdentity | None = None,
        auto_activate: bool = True,
        **options: Any,
    ) -> None:
        """Initialize the handler.

        Args:
            config: Connection settings. Defaults to MongoHandlerConfig().
            bsonifier: Strategy used instead of the one named in the config.
            context_provider: Callable returning context properties for each
                record. Defaults to the log context of this package.
            include_extra: Whether ``extra=`` fields become properties.
            error_reporter: Error channel. Defaults to LoggingErrorReporter().
            client_factory: Builds store clients. Defaults to pymongo.
            host_identity: Host identity; resolved once here when omitted.
            auto_activate: Connect immediately.
            **options: MongoHandlerConfig fields overriding ``config``.
        """
        super().__init__()
        base = config or MongoHandlerConfig()
        self._config = replace(base, **options) if options else base
        self._host = host_identity or resolve_host_identity()
        self._bsonifier = bsonifier or create_bsonifier(
            self._config.bsonifier, self._host
        )
        self._context_provider = context_provider
        self._include_extra = include_extra
        self._reporter = error_reporter or LoggingErrorReporter()
        self._client_factory = client_factory
        self._state_lock = threading.RLock()
        self._state = HandlerState.IDLE
        self._sink: MongoSink | None = None
        if auto_activate:
            self.activate()

    @property
    def config(self) -> MongoHandlerConfig:
        return self._config

    @property
    def state(self) -> HandlerState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is HandlerState.READY

    @property
    def sink(self) -> MongoSink | None:
        return self._sink

    @property
    def bsonifier(self) -> Bsonifier:
        return self._bsonifier

    @property
    def host_identity(self) -> HostIdentity:
        return self._host

    def activate(self) -> bool:
        """Resolve the topology and connect the sink.

        Any previous connection is closed first, so this also re-activates a
        closed handler. Failures are reported; with ``strict`` set they are
        raised as well.

        Returns:
            True when the handler is ready to store records.

        Raises:
            MongoLogError: On failure, only when the config is strict.
        """
        config = self._config
        with self._state_lock:
            self._discard_sink()
            self._state = HandlerState.IDLE

            topology = resolve_topology(config.hostname, config.port, self._reporter)
            if not topology.ok:
                self._state = HandlerState.FAILED
                if config.strict:
                    raise topology.errors[0]
                return False

            sink = MongoSink(
                config.database_name,
                config.collection_name,
                write_concern=config.write_concern,
                client_factory=self._client_factory,
                client_options=config.client_options,
                error_reporter=self._reporter,
            )
            try:
                sink.connect(topology.endpoints, config.credentials)
            except MongoLogError as exc:
                self._reporter.report(exc)
                self._state = HandlerState.FAILED
                if config.strict:
                    raise
                return False

            self._sink = sink
            self._state = HandlerState.READY
        return True

    def emit(self, record: logging.LogRecord) -> None:
        """Store a log record.

        Args:
            record: The log record to emit.
        """
        if _is_ignored(record.name) or self._state is not HandlerState.READY:
            return
        try:
            event = record_to_event(record, self._properties_for(record))
            document = self._bsonifier.bsonify(event)
        except Exception:
            self.handleError(record)
            return
        self.publish_document(document)

    def publish(self, event: LogEvent | None) -> None:
        """Bsonify an event and store it."""
        self.publish_document(self._bsonifier.bsonify(event))

    def publish_document(self, document: Document | None) -> None:
        """Store a finished document; a no-op unless the handler is ready."""
        if document is None:
            return
        with self._state_lock:
            if self._state is not HandlerState.READY:
                return
            sink = self._sink
        assert sink is not None
        sink.publish(document)

    def close(self) -> None:
        """Close the store connection. Safe to call in any state, repeatedly."""
        with self._state_lock:
            self._discard_sink()
            self._state = HandlerState.CLOSED
        super().close()

    def _discard_sink(self) -> None:
        sink, self._sink = self._sink, None
        if sink is not None:
            sink.close()

    def _properties_for(self, record: logging.LogRecord) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        if self._context_provider is not None:
            properties.update(self._context_provider())
        if self._include_extra:
            properties.update(_record_extras(record))
        return properties


class ExtendedMongoHandler(MongoHandler):
    """MongoHandler that adds constant fields to the top level of every document.

    The constants come from the ``root_level_properties`` setting, either a
    mapping or a string such as ``"app = billing & env=prod"``. They are
    re-read on every activation and override same-named event fields.
    """

    def __init__(self, config: MongoHandlerConfig | None = None, **kwargs: Any) -> None:
        self._constants: dict[str, str] = {}
        super().__init__(config, **kwargs)

    @property
    def root_properties(self) -> dict[str, str]:
        return dict(self._constants)

    def activate(self) -> bool:
        source = self.config.root_level_properties
        if isinstance(source, str):
            self._constants = parse_root_level_properties(source)
        else:
            self._constants = {str(k): str(v) for k, v in (source or {}).items()}
        return super().activate()

    def publish_document(self, document: Document | None) -> None:
        if document is not None and self._constants:
            document.update(self._constants)
        super().publish_document(document)
